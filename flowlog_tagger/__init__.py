"""Clasificación y conteo de flow logs por etiqueta y por puerto/protocolo."""

__version__ = "0.1.0"
