from __future__ import annotations

import re

DECIMAL_PATTERN = re.compile(r"[0-9]+")


def is_decimal(value: str) -> bool:
    """True sólo para dígitos ASCII; ``"+6"``, ``"-1"`` o ``"٣"`` no cuentan."""
    return bool(DECIMAL_PATTERN.fullmatch(value))


def split_fields(line: str) -> list[str]:
    """Separa una línea física por comas; los campos vacíos al final no cuentan.

    Las comillas no tienen significado: una comilla suelta sólo afecta a su línea.
    """
    fields = line.strip().split(",")
    while fields and not fields[-1]:
        fields.pop()
    return fields


def parse_non_negative(value: str) -> int:
    text = value.strip()
    if not is_decimal(text):
        raise ValueError(f"Entero no negativo inválido: {value!r}")
    return int(text)
