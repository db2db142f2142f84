from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Campos estructurados que los módulos pasan vía ``extra=``
EVENT_FIELDS = ("event", "source", "line", "reason", "values", "metrics")


class DiagnosticJsonFormatter(logging.Formatter):
    """Una línea JSON por registro, con los campos de evento cuando existen."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EVENT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Instala el canal de diagnóstico en el logger raíz.

    Siempre escribe a stderr; el reporte puede salir por stdout (``--output -``)
    y ambos flujos no deben mezclarse.
    """

    formatter = DiagnosticJsonFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(stream=sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())
