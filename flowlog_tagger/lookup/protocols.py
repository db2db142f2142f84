from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from flowlog_tagger.core.sources import open_lines
from flowlog_tagger.core.validators import parse_non_negative, split_fields
from flowlog_tagger.models.records import UNCOMMON

logger = logging.getLogger(__name__)


def load_protocol_map(lines: Iterable[str]) -> dict[int, str]:
    """Carga ``número -> nombre`` desde CSV (columnas Decimal, Keyword, ...).

    La primera línea es siempre cabecera y se descarta sin inspeccionarla.
    Cada línea física es una fila independiente.
    """

    protocols: dict[int, str] = {}
    rows = iter(lines)
    next(rows, None)
    for line_number, line in enumerate(rows, start=2):
        row = split_fields(line)
        if len(row) < 2:
            continue
        try:
            number = parse_non_negative(row[0])
        except ValueError:
            logger.warning(
                "protocol_row_skipped reason=invalid_protocol_number line=%d value=%r",
                line_number,
                row[0],
                extra={"event": "protocol_row_skipped", "line": line_number, "values": [row[0]]},
            )
            continue
        protocols[number] = row[1].strip().lower()
    return protocols


class ProtocolResolver:
    def __init__(self, protocols: Mapping[int, str] | None = None) -> None:
        self._protocols = MappingProxyType(dict(protocols or {}))

    @classmethod
    def load(cls, lines: Iterable[str]) -> "ProtocolResolver":
        return cls(load_protocol_map(lines))

    @classmethod
    def from_source(cls, location: str, encoding: str = "utf-8", timeout_s: float = 10.0) -> "ProtocolResolver":
        with open_lines(location, encoding=encoding, timeout_s=timeout_s) as lines:
            resolver = cls.load(lines)
        logger.info("protocol_map_loaded source=%s entries=%d", location, len(resolver))
        return resolver

    @property
    def protocols(self) -> Mapping[int, str]:
        return self._protocols

    def resolve(self, protocol_number: int) -> str:
        return self._protocols.get(protocol_number, UNCOMMON)

    def __len__(self) -> int:
        return len(self._protocols)
