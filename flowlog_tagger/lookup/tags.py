from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from flowlog_tagger.core.sources import open_lines
from flowlog_tagger.core.validators import is_decimal, parse_non_negative, split_fields
from flowlog_tagger.models.records import UNTAGGED, LookupKey

logger = logging.getLogger(__name__)

LOOKUP_FIELDS = 3
UNTAGGED_RESULT: tuple[str, ...] = (UNTAGGED,)


def _numbered_rows(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    # Heurística: la primera línea es cabecera si su primer campo no es todo dígitos.
    numbered = enumerate(lines, start=1)
    first = next(numbered, None)
    if first is None:
        return numbered
    if is_decimal(first[1].split(",")[0].strip()):
        return itertools.chain([first], numbered)
    return numbered


def load_lookup_table(lines: Iterable[str]) -> dict[LookupKey, list[str]]:
    """Carga filas ``dstport,protocol,tag``; claves repetidas acumulan tags en orden."""

    table: dict[LookupKey, list[str]] = {}
    for line_number, line in _numbered_rows(lines):
        row = split_fields(line)
        if len(row) != LOOKUP_FIELDS:
            continue
        port_text, protocol, tag = row
        try:
            port = parse_non_negative(port_text)
        except ValueError:
            logger.warning(
                "lookup_row_skipped reason=invalid_port line=%d value=%r",
                line_number,
                port_text,
                extra={"event": "lookup_row_skipped", "line": line_number, "values": [port_text]},
            )
            continue
        table.setdefault(LookupKey.build(port, protocol), []).append(tag.strip())
    return table


class TagLookup:
    def __init__(self, table: Mapping[LookupKey, Iterable[str]] | None = None) -> None:
        frozen = {key: tuple(tags) for key, tags in (table or {}).items()}
        self._table = MappingProxyType(frozen)

    @classmethod
    def load(cls, lines: Iterable[str]) -> "TagLookup":
        return cls(load_lookup_table(lines))

    @classmethod
    def from_source(cls, location: str, encoding: str = "utf-8", timeout_s: float = 10.0) -> "TagLookup":
        with open_lines(location, encoding=encoding, timeout_s=timeout_s) as lines:
            lookup = cls.load(lines)
        logger.info("lookup_table_loaded source=%s keys=%d", location, len(lookup))
        return lookup

    @property
    def table(self) -> Mapping[LookupKey, tuple[str, ...]]:
        return self._table

    def lookup_key(self, key: LookupKey) -> tuple[str, ...]:
        return self._table.get(key, UNTAGGED_RESULT)

    def lookup(self, port: int, protocol: str) -> tuple[str, ...]:
        return self.lookup_key(LookupKey.build(port, protocol))

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)
