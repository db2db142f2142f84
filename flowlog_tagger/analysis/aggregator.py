from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from flowlog_tagger.config.settings import ParsingSettings
from flowlog_tagger.core.validators import parse_non_negative
from flowlog_tagger.lookup.protocols import ProtocolResolver
from flowlog_tagger.lookup.tags import TagLookup
from flowlog_tagger.models.records import AggregateSnapshot, FlowRecord, LookupKey

logger = logging.getLogger(__name__)


class FlowRecordError(ValueError):
    """Raised when a flow-log line has non-numeric port or protocol fields."""

    def __init__(self, values: list[str]) -> None:
        super().__init__(f"Campos numéricos inválidos: {values}")
        self.values = values


def parse_flow_record(
    fields: list[str],
    settings: ParsingSettings,
    line_number: int | None = None,
) -> FlowRecord:
    positions = (settings.src_port_index, settings.dst_port_index, settings.protocol_index)
    raw = [fields[i] for i in positions]
    try:
        src_port, dst_port, protocol_number = (parse_non_negative(value) for value in raw)
    except ValueError as exc:
        raise FlowRecordError(raw) from exc
    return FlowRecord(
        src_port=src_port,
        dst_port=dst_port,
        protocol_number=protocol_number,
        line_number=line_number,
    )


class FlowAggregator:
    """Clasifica cada línea del flow log y acumula conteos por tag y por puerto/protocolo."""

    def __init__(
        self,
        resolver: ProtocolResolver,
        lookup: TagLookup,
        settings: ParsingSettings | None = None,
    ) -> None:
        self.resolver = resolver
        self.lookup = lookup
        self.settings = settings or ParsingSettings()
        self._tag_counts: Counter[str] = Counter()
        self._port_protocol_counts: Counter[LookupKey] = Counter()
        self._lines_seen = 0
        self._metrics: dict[str, int] = {
            "records_counted": 0,
            "skipped_blank": 0,
            "skipped_short": 0,
            "skipped_invalid": 0,
            "tag_increments": 0,
            "port_protocol_increments": 0,
        }

    def ingest(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.ingest_line(line)

    def ingest_line(self, line: str, line_number: int | None = None) -> bool:
        self._lines_seen += 1
        if line_number is None:
            line_number = self._lines_seen

        text = line.strip()
        if not text:
            self._metrics["skipped_blank"] += 1
            return False

        fields = text.split()
        if len(fields) < self.settings.min_fields:
            self._metrics["skipped_short"] += 1
            return False

        try:
            record = parse_flow_record(fields, self.settings, line_number)
        except FlowRecordError as exc:
            self._metrics["skipped_invalid"] += 1
            logger.warning(
                "flowlog_row_skipped reason=invalid_numeric_field line=%d values=%s",
                line_number,
                exc.values,
                extra={"event": "flowlog_row_skipped", "line": line_number, "values": exc.values},
            )
            return False

        self._count(record)
        return True

    def _count(self, record: FlowRecord) -> None:
        protocol = self.resolver.resolve(record.protocol_number).lower()
        dst_key = LookupKey.build(record.dst_port, protocol)
        src_key = LookupKey.build(record.src_port, protocol)

        tags = self.lookup.lookup_key(dst_key)
        for tag in tags:
            self._tag_counts[tag] += 1

        self._port_protocol_counts[src_key] += 1
        self._port_protocol_counts[dst_key] += 1

        self._metrics["records_counted"] += 1
        self._metrics["tag_increments"] += len(tags)
        self._metrics["port_protocol_increments"] += 2

    def get_internal_metrics(self) -> dict[str, int]:
        return {**self._metrics, "lines_total": self._lines_seen}

    def snapshot(self) -> AggregateSnapshot:
        return AggregateSnapshot(
            tag_counts=dict(self._tag_counts),
            port_protocol_counts=dict(self._port_protocol_counts),
            metrics=self.get_internal_metrics(),
        )
