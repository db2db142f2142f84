from __future__ import annotations

import logging

from flowlog_tagger.analysis.aggregator import FlowAggregator
from flowlog_tagger.config.settings import AppSettings
from flowlog_tagger.core.sources import open_lines
from flowlog_tagger.lookup.protocols import ProtocolResolver
from flowlog_tagger.lookup.tags import TagLookup
from flowlog_tagger.models.records import AggregateSnapshot
from flowlog_tagger.reporting.exporters import export_report

logger = logging.getLogger(__name__)


class FlowLogPipeline:
    def __init__(
        self,
        settings: AppSettings,
        resolver: ProtocolResolver,
        lookup: TagLookup,
    ) -> None:
        self.settings = settings
        self.resolver = resolver
        self.lookup = lookup
        self.aggregator = FlowAggregator(resolver, lookup, settings.parsing)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "FlowLogPipeline":
        inputs = settings.inputs
        resolver = ProtocolResolver.from_source(
            inputs.protocol_map, encoding=inputs.encoding, timeout_s=inputs.fetch_timeout_s
        )
        lookup = TagLookup.from_source(
            inputs.lookup_table, encoding=inputs.encoding, timeout_s=inputs.fetch_timeout_s
        )
        return cls(settings, resolver, lookup)

    def aggregate(self) -> AggregateSnapshot:
        inputs = self.settings.inputs
        with open_lines(
            inputs.flow_logs,
            encoding=inputs.encoding,
            timeout_s=inputs.fetch_timeout_s,
            allow_stdin=True,
        ) as lines:
            self.aggregator.ingest(lines)
        return self.aggregator.snapshot()

    def run(self) -> AggregateSnapshot:
        snapshot = self.aggregate()
        output = self.settings.output
        export_report(snapshot, output.path, output.format)
        logger.info(
            "run_completed output=%s format=%s tags=%d port_protocol_keys=%d",
            output.path,
            output.format,
            len(snapshot.tag_counts),
            len(snapshot.port_protocol_counts),
            extra={"event": "run_completed", "metrics": snapshot.metrics},
        )
        return snapshot


def run_default(settings: AppSettings | None = None) -> AggregateSnapshot:
    pipeline = FlowLogPipeline.from_settings(settings or AppSettings())
    return pipeline.run()
