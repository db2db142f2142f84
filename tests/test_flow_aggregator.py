import pytest

from conftest import flow_line
from flowlog_tagger.analysis.aggregator import FlowAggregator, FlowRecordError, parse_flow_record
from flowlog_tagger.config.settings import ParsingSettings
from flowlog_tagger.lookup.protocols import ProtocolResolver
from flowlog_tagger.lookup.tags import TagLookup
from flowlog_tagger.models.records import UNCOMMON, UNTAGGED, LookupKey


def _aggregator(lookup_rows: list[str], protocol_rows: list[str]) -> FlowAggregator:
    resolver = ProtocolResolver.load(["Decimal,Keyword", *protocol_rows])
    lookup = TagLookup.load(["dstport,protocol,tag", *lookup_rows])
    return FlowAggregator(resolver, lookup)


def test_tagged_record_scenario() -> None:
    agg = _aggregator(["443,tcp,web"], ["6,tcp"])
    agg.ingest([flow_line(5000, 443, 6)])
    snap = agg.snapshot()
    assert snap.tag_counts == {"web": 1}
    assert snap.port_protocol_counts == {LookupKey(5000, "tcp"): 1, LookupKey(443, "tcp"): 1}


def test_untagged_uncommon_scenario() -> None:
    agg = _aggregator(["443,tcp,web"], ["6,tcp"])
    agg.ingest([flow_line(2000, 9999, 17)])
    snap = agg.snapshot()
    assert snap.tag_counts == {UNTAGGED: 1}
    assert snap.port_protocol_counts == {LookupKey(2000, UNCOMMON): 1, LookupKey(9999, UNCOMMON): 1}


def test_multi_tag_entry_increments_every_tag() -> None:
    agg = _aggregator(["443,tcp,web", "443,tcp,secure"], ["6,tcp"])
    agg.ingest([flow_line(5000, 443, 6), flow_line(5001, 443, 6)])
    snap = agg.snapshot()
    assert snap.tag_counts == {"web": 2, "secure": 2}
    assert snap.total_tag_increments == 4
    assert snap.total_port_protocol_increments == 4


def test_same_source_and_destination_key_counts_twice() -> None:
    agg = _aggregator([], ["6,tcp"])
    agg.ingest([flow_line(443, 443, 6)])
    assert agg.snapshot().port_protocol_counts == {LookupKey(443, "tcp"): 2}


def test_lookup_matches_regardless_of_protocol_case() -> None:
    agg = _aggregator(["443,TCP,web"], ["6,Tcp"])
    agg.ingest([flow_line(5000, 443, 6)])
    assert agg.snapshot().tag_counts == {"web": 1}


def test_tag_is_looked_up_by_destination_port_only() -> None:
    agg = _aggregator(["5000,tcp,client"], ["6,tcp"])
    agg.ingest([flow_line(5000, 443, 6)])
    assert agg.snapshot().tag_counts == {UNTAGGED: 1}


def test_short_and_blank_lines_are_skipped_silently(caplog) -> None:
    agg = _aggregator(["443,tcp,web"], ["6,tcp"])
    agg.ingest(["", "   \n", flow_line(5000, 443, 6, fields=10), flow_line(5000, 443, 6)])
    snap = agg.snapshot()
    assert snap.tag_counts == {"web": 1}
    assert snap.total_port_protocol_increments == 2
    assert "flowlog_row_skipped" not in caplog.text
    metrics = agg.get_internal_metrics()
    assert metrics["skipped_blank"] == 2
    assert metrics["skipped_short"] == 1
    assert metrics["records_counted"] == 1
    assert metrics["lines_total"] == 4


def test_non_numeric_fields_are_logged_and_skipped(caplog) -> None:
    agg = _aggregator(["443,tcp,web"], ["6,tcp"])
    agg.ingest([flow_line("-", "-", 6), flow_line(5000, 443, "tcp"), flow_line(5000, 443, 6)])
    snap = agg.snapshot()
    assert snap.tag_counts == {"web": 1}
    assert snap.port_protocol_counts == {LookupKey(5000, "tcp"): 1, LookupKey(443, "tcp"): 1}
    assert caplog.text.count("flowlog_row_skipped") == 2
    assert "line=1" in caplog.text
    assert "line=2" in caplog.text
    assert agg.get_internal_metrics()["skipped_invalid"] == 2


def test_extra_fields_and_tabs_are_tolerated() -> None:
    agg = _aggregator(["443,tcp,web"], ["6,tcp"])
    line = flow_line(5000, 443, 6).replace(" ", "\t") + "  extra  fields"
    assert agg.ingest_line(line)
    assert agg.snapshot().tag_counts == {"web": 1}


def test_each_valid_record_adds_one_tag_lookup_and_two_port_counts() -> None:
    agg = _aggregator(["443,tcp,web", "53,udp,dns"], ["6,tcp", "17,udp"])
    lines = [flow_line(5000 + i, port, proto) for i, (port, proto) in enumerate([(443, 6), (53, 17), (80, 6), (53, 6)])]
    agg.ingest(lines)
    snap = agg.snapshot()
    assert snap.total_tag_increments == 4
    assert snap.total_port_protocol_increments == 8
    assert snap.tag_counts == {"web": 1, "dns": 1, UNTAGGED: 2}


def test_snapshot_is_a_copy() -> None:
    agg = _aggregator([], ["6,tcp"])
    agg.ingest([flow_line(1, 2, 6)])
    snap = agg.snapshot()
    agg.ingest([flow_line(1, 2, 6)])
    assert snap.tag_counts == {UNTAGGED: 1}
    assert agg.snapshot().tag_counts == {UNTAGGED: 2}


def test_custom_parsing_positions() -> None:
    settings = ParsingSettings(min_fields=3, src_port_index=0, dst_port_index=1, protocol_index=2)
    resolver = ProtocolResolver.load(["Decimal,Keyword", "6,tcp"])
    lookup = TagLookup.load(["22,tcp,ssh"])
    agg = FlowAggregator(resolver, lookup, settings)
    agg.ingest(["40000 22 6"])
    assert agg.snapshot().tag_counts == {"ssh": 1}


def test_parsing_settings_reject_out_of_range_index() -> None:
    with pytest.raises(ValueError):
        ParsingSettings(min_fields=5, protocol_index=7)


def test_parse_flow_record_reports_offending_values() -> None:
    fields = flow_line("x", 443, 6).split()
    with pytest.raises(FlowRecordError) as excinfo:
        parse_flow_record(fields, ParsingSettings())
    assert excinfo.value.values == ["x", "443", "6"]
