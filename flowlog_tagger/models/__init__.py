"""Data model shared by loaders, aggregator and exporters."""

from .records import UNCOMMON, UNTAGGED, AggregateSnapshot, FlowRecord, LookupKey

__all__ = [
    "AggregateSnapshot",
    "FlowRecord",
    "LookupKey",
    "UNCOMMON",
    "UNTAGGED",
]
