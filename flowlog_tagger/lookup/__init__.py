"""Reference tables: protocol numbers and port/protocol tags."""

from .protocols import ProtocolResolver, load_protocol_map
from .tags import TagLookup, load_lookup_table

__all__ = [
    "ProtocolResolver",
    "TagLookup",
    "load_lookup_table",
    "load_protocol_map",
]
