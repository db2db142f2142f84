from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UNTAGGED = "Untagged"
UNCOMMON = "uncommon"


@dataclass(frozen=True, slots=True, order=True)
class LookupKey:
    port: int
    protocol: str

    @classmethod
    def build(cls, port: int, protocol: str) -> "LookupKey":
        """Único constructor normalizado: el protocolo siempre se guarda en minúsculas."""
        return cls(port=port, protocol=protocol.strip().lower())


@dataclass(slots=True)
class FlowRecord:
    src_port: int
    dst_port: int
    protocol_number: int
    line_number: int | None = None


@dataclass(slots=True)
class AggregateSnapshot:
    tag_counts: dict[str, int] = field(default_factory=dict)
    port_protocol_counts: dict[LookupKey, int] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def total_tag_increments(self) -> int:
        return sum(self.tag_counts.values())

    @property
    def total_port_protocol_increments(self) -> int:
        return sum(self.port_protocol_counts.values())
