from __future__ import annotations

import csv
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TextIO

from flowlog_tagger.models.records import AggregateSnapshot

STDOUT_MARKER = "-"


def write_report(snapshot: AggregateSnapshot, sink: TextIO) -> None:
    writer = csv.writer(sink, lineterminator="\n")

    writer.writerow(["Tag Counts:"])
    writer.writerow(["Tag", "Count"])
    writer.writerows(snapshot.tag_counts.items())

    writer.writerow([])
    writer.writerow(["Port/Protocol Combination Counts:"])
    writer.writerow(["Port", "Protocol", "Count"])
    for key, count in snapshot.port_protocol_counts.items():
        writer.writerow([key.port, key.protocol, count])


def report_payload(snapshot: AggregateSnapshot) -> dict[str, Any]:
    return {
        "tag_counts": dict(snapshot.tag_counts),
        "port_protocol_counts": [
            {"port": key.port, "protocol": key.protocol, "count": count}
            for key, count in snapshot.port_protocol_counts.items()
        ],
        "metrics": dict(snapshot.metrics),
    }


def _write_to(output: str | Path, render: Callable[[TextIO], None]) -> None:
    if str(output) == STDOUT_MARKER:
        render(sys.stdout)
        sys.stdout.flush()
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        render(fh)


def export_report_csv(snapshot: AggregateSnapshot, output: str | Path) -> None:
    _write_to(output, lambda fh: write_report(snapshot, fh))


def export_report_json(snapshot: AggregateSnapshot, output: str | Path) -> None:
    def _render(fh: TextIO) -> None:
        json.dump(report_payload(snapshot), fh, ensure_ascii=False, indent=2)
        fh.write("\n")

    _write_to(output, _render)


EXPORTERS: dict[str, Callable[[AggregateSnapshot, str | Path], None]] = {
    "csv": export_report_csv,
    "json": export_report_json,
}


def export_report(snapshot: AggregateSnapshot, output: str | Path, fmt: str = "csv") -> None:
    exporter = EXPORTERS.get(fmt)
    if exporter is None:
        raise ValueError(f"Formato de salida no soportado: {fmt}")
    exporter(snapshot, output)
