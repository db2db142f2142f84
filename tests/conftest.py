import logging
from pathlib import Path

import pytest

from flowlog_tagger.core.logging_setup import DiagnosticJsonFormatter


@pytest.fixture(autouse=True)
def _drop_diagnostic_handlers():
    # configure_logging() deja un handler apuntando al stderr capturado del test
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, DiagnosticJsonFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def flow_line(src_port: object, dst_port: object, protocol: object, *, fields: int = 14) -> str:
    base = [
        "2",
        "123456789012",
        "eni-0a1b2c3d",
        "10.0.1.201",
        "198.51.100.2",
        str(src_port),
        str(dst_port),
        str(protocol),
        "25",
        "20000",
        "1620140761",
        "1620140821",
        "ACCEPT",
        "OK",
    ]
    return " ".join(base[:fields])


@pytest.fixture
def write_inputs(tmp_path: Path):
    def _write(lookup: str, protocols: str, logs: str) -> dict[str, Path]:
        paths = {
            "lookup": tmp_path / "lookup_table.csv",
            "protocol": tmp_path / "protocol_map.csv",
            "logs": tmp_path / "logs.txt",
        }
        paths["lookup"].write_text(lookup, encoding="utf-8")
        paths["protocol"].write_text(protocols, encoding="utf-8")
        paths["logs"].write_text(logs, encoding="utf-8")
        return paths

    return _write
