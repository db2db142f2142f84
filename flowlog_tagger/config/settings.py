from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

SUPPORTED_FORMATS = ("csv", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class InputSettings:
    lookup_table: str = "lookup_table.csv"
    flow_logs: str = "logs.txt"
    protocol_map: str = "protocol_map.csv"
    encoding: str = "utf-8"
    fetch_timeout_s: float = 10.0


@dataclass(slots=True)
class OutputSettings:
    path: str = "output_results.csv"
    format: str = "csv"

    def __post_init__(self) -> None:
        if self.format not in SUPPORTED_FORMATS:
            raise ValueError(f"Formato de salida no soportado: {self.format}")


@dataclass(slots=True)
class ParsingSettings:
    min_fields: int = 14
    src_port_index: int = 5
    dst_port_index: int = 6
    protocol_index: int = 7

    def __post_init__(self) -> None:
        for name in ("src_port_index", "dst_port_index", "protocol_index"):
            index = getattr(self, name)
            if index < 0 or index >= self.min_fields:
                raise ValueError(f"{name}={index} fuera de rango para min_fields={self.min_fields}")


@dataclass(slots=True)
class AppSettings:
    app_name: str = "FLOWLOG TAGGER"
    log_level: str = "INFO"
    log_file: str | None = None
    inputs: InputSettings = field(default_factory=InputSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    parsing: ParsingSettings = field(default_factory=ParsingSettings)

    def __post_init__(self) -> None:
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Nivel de logging inválido: {self.log_level}")


class SettingsLoader:
    @staticmethod
    def _loads(text: str) -> dict[str, Any]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Configuración inválida: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("Configuración inválida")
        return data

    @staticmethod
    def load(path: str | Path) -> AppSettings:
        content = SettingsLoader._loads(Path(path).read_text(encoding="utf-8"))

        try:
            inputs = InputSettings(**content.get("inputs", {}))
            output = OutputSettings(**content.get("output", {}))
            parsing = ParsingSettings(**content.get("parsing", {}))
        except TypeError as exc:
            raise ValueError(f"Configuración inválida: {exc}") from exc

        return AppSettings(
            app_name=content.get("app_name", "FLOWLOG TAGGER"),
            log_level=content.get("log_level", "INFO"),
            log_file=content.get("log_file"),
            inputs=inputs,
            output=output,
            parsing=parsing,
        )

    @staticmethod
    def dump_default(path: str | Path) -> None:
        defaults = AppSettings()
        payload: dict[str, Any] = {
            "app_name": defaults.app_name,
            "log_level": defaults.log_level,
            "log_file": defaults.log_file,
            "inputs": asdict(defaults.inputs),
            "output": asdict(defaults.output),
            "parsing": asdict(defaults.parsing),
        }
        Path(path).write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
