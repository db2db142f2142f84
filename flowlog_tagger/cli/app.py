from __future__ import annotations

import argparse
import logging
from pathlib import Path

from flowlog_tagger.config.settings import LOG_LEVELS, SUPPORTED_FORMATS, AppSettings, OutputSettings, SettingsLoader
from flowlog_tagger.core.logging_setup import configure_logging
from flowlog_tagger.core.orchestrator import run_default
from flowlog_tagger.core.sources import InputSourceError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "flowlog_tagger.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowlog-tagger",
        description="Etiqueta flow logs por puerto/protocolo y genera conteos agregados",
        allow_abbrev=False,
    )
    parser.add_argument("--config", default=None, help="Ruta del archivo YAML de configuración")
    parser.add_argument("--lookup", default=None, help="Tabla de lookup CSV (dstport,protocol,tag)")
    parser.add_argument("--logs", default=None, help="Flow log a procesar ('-' para stdin)")
    parser.add_argument("--protocol", default=None, help="Mapa CSV de números de protocolo")
    parser.add_argument("--output", default=None, help="Archivo de resultados ('-' para stdout)")
    parser.add_argument("--format", choices=SUPPORTED_FORMATS, default=None, help="Formato del reporte")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Nivel de logging del canal de diagnóstico",
    )
    parser.add_argument("--log-file", default=None, help="Copia opcional de los diagnósticos")

    sub = parser.add_subparsers(dest="command", required=False)
    sub.add_parser("run", help="Procesa el flow log y escribe el reporte")
    sub.add_parser("init-config", help="Genera YAML por defecto")
    return parser


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    settings = SettingsLoader.load(args.config) if args.config else AppSettings()

    if args.lookup is not None:
        settings.inputs.lookup_table = args.lookup
    if args.logs is not None:
        settings.inputs.flow_logs = args.logs
    if args.protocol is not None:
        settings.inputs.protocol_map = args.protocol
    if args.output is not None or args.format is not None:
        settings.output = OutputSettings(
            path=args.output if args.output is not None else settings.output.path,
            format=args.format if args.format is not None else settings.output.format,
        )
    if args.log_level is not None:
        settings.log_level = args.log_level
    if args.log_file is not None:
        settings.log_file = args.log_file
    return settings


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    command = args.command or "run"

    if command == "init-config":
        config_path = args.config or DEFAULT_CONFIG_PATH
        SettingsLoader.dump_default(config_path)
        print(f"Configuración creada en {config_path}")
        return

    if args.config and not Path(args.config).exists():
        parser.error(f"No existe el archivo de configuración: {args.config}")

    try:
        settings = resolve_settings(args)
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(settings.log_level, settings.log_file)

    try:
        run_default(settings)
    except InputSourceError as exc:
        logger.error("run_aborted reason=%s", exc, extra={"event": "run_aborted", "source": exc.location})
        parser.exit(1, f"{parser.prog}: error: {exc}\n")


if __name__ == "__main__":
    main()
