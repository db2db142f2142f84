from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"
REMOTE_SCHEMES = ("http://", "https://")


class InputSourceError(RuntimeError):
    """Raised when an input source cannot be opened or fetched at all."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"No se pudo abrir la fuente '{location}': {reason}")
        self.location = location
        self.reason = reason


def is_remote(location: str) -> bool:
    return location.lower().startswith(REMOTE_SCHEMES)


def _fetch_lines(url: str, timeout_s: float) -> list[str]:
    try:
        response = requests.get(url, timeout=timeout_s)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise InputSourceError(url, str(exc)) from exc
    logger.info("source_fetched url=%s bytes=%d", url, len(response.content), extra={"source": url})
    return response.text.splitlines()


@contextmanager
def open_lines(
    location: str,
    encoding: str = "utf-8",
    timeout_s: float = 10.0,
    allow_stdin: bool = False,
) -> Iterator[Iterator[str]]:
    """Abre ``location`` como iterador de líneas de texto.

    Acepta rutas locales, ``http(s)://`` y, si ``allow_stdin``, ``-`` para stdin.
    Los fallos de apertura son fatales (``InputSourceError``); los errores de
    contenido quedan a cargo de cada cargador.
    """

    if allow_stdin and location == STDIN_MARKER:
        yield iter(sys.stdin)
        return

    if is_remote(location):
        yield iter(_fetch_lines(location, timeout_s))
        return

    try:
        handle = Path(location).open("r", encoding=encoding, newline="")
    except OSError as exc:
        raise InputSourceError(location, exc.strerror or str(exc)) from exc
    with handle:
        yield iter(handle)
