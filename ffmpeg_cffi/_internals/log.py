"""Logging helpers shared by the build tooling."""

import logging

_ROOT = "ffmpeg_cffi"
_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when verbose, INFO otherwise."""
    logging.basicConfig(format=_FORMAT, level=logging.WARNING, force=True)
    logging.getLogger(_ROOT).setLevel(logging.DEBUG if verbose else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{_ROOT}.{name}")
