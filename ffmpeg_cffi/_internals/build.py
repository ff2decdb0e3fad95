"""One build invocation: declarations plus link directives."""

import json
from dataclasses import dataclass
from pathlib import Path

from ffmpeg_cffi._internals.bindgen import generate_bindings
from ffmpeg_cffi._internals.constants import DEFS_FILENAME, LIBS
from ffmpeg_cffi._internals.linking import LinkDirectives
from ffmpeg_cffi._internals.log import get_logger
from ffmpeg_cffi._internals.settings import BuildSettings
from ffmpeg_cffi._internals.strategies import LinkStrategy, host_strategy

logger = get_logger("build")

LINK_FILENAME = "link.json"


@dataclass
class BuildResult:
    """Outputs consumed by the cffi compile step."""

    defs_path: Path
    directives: LinkDirectives | None  # None in offline builds


def defs_path(settings: BuildSettings) -> Path:
    return settings.out_dir / DEFS_FILENAME


def run_bindgen(settings: BuildSettings) -> Path:
    headers_dir = None if settings.offline else settings.require_headers_dir()
    return generate_bindings(
        headers_dir,
        defs_path(settings),
        offline=settings.offline,
        cpp_path=settings.cpp,
    )


def run_link(settings: BuildSettings, strategy: LinkStrategy | None = None) -> LinkDirectives:
    strategy = strategy or host_strategy(settings.pkg_config_path)
    return strategy.link_ffmpeg(LIBS, settings.out_dir, settings.is_static)


def write_link_file(directives: LinkDirectives, out_dir: Path) -> Path:
    path = out_dir / LINK_FILENAME
    out_dir.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(directives.to_dict(), indent=2))
    return path


def run_build(settings: BuildSettings, strategy: LinkStrategy | None = None) -> BuildResult:
    """
    Generate declarations, then make FFmpeg available and resolve linking.

    Offline builds stop after copying the prebuilt declarations: there is
    no network to fetch FFmpeg with.
    """
    path = run_bindgen(settings)
    if settings.offline:
        logger.info("Offline build, skipping FFmpeg acquisition")
        return BuildResult(path, None)
    return BuildResult(path, run_link(settings, strategy))
