"""Environment-driven build settings."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from ffmpeg_cffi._internals.errors import ConfigurationError

DEFAULT_OUT_DIR = "build/ffmpeg_cffi"


@dataclass(frozen=True)
class BuildSettings:
    """Everything one build invocation reads from its environment."""

    out_dir: Path
    headers_dir: Path | None = None
    offline: bool = False  # Network-isolated docs build: copy prebuilt declarations
    is_static: bool = True
    pkg_config_path: str | None = None  # Explicit FFmpeg pkg-config metadata location
    cpp: str = "cpp"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BuildSettings":
        """
        Read settings from environment variables.

        OUT_DIR, FFMPEG_HEADERS_DIR, READTHEDOCS, FFMPEG_DYNAMIC_LINKING,
        FFMPEG_PKG_CONFIG_PATH and CPP are consulted; presence alone enables
        the two flags.
        """
        if environ is None:
            environ = os.environ

        headers_dir = environ.get("FFMPEG_HEADERS_DIR")
        return cls(
            out_dir=Path(environ.get("OUT_DIR", DEFAULT_OUT_DIR)),
            headers_dir=Path(headers_dir) if headers_dir else None,
            offline="READTHEDOCS" in environ,
            is_static="FFMPEG_DYNAMIC_LINKING" not in environ,
            pkg_config_path=environ.get("FFMPEG_PKG_CONFIG_PATH") or None,
            cpp=environ.get("CPP") or "cpp",
        )

    def with_overrides(self, **changes) -> "BuildSettings":
        """Copy with the non-None values of `changes` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def require_headers_dir(self) -> Path:
        if self.headers_dir is None:
            raise ConfigurationError(
                "FFMPEG_HEADERS_DIR is not set; point it at the FFmpeg include directory"
            )
        return self.headers_dir
