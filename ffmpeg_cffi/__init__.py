"""Build-time tooling for cffi bindings to FFmpeg."""

from ffmpeg_cffi._internals.build import BuildResult, run_build
from ffmpeg_cffi._internals.errors import (
    BuildProcessError,
    ConfigurationError,
    CopyError,
    FFmpegBuildError,
    GenerationError,
    LinkError,
    ProbeMissing,
)
from ffmpeg_cffi._internals.settings import BuildSettings

__all__ = [
    "BuildResult",
    "BuildSettings",
    "run_build",
    "FFmpegBuildError",
    "ConfigurationError",
    "GenerationError",
    "CopyError",
    "ProbeMissing",
    "BuildProcessError",
    "LinkError",
]
