"""Per-platform FFmpeg acquisition strategies."""

import sys
from pathlib import Path
from typing import Protocol, Sequence

from ffmpeg_cffi._internals.errors import LinkError, ProbeMissing, VcpkgError
from ffmpeg_cffi._internals.linking import EnvOverride, LinkDirectives, configure_linking
from ffmpeg_cffi._internals.log import get_logger
from ffmpeg_cffi._internals.probe import probe_system
from ffmpeg_cffi._internals import vcpkg
from ffmpeg_cffi._internals.source_build import SourceBuilder

logger = get_logger("strategies")


class LinkStrategy(Protocol):
    """Makes FFmpeg available and returns how to link against it."""

    def link_ffmpeg(
        self, components: Sequence[str], out_dir: str | Path, is_static: bool
    ) -> LinkDirectives:
        ...


class PosixStrategy:
    """
    pkg-config based acquisition.

    Uses `pkg_config_path` when given. Otherwise probes the system and, if
    any component is missing, builds FFmpeg from source under `out_dir`.
    """

    def __init__(self, pkg_config_path: str | None = None, builder_factory=None):
        self.pkg_config_path = pkg_config_path
        self._builder_factory = builder_factory or SourceBuilder

    def resolve_pkg_config_path(self, components: Sequence[str], out_dir: str | Path) -> str | None:
        if self.pkg_config_path is not None:
            return self.pkg_config_path
        try:
            probe_system(components)
        except ProbeMissing as e:
            logger.warning("%s, let's git clone it and build.", e)
            return str(self._builder_factory(out_dir).build())
        return None

    def link_ffmpeg(
        self, components: Sequence[str], out_dir: str | Path, is_static: bool
    ) -> LinkDirectives:
        location = self.resolve_pkg_config_path(components, out_dir)
        return configure_linking(components, location, is_static)


class WindowsStrategy:
    """vcpkg based acquisition; `components` and `out_dir` are not used."""

    def __init__(self, package: str = "ffmpeg", vcpkg_root: str | None = None):
        self.package = package
        self.vcpkg_root = vcpkg_root

    def link_ffmpeg(
        self, components: Sequence[str], out_dir: str | Path, is_static: bool
    ) -> LinkDirectives:
        with EnvOverride({"VCPKG_DYNAMIC": None if is_static else "1"}):
            try:
                return vcpkg.find_package(self.package, self.vcpkg_root)
            except VcpkgError as e:
                raise LinkError(self.package, str(e)) from e


# Selected at import time, never per call.
HOST_STRATEGY = WindowsStrategy if sys.platform == "win32" else PosixStrategy


def host_strategy(pkg_config_path: str | None = None) -> LinkStrategy:
    """Strategy for the platform this tooling runs on."""
    if HOST_STRATEGY is WindowsStrategy:
        return WindowsStrategy()
    return PosixStrategy(pkg_config_path)
