"""Link directive resolution through pkg-config."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

import pkgconfig

from ffmpeg_cffi._internals.errors import LinkError
from ffmpeg_cffi._internals.log import get_logger

logger = get_logger("linking")


class EnvOverride:
    """
    Temporarily set or unset process environment variables.

    A value of None unsets the variable. Prior values (or their absence)
    are restored on exit, whether or not the block raised.

    Usage:
        with EnvOverride({"PKG_CONFIG_PATH": "/opt/ffmpeg/lib/pkgconfig"}):
            pkgconfig.parse("libavcodec")
    """

    def __init__(self, values: Mapping[str, str | None]):
        self._values = dict(values)
        self._saved: dict[str, str | None] = {}

    def __enter__(self) -> "EnvOverride":
        for name, value in self._values.items():
            self._saved[name] = os.environ.get(name)
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value
        return self

    def __exit__(self, *args) -> None:
        for name, previous in self._saved.items():
            if previous is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = previous
        self._saved.clear()


def _extend_unique(target: list, items) -> None:
    for item in items:
        if item not in target:
            target.append(item)


@dataclass
class LinkDirectives:
    """Compiler and linker inputs for the cffi extension."""

    is_static: bool = True
    include_dirs: list[str] = field(default_factory=list)
    library_dirs: list[str] = field(default_factory=list)
    libraries: list[str] = field(default_factory=list)
    static_libraries: list[str] = field(default_factory=list)
    extra_objects: list[str] = field(default_factory=list)  # Static archives linked directly
    define_macros: list[tuple[str, str | None]] = field(default_factory=list)
    runtime_libraries: list[str] = field(default_factory=list)  # DLLs to ship next to the extension

    def merge(self, other: "LinkDirectives") -> None:
        _extend_unique(self.include_dirs, other.include_dirs)
        _extend_unique(self.library_dirs, other.library_dirs)
        _extend_unique(self.libraries, other.libraries)
        _extend_unique(self.static_libraries, other.static_libraries)
        _extend_unique(self.extra_objects, other.extra_objects)
        _extend_unique(self.define_macros, other.define_macros)
        _extend_unique(self.runtime_libraries, other.runtime_libraries)

    def extension_kwargs(self) -> dict:
        """Keyword arguments for `FFI.set_source` / `setuptools.Extension`."""
        return {
            "include_dirs": list(self.include_dirs),
            "library_dirs": list(self.library_dirs),
            "libraries": list(self.libraries),
            "extra_objects": list(self.extra_objects),
            "define_macros": list(self.define_macros),
        }

    def lines(self) -> list[str]:
        """Human-readable directives, one per line."""
        out = [f"include={d}" for d in self.include_dirs]
        out += [f"link-search={d}" for d in self.library_dirs]
        out += [f"link-lib=static={lib}" for lib in self.static_libraries]
        out += [f"link-lib={lib}" for lib in self.libraries]
        out += [f"link-object={obj}" for obj in self.extra_objects]
        out += [f"runtime-lib={dll}" for dll in self.runtime_libraries]
        return out

    def to_dict(self) -> dict:
        data = self.extension_kwargs()
        data["define_macros"] = [list(m) for m in self.define_macros]
        data["static"] = self.is_static
        data["static_libraries"] = list(self.static_libraries)
        data["runtime_libraries"] = list(self.runtime_libraries)
        return data


def _parse_define(define) -> tuple[str, str | None]:
    if isinstance(define, (tuple, list)):
        return define[0], define[1]
    name, _, value = str(define).partition("=")
    return name, value or None


def _find_archive(library: str, library_dirs: Sequence[str]) -> Path | None:
    for directory in library_dirs:
        candidate = Path(directory) / f"lib{library}.a"
        if candidate.is_file():
            return candidate
    return None


def component_directives(component: str, is_static: bool) -> LinkDirectives:
    """
    Resolve one component with pkg-config, emitting its link metadata.

    In static mode the component's own archive is linked as an object so
    the system linker cannot pick a shared copy instead.
    """
    try:
        parsed = pkgconfig.parse(component, static=is_static)
    except (pkgconfig.PackageNotFoundError, EnvironmentError) as e:
        raise LinkError(component, str(e)) from e

    directives = LinkDirectives(
        is_static=is_static,
        include_dirs=list(parsed.get("include_dirs", [])),
        library_dirs=list(parsed.get("library_dirs", [])),
        define_macros=[_parse_define(d) for d in parsed.get("define_macros", [])],
    )

    own_library = component[3:] if component.startswith("lib") else component
    for library in parsed.get("libraries", []):
        archive = None
        if is_static and library == own_library and sys.platform != "win32":
            archive = _find_archive(library, directives.library_dirs)
        if archive is not None:
            directives.static_libraries.append(library)
            directives.extra_objects.append(str(archive))
        else:
            directives.libraries.append(library)
    return directives


def configure_linking(
    components: Sequence[str],
    pkg_config_path: str | Path | None,
    is_static: bool,
) -> LinkDirectives:
    """
    Collect link directives for every component.

    Args:
        components: pkg-config names, probed in order.
        pkg_config_path: Metadata directory overriding PKG_CONFIG_PATH for
                         the duration of the queries, or None to use the
                         system registry as-is.
        is_static: Link static archives instead of shared libraries.
    """
    override = {} if pkg_config_path is None else {"PKG_CONFIG_PATH": str(pkg_config_path)}
    result = LinkDirectives(is_static=is_static)
    with EnvOverride(override):
        for component in components:
            result.merge(component_directives(component, is_static))
            logger.debug("Resolved link metadata for %s", component)
    mode = "static" if is_static else "dynamic"
    logger.info("Resolved %s link directives for %d components", mode, len(components))
    return result
