"""Locate packages installed by vcpkg (Windows builds)."""

import os
import platform
import re
from pathlib import Path

from ffmpeg_cffi._internals.errors import VcpkgError
from ffmpeg_cffi._internals.linking import LinkDirectives
from ffmpeg_cffi._internals.log import get_logger

logger = get_logger("vcpkg")

_ARCHITECTURES = {
    "amd64": "x64",
    "x86_64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "x86": "x86",
    "i386": "x86",
    "i686": "x86",
}


def default_triplet(dynamic: bool, machine: str | None = None) -> str:
    """`<arch>-windows` for DLLs, `<arch>-windows-static-md` for static libraries."""
    machine = (machine or platform.machine()).lower()
    arch = _ARCHITECTURES.get(machine)
    if arch is None:
        raise VcpkgError(f"Unsupported architecture for vcpkg: {machine}")
    return f"{arch}-windows" if dynamic else f"{arch}-windows-static-md"


def _port_version(listing: Path, name: str, triplet: str) -> tuple[int, ...]:
    """Numeric key of `<name>_<version>_<triplet>.list`, so 10.0 sorts after 9.1."""
    version = listing.name[len(name) + 1:-len(f"_{triplet}.list")]
    return tuple(int(part) for part in re.findall(r"\d+", version))


def find_package(name: str, root: str | Path | None = None) -> LinkDirectives:
    """
    Resolve an installed vcpkg port to link directives.

    The root comes from `root` or VCPKG_ROOT. VCPKG_DYNAMIC selects DLL
    linking and VCPKG_DEFAULT_TRIPLET overrides the triplet. The port's
    `installed/vcpkg/info/<name>_*_<triplet>.list` file lists the import
    libraries and DLLs it installed.
    """
    root = root or os.environ.get("VCPKG_ROOT")
    if not root:
        raise VcpkgError("VCPKG_ROOT is not set")
    root = Path(root)

    dynamic = bool(os.environ.get("VCPKG_DYNAMIC"))
    triplet = os.environ.get("VCPKG_DEFAULT_TRIPLET") or default_triplet(dynamic)
    installed = root / "installed"
    triplet_dir = installed / triplet

    listings = sorted(
        (installed / "vcpkg" / "info").glob(f"{name}_*_{triplet}.list"),
        key=lambda listing: _port_version(listing, name, triplet),
    )
    if not listings:
        raise VcpkgError(f"Package {name} is not installed for triplet {triplet} under {root}")
    listing = listings[-1]
    logger.debug("Using vcpkg listing %s", listing)

    directives = LinkDirectives(
        is_static=not dynamic,
        include_dirs=[str(triplet_dir / "include")],
        library_dirs=[str(triplet_dir / "lib")],
    )
    for entry in listing.read_text().splitlines():
        entry = entry.strip()
        prefix = f"{triplet}/"
        if not entry.startswith(prefix):
            continue
        relative = entry[len(prefix):]
        if relative.startswith("lib/") and relative.endswith(".lib") and relative.count("/") == 1:
            directives.libraries.append(relative[len("lib/"):-len(".lib")])
        elif dynamic and relative.startswith("bin/") and relative.endswith(".dll"):
            directives.runtime_libraries.append(str(installed / entry))

    if not directives.libraries:
        raise VcpkgError(f"Package {name} ({triplet}) installed no libraries")
    return directives
