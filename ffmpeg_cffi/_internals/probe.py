"""Side-effect-free pkg-config probing for the FFmpeg libraries."""

from typing import Mapping, Sequence

import pkgconfig

from ffmpeg_cffi._internals.errors import ProbeMissing
from ffmpeg_cffi._internals.log import get_logger

logger = get_logger("probe")


def component_available(component: str, version: str | None = None) -> bool:
    """
    Check one component against the pkg-config registry.

    Args:
        component: pkg-config package name, e.g. "libavcodec".
        version: Optional constraint such as ">= 58", checked with
                 `pkgconfig.installed` instead of a bare existence query.
    """
    try:
        if version is None:
            return pkgconfig.exists(component)
        return pkgconfig.installed(component, version)
    except EnvironmentError as e:
        # No usable pkg-config executable at all.
        logger.debug("pkg-config query for %s failed: %s", component, e)
        return False


def probe_system(
    components: Sequence[str], versions: Mapping[str, str] | None = None
) -> None:
    """
    Verify every component is installed, in order.

    Raises ProbeMissing for the first missing component; later components
    are not queried. Never modifies os.environ.
    """
    versions = versions or {}
    for component in components:
        if not component_available(component, versions.get(component)):
            raise ProbeMissing(component)
        logger.debug("Found %s in system registry", component)
