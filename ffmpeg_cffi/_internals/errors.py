"""Exceptions raised while generating bindings or acquiring FFmpeg."""


class FFmpegBuildError(Exception):
    """Base class for every fatal build failure."""


class ConfigurationError(FFmpegBuildError):
    """A required setting is missing or malformed."""


class GenerationError(FFmpegBuildError):
    """Header resolution, preprocessing or parsing failed."""

    def __init__(self, message: str, header: str | None = None):
        self.header = header
        if header is not None:
            message = f"{header}: {message}"
        super().__init__(f"Binding generation failed: {message}")


class CopyError(FFmpegBuildError):
    """The prebuilt declarations file could not be copied."""

    def __init__(self, source, destination, reason: str = ""):
        self.source = source
        self.destination = destination
        super().__init__(
            f"Prebuilt declarations {source} failed to be copied to {destination}: {reason}"
        )


class ProbeMissing(FFmpegBuildError):
    """A library component is absent from the pkg-config registry.

    Not fatal on its own: it triggers the build-from-source fallback.
    """

    def __init__(self, component: str):
        self.component = component
        super().__init__(f"{component} not found in system path")


class BuildProcessError(FFmpegBuildError):
    """An external command of the FFmpeg source build failed."""

    def __init__(self, stage: str, command: list[str], returncode: int | None = None, reason: str = ""):
        self.stage = stage
        self.command = command
        self.returncode = returncode
        if returncode is not None:
            detail = f"exited with status {returncode}"
        else:
            detail = f"could not be started ({reason})"
        super().__init__(f"FFmpeg build process: {stage} failed! `{' '.join(command)}` {detail}")


class LinkError(FFmpegBuildError):
    """Final link metadata could not be resolved for a component."""

    def __init__(self, component: str, reason: str = ""):
        self.component = component
        message = f"{component} not found!"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class VcpkgError(FFmpegBuildError):
    """vcpkg root, triplet or package lookup failed."""
