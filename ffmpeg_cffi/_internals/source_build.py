"""Clone and compile FFmpeg when no system installation is usable."""

import os
import subprocess
from pathlib import Path
from typing import Callable

from ffmpeg_cffi._internals.constants import (
    CONFIGURE_FEATURE_FLAGS,
    FFMPEG_CHECKOUT_MARKER,
    FFMPEG_GIT_URL,
)
from ffmpeg_cffi._internals.errors import BuildProcessError
from ffmpeg_cffi._internals.log import get_logger

logger = get_logger("source_build")


class SourceBuilder:
    """
    Builds a private FFmpeg under `<out_dir>/ffmpeg`.

    Everything is installed into `<out_dir>/ffmpeg/build/{bin,lib,include,share}`.
    The checkout is reused by later builds against the same output directory.

    Args:
        out_dir: Build-tool private output directory.
        runner: `subprocess.run`-compatible callable (replaced in tests).
        cpu_count: Returns the number of make jobs to use.
    """

    def __init__(
        self,
        out_dir: str | Path,
        *,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        cpu_count: Callable[[], int | None] = os.cpu_count,
    ):
        self.out_dir = Path(out_dir).resolve()
        self.source_dir = self.out_dir / "ffmpeg"
        self.prefix = self.source_dir / "build"
        self._runner = runner
        self._cpu_count = cpu_count

    @property
    def pkg_config_dir(self) -> Path:
        return self.prefix / "lib" / "pkgconfig"

    @property
    def jobs(self) -> int:
        return self._cpu_count() or 1

    def is_cloned(self) -> bool:
        return (self.source_dir / FFMPEG_CHECKOUT_MARKER).is_dir()

    def _child_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env["PATH"] = os.pathsep.join(
            p for p in (str(self.prefix / "bin"), os.environ.get("PATH", "")) if p
        )
        env["PKG_CONFIG_PATH"] = str(self.pkg_config_dir)
        return env

    def _run(self, stage: str, command: list[str], cwd: Path, env: dict[str, str] | None = None) -> None:
        """Run one blocking build stage, raising BuildProcessError on any failure."""
        logger.info("FFmpeg build process: %s", stage)
        logger.debug("Running %s in %s", command, cwd)
        try:
            result = self._runner(command, cwd=cwd, env=env)
        except OSError as e:
            raise BuildProcessError(stage, command, reason=str(e)) from e
        if result.returncode != 0:
            raise BuildProcessError(stage, command, result.returncode)

    def ensure_source(self) -> None:
        """Shallow-clone FFmpeg unless a checkout already exists."""
        if self.is_cloned():
            logger.info("Reusing FFmpeg checkout at %s", self.source_dir)
            return
        self.out_dir.mkdir(parents=True, exist_ok=True)
        self._run(
            "clone",
            ["git", "clone", FFMPEG_GIT_URL, "--depth", "1"],
            cwd=self.out_dir,
        )

    def configure_args(self) -> list[str]:
        src = self.source_dir
        return [
            f"--prefix={src}/build",
            f"--extra-cflags=-I{src}/build/include",
            f"--extra-ldflags=-L{src}/build/lib",
            f"--bindir={src}/build/bin",
            *CONFIGURE_FEATURE_FLAGS,
        ]

    def configure(self) -> None:
        self._run(
            "configure",
            [str(self.source_dir / "configure"), *self.configure_args()],
            cwd=self.source_dir,
            env=self._child_env(),
        )

    def compile(self) -> None:
        self._run(
            "make compile",
            ["make", f"-j{self.jobs}"],
            cwd=self.source_dir,
            env=self._child_env(),
        )

    def install(self) -> None:
        self._run(
            "make install",
            ["make", f"-j{self.jobs}", "install"],
            cwd=self.source_dir,
            env=self._child_env(),
        )

    def build(self) -> Path:
        """Clone (if needed), configure, compile and install; return the pkg-config dir."""
        self.ensure_source()
        self.configure()
        self.compile()
        self.install()
        return self.pkg_config_dir
