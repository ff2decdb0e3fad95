"""
CFFI build script for the FFmpeg bindings.

Run with: python ffmpeg_cffi/_internals/bindings/ffi_build.py
(settings come from OUT_DIR, FFMPEG_HEADERS_DIR, FFMPEG_DYNAMIC_LINKING, ...)
"""

from cffi import FFI

from ffmpeg_cffi._internals.build import BuildResult, run_build
from ffmpeg_cffi._internals.constants import HEADERS
from ffmpeg_cffi._internals.settings import BuildSettings

MODULE_NAME = "ffmpeg_cffi._ffmpeg_cffi"

# The source that CFFI will compile: every header we generated declarations for
SOURCE_CODE = "".join(f"#include <{header}>\n" for header in HEADERS)


def build_ffi(result: BuildResult) -> FFI:
    """Create an FFI builder from generated declarations and link directives."""
    ffibuilder = FFI()
    ffibuilder.cdef(result.defs_path.read_text())

    kwargs = result.directives.extension_kwargs() if result.directives else {}
    ffibuilder.set_source(MODULE_NAME, SOURCE_CODE, **kwargs)
    return ffibuilder


def main(settings: BuildSettings | None = None, compile: bool = True) -> FFI:
    settings = settings or BuildSettings.from_env()
    ffibuilder = build_ffi(run_build(settings))
    if compile:
        ffibuilder.compile(tmpdir=str(settings.out_dir), verbose=True)
    return ffibuilder


if __name__ == "__main__":
    main()
