"""
Command-line interface for generating FFmpeg declarations and link directives.

Settings default to the environment (OUT_DIR, FFMPEG_HEADERS_DIR, ...);
flags override them.
"""

import argparse
import json
import sys
from pathlib import Path

from ffmpeg_cffi._internals.build import run_bindgen, run_build, run_link, write_link_file
from ffmpeg_cffi._internals.errors import FFmpegBuildError
from ffmpeg_cffi._internals.log import configure_logging
from ffmpeg_cffi._internals.settings import BuildSettings


def settings_from_args(args) -> BuildSettings:
    """Environment settings with command-line overrides applied."""
    return BuildSettings.from_env().with_overrides(
        out_dir=Path(args.out_dir) if args.out_dir else None,
        headers_dir=Path(args.headers_dir) if args.headers_dir else None,
        offline=True if args.offline else None,
        is_static=False if args.dynamic else None,
    )


def cmd_bindgen(args):
    """Generate (or copy) the declarations file."""
    path = run_bindgen(settings_from_args(args))
    print(path)


def cmd_link(args):
    """Make FFmpeg available and print link directives."""
    settings = settings_from_args(args)
    directives = run_link(settings)
    write_link_file(directives, settings.out_dir)

    if args.json:
        print(json.dumps(directives.to_dict(), indent=2))
    else:
        for line in directives.lines():
            print(line)


def cmd_build(args):
    """Run both halves, then compile the cffi extension."""
    from ffmpeg_cffi._internals.bindings.ffi_build import build_ffi

    settings = settings_from_args(args)
    result = run_build(settings)
    if result.directives is not None:
        write_link_file(result.directives, settings.out_dir)

    print(f"Declarations: {result.defs_path}")
    if args.no_compile:
        return

    ffibuilder = build_ffi(result)
    extension = ffibuilder.compile(tmpdir=str(settings.out_dir), verbose=args.verbose)
    print(f"Extension: {extension}")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="ffmpeg-cffi-build",
        description="Generate cffi declarations for FFmpeg and resolve how to link it",
    )

    # Common arguments
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--out-dir", "-o",
        help="Output directory (default: $OUT_DIR or build/ffmpeg_cffi)",
    )
    common.add_argument(
        "--headers-dir",
        help="FFmpeg include directory (default: $FFMPEG_HEADERS_DIR)",
    )
    common.add_argument(
        "--offline",
        action="store_true",
        help="Copy the prebuilt declarations instead of parsing headers",
    )
    common.add_argument(
        "--dynamic",
        action="store_true",
        help="Link shared FFmpeg libraries (default: static)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Increase log verbosity for troubleshooting",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    bindgen_parser = subparsers.add_parser(
        "bindgen",
        parents=[common],
        help="Generate the declarations file",
    )
    bindgen_parser.set_defaults(func=cmd_bindgen)

    link_parser = subparsers.add_parser(
        "link",
        parents=[common],
        help="Locate or build FFmpeg and print link directives",
    )
    link_parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output directives as JSON",
    )
    link_parser.set_defaults(func=cmd_link)

    build_parser = subparsers.add_parser(
        "build",
        parents=[common],
        help="Generate declarations, resolve linking and compile the extension",
    )
    build_parser.add_argument(
        "--no-compile",
        action="store_true",
        help="Stop before compiling the cffi extension",
    )
    build_parser.set_defaults(func=cmd_build)

    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        args.func(args)
    except FFmpegBuildError as e:
        parser.exit(1, f"{parser.prog} {args.command} failed: {e}\n")


if __name__ == "__main__":
    main()
