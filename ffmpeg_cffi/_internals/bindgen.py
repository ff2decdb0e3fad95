"""
cffi declaration generation from the whitelisted FFmpeg headers.

All headers are folded into one translation unit, preprocessed once with
`cpp -dD` (which keeps macro definitions in the output) and parsed once
with pycparser, so types declared in one header resolve in another.
"""

import os
import re
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Sequence

from cffi import commontypes, model
from pycparser import c_ast, c_generator, c_parser, preprocess_file
from pycparser.plyparser import ParseError

from ffmpeg_cffi._internals.constants import DEFS_FILENAME, HEADERS
from ffmpeg_cffi._internals.errors import CopyError, GenerationError
from ffmpeg_cffi._internals.log import get_logger
from ffmpeg_cffi._internals.symbol_filter import MacroParsingBehavior, will_parse_macro

logger = get_logger("bindgen")

# Declarations generated on a developer machine, shipped for offline builds.
PREBUILT_DEFS = Path(__file__).parent / "bindings" / DEFS_FILENAME

# Neutralize GNU extensions pycparser cannot parse.
CPP_ARGS: tuple[str, ...] = (
    "-dD",
    "-U__GNUC__",
    "-D__attribute__(x)=",
    "-D__declspec(x)=",
    "-D__extension__=",
    "-D__restrict=",
    "-D__restrict__=",
    "-D__inline=inline",
    "-D__inline__=inline",
    "-D__asm__(x)=",
    "-D__asm(x)=",
    "-D__builtin_va_list=void *",
    "-D_Float128=long double",
    "-D_Nullable=",
    "-D_Nonnull=",
)

_LINE_MARKER = re.compile(r'^#\s*(?:line\s+)?\d+\s+"((?:[^"\\]|\\.)*)"')
_DEFINE = re.compile(r"^#\s*define\s+([A-Za-z_]\w*)(\()?\s*(.*)$")
_UNDEF = re.compile(r"^#\s*undef\s+([A-Za-z_]\w*)")
_PRAGMA = re.compile(r"^#\s*pragma\b")
_INT_LITERAL = re.compile(r"^-?(?:0[xX][0-9a-fA-F]+|\d+)[uUlL]*$")

Preprocessor = Callable[[Path, Sequence[str]], str]
MacroFilter = Callable[[str], MacroParsingBehavior]


def run_cpp(cpp_path: str = "cpp") -> Preprocessor:
    """Preprocessor backed by an external C preprocessor."""

    def preprocess(source: Path, cpp_args: Sequence[str]) -> str:
        try:
            return preprocess_file(str(source), cpp_path=cpp_path, cpp_args=list(cpp_args))
        except (RuntimeError, subprocess.CalledProcessError, UnicodeDecodeError) as e:
            raise GenerationError(f"preprocessing with {cpp_path!r} failed: {e}") from e

    return preprocess


def integer_literal(value: str) -> str | None:
    """Return `value` as a cffi-compatible integer literal, or None."""
    value = value.strip()
    while value.startswith("(") and value.endswith(")"):
        value = value[1:-1].strip()
    value = value.replace(" ", "")
    if _INT_LITERAL.match(value):
        return value
    return None


class _TypeNameCollector(c_ast.NodeVisitor):
    """Collects every type name referenced by the visited declarations."""

    def __init__(self):
        self.names: set[str] = set()

    def visit_IdentifierType(self, node):
        self.names.update(node.names)


class BindingGenerator:
    """
    Generates cffi `cdef` text for a set of headers under one include root.

    Args:
        headers_dir: FFmpeg include root, also used as the include search path.
        headers: Header paths relative to `headers_dir`, in generation order.
        preprocessor: Callable running the C preprocessor (default: `cpp`).
        macro_filter: Consulted once per macro definition found in the headers.
    """

    def __init__(
        self,
        headers_dir: str | Path,
        headers: Sequence[str] = HEADERS,
        *,
        preprocessor: Preprocessor | None = None,
        macro_filter: MacroFilter = will_parse_macro,
    ):
        self.headers_dir = Path(headers_dir)
        self.headers = tuple(headers)
        self._preprocess = preprocessor or run_cpp()
        self._macro_filter = macro_filter
        self._root = Path(os.path.realpath(self.headers_dir))
        self._local_cache: dict[str, bool] = {}

    def check_headers(self) -> None:
        """Raise GenerationError for the first header missing from the include root."""
        if not self.headers_dir.is_dir():
            raise GenerationError(f"header directory {self.headers_dir} does not exist")
        for header in self.headers:
            if not (self.headers_dir / header).is_file():
                raise GenerationError("header not found in include root", header=header)

    def umbrella_source(self) -> str:
        return "".join(f'#include "{header}"\n' for header in self.headers)

    def cpp_args(self) -> list[str]:
        return [f"-I{self._root}", *CPP_ARGS]

    def _is_local(self, filename: str) -> bool:
        """True if `filename` lives under the include root."""
        if not filename or filename.startswith("<"):
            return False
        if filename not in self._local_cache:
            try:
                Path(os.path.realpath(filename)).relative_to(self._root)
            except ValueError:
                self._local_cache[filename] = False
            else:
                self._local_cache[filename] = True
        return self._local_cache[filename]

    def split_macros(self, text: str) -> tuple[str, dict[str, str]]:
        """
        Separate macro directives from preprocessed C code.

        Returns the code with every directive other than line markers and
        pragmas blanked (line numbers stay intact), and the integer-valued
        object-like macros defined under the include root, in definition
        order. Later definitions win; `#undef` drops a definition.
        """
        current_file = ""
        macros: dict[str, str] = {}
        lines = text.splitlines()

        for i, line in enumerate(lines):
            stripped = line.lstrip()
            if not stripped.startswith("#"):
                continue

            marker = _LINE_MARKER.match(stripped)
            if marker:
                current_file = marker.group(1).replace("\\\\", "\\")
                continue
            if _PRAGMA.match(stripped):
                continue

            lines[i] = ""
            define = _DEFINE.match(stripped)
            if define:
                name, function_like, value = define.groups()
                if self._macro_filter(name) is MacroParsingBehavior.IGNORE:
                    logger.debug("Ignoring macro %s", name)
                    continue
                if function_like or not self._is_local(current_file):
                    continue
                literal = integer_literal(value)
                macros.pop(name, None)
                if literal is not None:
                    macros[name] = literal
                continue

            undef = _UNDEF.match(stripped)
            if undef:
                macros.pop(undef.group(1), None)

        return "\n".join(lines) + "\n", macros

    def parse(self, code: str) -> c_ast.FileAST:
        try:
            return c_parser.CParser().parse(code, filename="<ffmpeg headers>")
        except ParseError as e:
            raise GenerationError(f"parse error: {e}") from e

    def select_declarations(self, ast: c_ast.FileAST) -> tuple[list[c_ast.Node], list[str]]:
        """
        Pick the declarations cffi should see.

        Returns the top-level declarations made under the include root and the
        names of typedefs from outside it that those declarations reference
        and that cffi does not know natively.
        """
        selected = []
        local_typedefs = set()
        external_typedefs = set()

        for node in ast.ext:
            if not isinstance(node, (c_ast.Decl, c_ast.Typedef)):
                continue
            if node.coord is None or not self._is_local(node.coord.file):
                if isinstance(node, c_ast.Typedef):
                    external_typedefs.add(node.name)
                continue
            if isinstance(node, c_ast.Decl):
                if "static" in node.storage or "inline" in node.funcspec:
                    continue
                node.storage = [s for s in node.storage if s != "extern"]
            else:
                local_typedefs.add(node.name)
            selected.append(node)

        collector = _TypeNameCollector()
        for node in selected:
            collector.visit(node)

        known = set(model.PrimitiveType.ALL_PRIMITIVE_TYPES) | set(commontypes.COMMON_TYPES)
        opaque = sorted(
            name
            for name in collector.names & external_typedefs
            if name not in known and name not in local_typedefs
        )
        return selected, opaque

    def render(self, declarations: list[c_ast.Node], opaque: list[str], macros: dict[str, str]) -> str:
        parts = [f"/* cffi declarations for {len(self.headers)} FFmpeg headers. Generated file, do not edit. */\n"]
        if opaque:
            parts.append("".join(f"typedef ... {name};\n" for name in opaque))
        parts.append(c_generator.CGenerator().visit(c_ast.FileAST(declarations)))
        if macros:
            parts.append("".join(f"#define {name} {value}\n" for name, value in macros.items()))
        return "\n".join(parts)

    def generate(self) -> str:
        """Run the whole pipeline and return the declarations text."""
        self.check_headers()

        with tempfile.TemporaryDirectory(prefix="ffmpeg_cffi_") as tmp:
            umbrella = Path(tmp) / "ffmpeg_umbrella.h"
            umbrella.write_text(self.umbrella_source())
            logger.debug("Preprocessing %d headers from %s", len(self.headers), self._root)
            preprocessed = self._preprocess(umbrella, self.cpp_args())

        code, macros = self.split_macros(preprocessed)
        declarations, opaque = self.select_declarations(self.parse(code))
        logger.debug(
            "Selected %d declarations, %d opaque typedefs, %d macros",
            len(declarations), len(opaque), len(macros),
        )
        return self.render(declarations, opaque, macros)

    def write_to_file(self, output_path: str | Path) -> Path:
        """
        Generate and write the declarations.

        On failure no output file is left behind, including a stale one from
        an earlier run.
        """
        output_path = Path(output_path)
        try:
            content = self.generate()
            output_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = output_path.with_name(output_path.name + ".tmp")
            try:
                tmp_path.write_text(content)
                os.replace(tmp_path, output_path)
            except OSError as e:
                tmp_path.unlink(missing_ok=True)
                raise GenerationError(f"cannot write {output_path}: {e}") from e
        except GenerationError:
            output_path.unlink(missing_ok=True)
            raise
        return output_path


def copy_prebuilt_bindings(output_path: str | Path, source: str | Path = PREBUILT_DEFS) -> Path:
    """Copy the checked-in declarations verbatim (offline builds)."""
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, output_path)
    except OSError as e:
        raise CopyError(source, output_path, str(e)) from e
    logger.info("Copied prebuilt declarations to %s", output_path)
    return output_path


def generate_bindings(
    headers_dir: str | Path | None,
    output_path: str | Path,
    *,
    offline: bool = False,
    headers: Sequence[str] = HEADERS,
    cpp_path: str = "cpp",
) -> Path:
    """
    Produce the declarations file at `output_path`.

    In offline mode the headers are never read; the prebuilt copy is used.
    """
    if offline:
        return copy_prebuilt_bindings(output_path)
    if headers_dir is None:
        raise GenerationError("no FFmpeg header directory given")

    generator = BindingGenerator(headers_dir, headers, preprocessor=run_cpp(cpp_path))
    path = generator.write_to_file(output_path)
    logger.info("Generated declarations for %d headers at %s", len(headers), path)
    return path
