"""Pytest fixtures for ffmpeg_cffi tests."""

import os
import subprocess
from pathlib import Path

import pkgconfig
import pytest


class FakeCpp:
    """
    Stands in for `cpp -dD`: concatenates the umbrella's headers behind
    line markers, the way the real preprocessor reports file positions.

    Headers used with it must not contain #include or conditionals.
    """

    def __init__(self, system_code: str = ""):
        self.system_code = system_code
        self.calls: list[list[str]] = []

    def __call__(self, source: Path, cpp_args) -> str:
        self.calls.append(list(cpp_args))
        include_dir = next(Path(arg[2:]) for arg in cpp_args if arg.startswith("-I"))

        out = ['# 1 "<built-in>"', "#define __STDC__ 1", '# 1 "<command-line>"', "#define __attribute__(x) "]
        if self.system_code:
            out.append('# 1 "/usr/include/fake_system.h"')
            out.extend(self.system_code.splitlines())
        out.append(f'# 1 "{source}"')
        for line in source.read_text().splitlines():
            header = include_dir / line.split('"')[1]
            out.append(f'# 1 "{header}" 1')
            out.extend(header.read_text().splitlines())
        return "\n".join(out) + "\n"


@pytest.fixture
def fake_cpp():
    return FakeCpp()


@pytest.fixture
def write_headers(tmp_path):
    """Write {relative path: content} under a fresh include root and return it."""

    def write(headers: dict[str, str]) -> Path:
        root = tmp_path / "include"
        for relative, content in headers.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        root.mkdir(exist_ok=True)
        return root

    return write


class RecordingRunner:
    """
    `subprocess.run` replacement that records commands.

    A clone creates the checkout marker directory, like a real clone would.
    `fail_on` makes the command whose argv contains that word exit 1;
    `spawn_error` makes it raise OSError instead.
    """

    def __init__(self, fail_on: str | None = None, spawn_error: bool = False):
        self.fail_on = fail_on
        self.spawn_error = spawn_error
        self.calls: list[tuple[list[str], Path, dict | None]] = []

    def __call__(self, command, cwd=None, env=None):
        self.calls.append((list(command), Path(cwd), env))
        if self.fail_on is not None and any(self.fail_on in part for part in command):
            if self.spawn_error:
                raise FileNotFoundError(2, "No such file or directory", command[0])
            return subprocess.CompletedProcess(command, 1)
        if command[:2] == ["git", "clone"]:
            (Path(cwd) / "ffmpeg" / "fftools").mkdir(parents=True)
        return subprocess.CompletedProcess(command, 0)

    @property
    def commands(self) -> list[list[str]]:
        return [command for command, _, _ in self.calls]


@pytest.fixture
def runner():
    return RecordingRunner()


class FakeRegistry:
    """
    In-memory pkg-config registry patched over the `pkgconfig` module.

    `system` lists packages visible without PKG_CONFIG_PATH; `by_path`
    maps a PKG_CONFIG_PATH value to the packages it makes visible.
    """

    def __init__(self, system=(), by_path=None, lib_dir="/usr/lib"):
        self.system = set(system)
        self.by_path = {k: set(v) for k, v in (by_path or {}).items()}
        self.lib_dir = lib_dir
        self.queries: list[str] = []
        self.parse_calls: list[tuple[str, bool, str | None]] = []

    def _visible(self) -> set[str]:
        return self.system | self.by_path.get(os.environ.get("PKG_CONFIG_PATH"), set())

    def exists(self, package):
        self.queries.append(package)
        return package in self._visible()

    def installed(self, package, version):
        self.queries.append(package)
        return package in self._visible()

    def parse(self, package, static=False):
        self.parse_calls.append((package, static, os.environ.get("PKG_CONFIG_PATH")))
        if package not in self._visible():
            raise pkgconfig.PackageNotFoundError(f"{package} not found")
        libname = package[3:]
        libraries = [libname, "m", "pthread"] if static else [libname]
        return {
            "include_dirs": ["/usr/include/ffmpeg"],
            "library_dirs": [self.lib_dir],
            "libraries": libraries,
            "define_macros": [],
        }


@pytest.fixture
def registry(monkeypatch):
    """Factory installing a FakeRegistry into the pkgconfig module."""

    def install(**kwargs) -> FakeRegistry:
        fake = FakeRegistry(**kwargs)
        monkeypatch.setattr(pkgconfig, "exists", fake.exists)
        monkeypatch.setattr(pkgconfig, "installed", fake.installed)
        monkeypatch.setattr(pkgconfig, "parse", fake.parse)
        return fake

    return install


@pytest.fixture
def clean_env(monkeypatch):
    """Start without any of the variables the build tooling touches."""
    for name in (
        "PKG_CONFIG_PATH", "VCPKG_DYNAMIC", "VCPKG_ROOT", "VCPKG_DEFAULT_TRIPLET",
        "OUT_DIR", "FFMPEG_HEADERS_DIR", "READTHEDOCS", "FFMPEG_DYNAMIC_LINKING",
        "FFMPEG_PKG_CONFIG_PATH", "CPP",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
