"""Tests for link directive resolution."""

import os

import pkgconfig
import pytest

from ffmpeg_cffi._internals.errors import LinkError
from ffmpeg_cffi._internals.linking import (
    EnvOverride,
    LinkDirectives,
    component_directives,
    configure_linking,
)


class TestEnvOverride:
    def test_sets_and_restores(self, clean_env):
        clean_env.setenv("PKG_CONFIG_PATH", "/before")

        with EnvOverride({"PKG_CONFIG_PATH": "/during"}):
            assert os.environ["PKG_CONFIG_PATH"] == "/during"

        assert os.environ["PKG_CONFIG_PATH"] == "/before"

    def test_unset_variable_stays_unset(self, clean_env):
        with EnvOverride({"PKG_CONFIG_PATH": "/during"}):
            pass
        assert "PKG_CONFIG_PATH" not in os.environ

    def test_none_unsets_temporarily(self, clean_env):
        clean_env.setenv("VCPKG_DYNAMIC", "1")

        with EnvOverride({"VCPKG_DYNAMIC": None}):
            assert "VCPKG_DYNAMIC" not in os.environ

        assert os.environ["VCPKG_DYNAMIC"] == "1"

    def test_restores_on_exception(self, clean_env):
        clean_env.setenv("PKG_CONFIG_PATH", "/before")

        with pytest.raises(RuntimeError):
            with EnvOverride({"PKG_CONFIG_PATH": "/during"}):
                raise RuntimeError("boom")

        assert os.environ["PKG_CONFIG_PATH"] == "/before"


class TestConfigureLinking:
    def test_override_visible_during_queries_only(self, registry, clean_env):
        clean_env.setenv("PKG_CONFIG_PATH", "/user/path")
        fake = registry(by_path={"/built/pkgconfig": ["libavutil", "libavcodec"]})

        configure_linking(["libavutil", "libavcodec"], "/built/pkgconfig", is_static=False)

        assert [env for _, _, env in fake.parse_calls] == ["/built/pkgconfig"] * 2
        assert os.environ["PKG_CONFIG_PATH"] == "/user/path"

    def test_system_location_leaves_environment(self, registry, clean_env):
        clean_env.setenv("PKG_CONFIG_PATH", "/user/path")
        fake = registry(by_path={"/user/path": ["libavutil"]})

        configure_linking(["libavutil"], None, is_static=False)

        assert fake.parse_calls == [("libavutil", False, "/user/path")]

    def test_failure_raises_link_error_and_restores(self, registry, clean_env):
        fake = registry(by_path={"/built": ["libavutil"]})

        with pytest.raises(LinkError) as excinfo:
            configure_linking(["libavutil", "libswscale", "libavcodec"], "/built", is_static=True)

        assert excinfo.value.component == "libswscale"
        assert "libswscale not found!" in str(excinfo.value)
        assert [pkg for pkg, _, _ in fake.parse_calls] == ["libavutil", "libswscale"]
        assert "PKG_CONFIG_PATH" not in os.environ

    def test_missing_pkg_config_raises_link_error(self, monkeypatch, clean_env):
        def no_pkg_config(package, static=False):
            raise EnvironmentError("pkg-config probably not installed")

        monkeypatch.setattr(pkgconfig, "parse", no_pkg_config)

        with pytest.raises(LinkError) as excinfo:
            configure_linking(["libavutil"], None, is_static=False)

        assert excinfo.value.component == "libavutil"

    def test_dynamic_directives(self, registry, clean_env):
        registry(system=["libavutil", "libavcodec"])

        directives = configure_linking(["libavutil", "libavcodec"], None, is_static=False)

        assert directives.is_static is False
        assert directives.libraries == ["avutil", "avcodec"]
        assert directives.include_dirs == ["/usr/include/ffmpeg"]
        assert directives.library_dirs == ["/usr/lib"]
        assert directives.extra_objects == []

    def test_static_links_own_archive(self, registry, clean_env, tmp_path):
        (tmp_path / "libavutil.a").write_bytes(b"!<arch>\n")
        registry(system=["libavutil"], lib_dir=str(tmp_path))

        directives = component_directives("libavutil", is_static=True)

        assert directives.extra_objects == [str(tmp_path / "libavutil.a")]
        assert directives.static_libraries == ["avutil"]
        assert directives.libraries == ["m", "pthread"]

    def test_static_without_archive_keeps_library(self, registry, clean_env, tmp_path):
        registry(system=["libavutil"], lib_dir=str(tmp_path))

        directives = component_directives("libavutil", is_static=True)

        assert directives.libraries == ["avutil", "m", "pthread"]
        assert directives.extra_objects == []


class TestLinkDirectives:
    def test_merge_deduplicates(self):
        a = LinkDirectives(include_dirs=["/inc"], libraries=["avutil", "m"])
        b = LinkDirectives(include_dirs=["/inc", "/inc2"], libraries=["avcodec", "m"])

        a.merge(b)

        assert a.include_dirs == ["/inc", "/inc2"]
        assert a.libraries == ["avutil", "m", "avcodec"]

    def test_extension_kwargs(self):
        directives = LinkDirectives(
            include_dirs=["/inc"],
            library_dirs=["/lib"],
            libraries=["m"],
            extra_objects=["/lib/libavutil.a"],
            define_macros=[("HAVE_AV_CONFIG_H", None)],
        )

        assert directives.extension_kwargs() == {
            "include_dirs": ["/inc"],
            "library_dirs": ["/lib"],
            "libraries": ["m"],
            "extra_objects": ["/lib/libavutil.a"],
            "define_macros": [("HAVE_AV_CONFIG_H", None)],
        }

    def test_lines(self):
        directives = LinkDirectives(
            include_dirs=["/inc"],
            library_dirs=["/lib"],
            libraries=["m"],
            static_libraries=["avutil"],
            extra_objects=["/lib/libavutil.a"],
        )

        assert directives.lines() == [
            "include=/inc",
            "link-search=/lib",
            "link-lib=static=avutil",
            "link-lib=m",
            "link-object=/lib/libavutil.a",
        ]

    def test_to_dict(self):
        data = LinkDirectives(is_static=False, define_macros=[("A", "1")]).to_dict()
        assert data["static"] is False
        assert data["define_macros"] == [["A", "1"]]
