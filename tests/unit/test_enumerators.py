"""Unit tests for candidate enumerators."""

import os
from pathlib import Path

import pytest
from semver import Version

from whichpython.discovery import Architecture, CancellationToken, OperationCancelled
from whichpython.discovery.enumerators import (
    CatalogEntry,
    active_conda_environment,
    enumerate_conda,
    enumerate_directories,
    enumerate_path,
    enumerate_registry,
    read_manifest,
)


class FakeCatalog:
    """Stands in for the Windows registry."""

    def __init__(self, entries):
        self._entries = entries

    def entries(self):
        return iter(self._entries)


class TestEnumerateDirectories:
    def test_filters_non_interpreters(self, linux_detector, unix_install, make_file):
        make_file(unix_install / "bin" / "pip3")
        make_file(unix_install / "bin" / "pythonw")

        found = list(enumerate_directories([unix_install / "bin"], linux_detector))

        assert [env.interpreter_path.name for env in found] == ["python3.9"]

    def test_missing_directories_are_skipped(self, linux_detector, unix_install, tmp_path):
        found = list(
            enumerate_directories(
                [tmp_path / "absent", unix_install / "bin"], linux_detector
            )
        )
        assert len(found) == 1

    def test_explicit_masks_bypass_name_filter(self, linux_detector, unix_install):
        found = list(
            enumerate_directories(
                [unix_install / "bin"], linux_detector, masks=["python3.9-config"]
            )
        )

        assert [env.interpreter_path.name for env in found] == ["python3.9-config"]
        assert found[0].language_version == Version(3, 9)

    def test_is_lazy(self, linux_detector, unix_install, fake_probe):
        """Nothing is listed or probed before the first item is requested."""
        iterator = enumerate_directories([unix_install / "bin"], linux_detector)
        fake_probe.assert_not_called()
        assert next(iterator).language_version == Version(3, 9)

    def test_cancellation(self, linux_detector, unix_install):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            next(enumerate_directories([unix_install / "bin"], linux_detector, cancellation=token))

    def test_deterministic_order(self, linux_detector, tmp_path, make_file):
        for version in ("3.11", "3.9", "3.10"):
            make_file(tmp_path / "bin" / f"python{version}")
            (tmp_path / "lib" / f"python{version}").mkdir(parents=True)

        names = [
            env.interpreter_path.name
            for env in enumerate_directories([tmp_path / "bin"], linux_detector)
        ]

        assert names == sorted(names)
        assert len(names) == 3


class TestEnumeratePath:
    def test_splits_path_in_order(self, linux_detector, unix_install, conda_env):
        other = conda_env("other", "3.11")
        path_value = os.pathsep.join(["", str(other / "bin"), str(unix_install / "bin")])

        found = list(enumerate_path(linux_detector, path_value=path_value))

        assert [env.language_version for env in found] == [Version(3, 11), Version(3, 9)]

    def test_reads_environment_path(self, linux_detector, unix_install, monkeypatch):
        monkeypatch.setenv("PATH", str(unix_install / "bin"))

        found = list(enumerate_path(linux_detector))

        assert [env.home for env in found] == [unix_install]


class TestEnumerateRegistry:
    @pytest.fixture
    def installs(self, tmp_path, make_file):
        make_file(tmp_path / "Python39" / "python.exe")
        make_file(tmp_path / "Python39" / "python39.dll", executable=False)
        make_file(tmp_path / "Python38-32" / "python.exe")
        make_file(tmp_path / "Conda" / "python.exe")
        make_file(tmp_path / "Conda" / "python310.dll", executable=False)
        (tmp_path / "Broken").mkdir()
        return tmp_path

    def test_reads_catalog(self, windows_detector, installs):
        catalog = FakeCatalog(
            [
                CatalogEntry("3.9", str(installs / "Python39")),
                CatalogEntry("3.8-32", str(installs / "Python38-32")),
                CatalogEntry("3.7", None),
                CatalogEntry("3.6", str(installs / "Broken")),
                CatalogEntry("ContinuumAnalytics", str(installs / "Conda")),
            ]
        )

        found = list(enumerate_registry(windows_detector, catalog))

        assert [env.home for env in found] == [
            installs / "Python39",
            installs / "Python38-32",
            installs / "Conda",
        ]
        py39, py38, conda = found
        assert py39.language_version == Version(3, 9)
        assert py39.dynamic_library_path == installs / "Python39" / "python39.dll"
        assert py39.architecture == Architecture.current()
        assert py38.architecture == Architecture.X86
        assert py38.dynamic_library_path is None
        assert conda.language_version == Version(3, 10)

    def test_executable_path_value(self, windows_detector, installs, make_file):
        interpreter = make_file(installs / "Custom" / "bin" / "python.exe")
        catalog = FakeCatalog(
            [CatalogEntry("3.12", str(installs / "Custom"), str(interpreter))]
        )

        found = list(enumerate_registry(windows_detector, catalog))

        assert found[0].interpreter_path == interpreter

    def test_no_catalog_off_windows(self, windows_detector, monkeypatch):
        monkeypatch.setattr(
            "whichpython.discovery.enumerators.default_catalog", lambda: None
        )
        assert list(enumerate_registry(windows_detector)) == []


class TestConda:
    def test_read_manifest_skips_blank_lines(self, tmp_path):
        manifest = tmp_path / "environments.txt"
        manifest.write_text("/opt/a\n\n   \n  /opt/b  \n")

        assert read_manifest(manifest) == [Path("/opt/a"), Path("/opt/b")]

    def test_manifest_with_invalid_utf8(self, linux_detector, conda_env, tmp_path):
        """An undecodable line is skipped and later lines are still read."""
        valid = conda_env("valid", "3.10")
        manifest = tmp_path / "environments.txt"
        manifest.write_bytes(b"/opt/env\xff\n" + str(valid).encode("utf-8") + b"\n")

        assert len(read_manifest(manifest)) == 2
        found = list(enumerate_conda(linux_detector, manifest=manifest, system_roots=[]))

        assert [env.home for env in found] == [valid]

    def test_missing_manifest_is_empty(self, linux_detector, tmp_path):
        assert read_manifest(tmp_path / "environments.txt") == []
        found = list(
            enumerate_conda(linux_detector, manifest=tmp_path / "environments.txt", system_roots=[])
        )
        assert found == []

    def test_manifest_then_system_roots(self, linux_detector, conda_env, tmp_path):
        listed = conda_env("listed", "3.9")
        system_root = tmp_path / "system_envs"
        system_env = system_root / "shared"
        (system_env / "lib" / "python3.12").mkdir(parents=True)
        (system_env / "bin").mkdir()
        (system_env / "bin" / "python3.12").write_text("")
        manifest = tmp_path / "environments.txt"
        manifest.write_text(f"{listed}\n")

        found = list(
            enumerate_conda(linux_detector, manifest=manifest, system_roots=[system_root])
        )

        assert [env.name for env in found] == ["listed", "shared"]

    def test_active_environment(self, linux_detector, conda_env):
        home = conda_env("active", "3.11")

        env = active_conda_environment(linux_detector, {"CONDA_PREFIX": str(home)})

        assert env is not None
        assert env.name == "active"

    def test_no_active_environment(self, linux_detector, tmp_path):
        assert active_conda_environment(linux_detector, {}) is None
        assert active_conda_environment(
            linux_detector, {"CONDA_PREFIX": str(tmp_path / "gone")}
        ) is None
