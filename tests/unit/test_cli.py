"""Unit tests for the command-line interface."""

import signal
from unittest.mock import patch

import pytest
from semver import Version

from whichpython import cli
from whichpython.config import DiscoveryConfig
from whichpython.discovery import Architecture, CondaEnvironment, OperationCancelled, PythonEnvironment


@pytest.fixture(autouse=True)
def default_config():
    """Keep user config files and .env out of CLI tests."""
    with patch("whichpython.cli.load_config", return_value=DiscoveryConfig()) as mock:
        yield mock


@pytest.fixture
def environment(tmp_path, make_file):
    return PythonEnvironment(
        interpreter_path=make_file(tmp_path / "bin" / "python3.9"),
        home=tmp_path,
        language_version=Version(3, 9, 7),
        architecture=Architecture.X64,
    )


class TestList:
    def test_list(self, environment, tmp_path, capsys):
        with patch("whichpython.cli.enumerate_environments", return_value=iter([environment])):
            assert cli.main(["list"]) == 0

        assert capsys.readouterr().out == f"3.9-x64 @ {tmp_path}\n"

    def test_list_home_only(self, environment, tmp_path, capsys):
        with patch("whichpython.cli.enumerate_environments", return_value=iter([environment])):
            assert cli.main(["list", "--home-only"]) == 0

        assert capsys.readouterr().out == f"{tmp_path}\n"

    def test_list_conda(self, conda_env, capsys):
        home = conda_env("ml", "3.10")
        env = CondaEnvironment(interpreter_path=home / "bin" / "python3.10", home=home)

        with patch(
            "whichpython.cli.enumerate_conda_environments", return_value=iter([env])
        ) as mock:
            assert cli.main(["list", "--conda"]) == 0

        mock.assert_called_once()
        assert capsys.readouterr().out == f"??-??? @ {home}\n"

    def test_list_directories(self, unix_install, capsys):
        with patch("whichpython.cli.enumerate_in_directories", return_value=iter([])) as mock:
            assert cli.main(["list", "--dir", str(unix_install / "bin"), "--mask", "python3*"]) == 0

        args, kwargs = mock.call_args
        assert args[0] == [unix_install / "bin"]
        assert kwargs["masks"] == ["python3*"]

    def test_list_cancelled(self, environment):
        def cancelled():
            yield environment
            raise OperationCancelled("stop")

        with patch("whichpython.cli.enumerate_environments", return_value=cancelled()):
            assert cli.main(["list"]) == 130

    def test_interrupt_cancels_between_candidates(self, environment, capsys):
        """Ctrl-C sets the token and the listing stops at the next check."""
        original = signal.getsignal(signal.SIGINT)

        def interrupted(cancellation, config):
            yield environment
            signal.getsignal(signal.SIGINT)(signal.SIGINT, None)
            assert cancellation.is_cancelled
            cancellation.raise_if_cancelled()
            yield environment

        with patch("whichpython.cli.enumerate_environments", side_effect=interrupted):
            assert cli.main(["list"]) == 130

        assert len(capsys.readouterr().out.splitlines()) == 1
        assert signal.getsignal(signal.SIGINT) is original


class TestInterpreter:
    def test_success(self, environment, tmp_path, capsys):
        with patch("whichpython.cli.from_interpreter_checked", return_value=environment):
            assert cli.main(["interpreter", str(environment.interpreter_path)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == [
            "ver: 3.9.7",
            f"exe: {environment.interpreter_path}",
            f"home: {tmp_path}",
            "dll: ",
        ]

    def test_missing_file(self, tmp_path, capsys):
        """A missing interpreter prints the cause and exits non-zero."""
        assert cli.main(["interpreter", str(tmp_path / "python3")]) == 1

        err = capsys.readouterr().err
        assert "does not exist" in err


class TestActive:
    def test_active(self, conda_env, capsys):
        home = conda_env("work", "3.11")
        env = CondaEnvironment(interpreter_path=home / "bin" / "python3.11", home=home)

        with patch("whichpython.cli.get_active_conda_environment", return_value=env):
            assert cli.main(["active"]) == 0

        assert capsys.readouterr().out == f"work @ {home}\n"

    def test_no_active(self, capsys):
        with patch("whichpython.cli.get_active_conda_environment", return_value=None):
            assert cli.main(["active"]) == 1


def test_command_required(capsys):
    with pytest.raises(SystemExit):
        cli.main([])
