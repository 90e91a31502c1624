import pytest

import cljlaunch.cli as cli
from cljlaunch.config import VERSION, LauncherConfig
from cljlaunch.errors import JavaNotFoundError, ProcessError


@pytest.fixture
def launched(monkeypatch, tmp_path):
    cfg = LauncherConfig(
        install_dir=tmp_path,
        java_cmd="java",
        tools_cp=tmp_path / "tools.jar",
        exec_jar=tmp_path / "exec.jar",
        config_dir=tmp_path / "cfg",
        tools_dir=tmp_path / "cfg" / "tools",
    )
    seen = []
    monkeypatch.setattr(cli, "load_config", lambda: cfg)
    monkeypatch.setattr(cli.tools, "ensure_tools", lambda install_dir: False)
    monkeypatch.setattr(cli, "launch", lambda options, config: seen.append(options))
    return seen


def test_help_prints_usage(launched, capsys):
    assert cli.main(["clojure", "-h"]) == 0
    assert "Usage:" in capsys.readouterr().out
    assert launched == []


def test_help_after_main_aliases_is_passed_on(launched):
    assert cli.main(["clojure", "-M:test", "--help"]) == 0
    assert launched[0].args == ["--help"]


def test_version_exits_without_launching(launched, capsys):
    assert cli.main(["clojure", "--version"]) == 0
    assert capsys.readouterr().out.strip() == f"Clojure CLI version {VERSION}"
    assert launched == []


def test_option_error_returns_one(launched, capsys):
    assert cli.main(["clojure", "-Sbogus"]) == 1
    assert "invalid option:-Sbogus" in capsys.readouterr().err
    assert launched == []


def test_clj_run_sets_rlwrap(launched):
    assert cli.main(["clj"], clj_run=True) == 0
    assert launched[0].rlwrap is True


def test_child_exit_status_is_propagated(launched, monkeypatch):
    def failing(options, config):
        raise ProcessError(["java", "-version"], 3)

    monkeypatch.setattr(cli, "launch", failing)
    assert cli.main(["clojure", "-M", "-m", "app"]) == 3


def test_missing_java(monkeypatch, capsys):
    def no_java():
        raise JavaNotFoundError("could not find java executable - please set JAVA_HOME")

    monkeypatch.setattr(cli, "load_config", no_java)
    assert cli.main(["clojure"]) == 1
    assert "JAVA_HOME" in capsys.readouterr().err


@pytest.mark.parametrize("returncode, expected", [(-2, 130), (-15, 143), (7, 7)])
def test_child_killed_by_signal_maps_like_a_shell(launched, monkeypatch, returncode, expected):
    def killed(options, config):
        raise ProcessError(["java"], returncode)

    monkeypatch.setattr(cli, "launch", killed)
    assert cli.main(["clojure", "-M"]) == expected
