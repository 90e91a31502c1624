import subprocess
from types import SimpleNamespace

import pytest

import cljlaunch.cmdline as cmdline
from cljlaunch.errors import ArgumentAcquisitionError


@pytest.mark.parametrize(
    "line, expected",
    [
        ("command", ["command"]),
        ('"command"', ["command"]),
        ("command --help", ["command", "--help"]),
        ("command --help\r\n", ["command", "--help"]),
        ('command -t test --input "alpha"', ["command", "-t", "test", "--input", "alpha"]),
        ("\"command\" --do '{:test :noop}'", ["command", "--do", "{:test :noop}"]),
        ("command   --extra-spaces   ", ["command", "--extra-spaces"]),
        ("command   --returns\r\n  \r", ["command", "--returns"]),
        ('command --empty-arg ""', ["command", "--empty-arg", ""]),
        ('clojure -Sdeps "{:deps {a/b {:mvn/version \\"1.0\\"}}}"',
         ["clojure", "-Sdeps", '{:deps {a/b {:mvn/version "1.0"}}}']),
        ('run "unterminated arg', ["run", '"unterminated arg']),
    ],
)
def test_split_to_args(line, expected):
    assert cmdline.split_to_args(line) == expected


@pytest.mark.parametrize(
    "token, expected",
    [
        ('"double-quotes"', "double-quotes"),
        ("'single-quotes'", "single-quotes"),
        ('"one-double-quote', '"one-double-quote'),
        ("'one-single-quote", "'one-single-quote"),
        ('end-in-double-quote"', 'end-in-double-quote"'),
        ("no-quotes", "no-quotes"),
        ('in "having" quotes', 'in "having" quotes'),
        ('"escaped \\"double\\" quotes"', 'escaped "double" quotes'),
        ("'single \\'kept\\''", "single \\'kept\\'"),
    ],
)
def test_trim_quotes(token, expected):
    assert cmdline.trim_quotes(token) == expected


def test_linuxize_native_passes_through():
    args = ["clojure", "-M", "x"]
    assert cmdline.linuxize(args, True) is args


def test_wmic_command():
    assert cmdline.wmic_command(313) == [
        "wmic", "process", "where", "ProcessId=313", "get", "CommandLine",
    ]


def test_windows_args_parses_wmic_output(monkeypatch):
    out = 'CommandLine\r\nclojure.exe -Sdeps "{:a 1}" -M  \r\n\r\n'

    def fake_run(cmd, **kwargs):
        assert cmd == cmdline.wmic_command(42)
        return SimpleNamespace(stdout=out, returncode=0)

    monkeypatch.setattr(cmdline.subprocess, "run", fake_run)
    assert cmdline.windows_args(42) == ["clojure.exe", "-Sdeps", "{:a 1}", "-M"]


def test_windows_args_rejects_unexpected_output(monkeypatch):
    monkeypatch.setattr(
        cmdline.subprocess, "run",
        lambda cmd, **kwargs: SimpleNamespace(stdout="No Instance(s) Available.\r\n", returncode=0),
    )
    with pytest.raises(ArgumentAcquisitionError, match="could not retrieve windows command line"):
        cmdline.windows_args(1)


def test_windows_args_without_wmic(monkeypatch):
    def missing(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "wmic")

    monkeypatch.setattr(cmdline.subprocess, "run", missing)
    with pytest.raises(ArgumentAcquisitionError, match="could not run wmic"):
        cmdline.linuxize(["clojure"], False)


def test_windows_args_failed_query(monkeypatch):
    def failed(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(cmdline.subprocess, "run", failed)
    with pytest.raises(ArgumentAcquisitionError):
        cmdline.windows_args(7)
