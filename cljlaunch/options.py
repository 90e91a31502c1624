"""
Command-line grammar of the ``clj`` / ``clojure`` launchers.

The argument vector is consumed by four groups, always in this order, each
taking what it recognises and handing the rest to the next:

  1. launcher opts    ``--rebel``, ``--native-args``
  2. dependency opts  ``-J``, ``-A``, ``-M``, ``-X``, ``-T``, ``-P``, ``-S...``, ``--``
  3. init opts        ``-i/--init``, ``-e/--eval``, ``--report``
  4. main opt         ``-m/--main``, ``-r/--repl``, ``-h/-?/--help``

Whatever is left becomes the trailing arguments passed to the program.  The
first malformed option raises an :class:`~cljlaunch.errors.OptionError`.
"""
from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from cljlaunch import cmdline
from cljlaunch.config import REBEL_DEPS, REBEL_MAIN, VERSION
from cljlaunch.errors import (
    DuplicateOptionError,
    EmptyInvocationError,
    InvalidValueError,
    MissingValueError,
    ReadlineOptionError,
    RemovedOptionError,
    UnknownOptionError,
)


class Mode(str, Enum):
    REPL = "repl"
    MAIN = "main"
    EXEC = "exec"
    TOOL = "tool"


@dataclass
class DepsOpts:
    jvm_opts:         List[str]     = field(default_factory=list)
    main_aliases:     str           = ""
    repl_aliases:     List[str]     = field(default_factory=list)
    tool_aliases:     str           = ""
    tool_name:        str           = ""
    exec_aliases:     str           = ""
    deps_data:        Optional[str] = None
    force_cp:         Optional[str] = None
    threads:          Optional[int] = None
    print_classpath:  bool          = False
    prep:             bool          = False
    repro:            bool          = False
    pom:              bool          = False
    tree:             bool          = False
    force:            bool          = False
    verbose:          bool          = False
    describe:         bool          = False
    trace:            bool          = False


@dataclass
class InitOpts:
    init:   Optional[str] = None
    eval:   Optional[str] = None
    report: Optional[str] = None


@dataclass
class MainOpts:
    main_args: List[str] = field(default_factory=list)
    repl:      bool      = False
    help:      bool      = False
    help_arg:  str       = ""


@dataclass
class Options:
    """Everything the command line asked for."""
    deps:        DepsOpts  = field(default_factory=DepsOpts)
    init:        InitOpts  = field(default_factory=InitOpts)
    main:        MainOpts  = field(default_factory=MainOpts)
    args:        List[str] = field(default_factory=list)
    native_args: bool      = True
    rlwrap:      bool      = False
    mode:        Mode      = Mode.REPL


# ── Dependency-opts tables ────────────────────────────────────────────────────

_MIGRATE_HINT = "use -A with repl, -M for main, -X for exec, -T for tool"

# Prefixes that used to select alias kinds and now only produce an error.
_REMOVED_PREFIXES = ("-R", "-C", "-O")

_REMOVED_FLAGS = {
    "-Sresolve-tags": "option changed, use: clj -X:deps git-resolve-tags",
}

# flag -> DepsOpts attribute set to True
_TOGGLES = {
    "-P":         "prep",
    "-Spath":     "print_classpath",
    "-Srepro":    "repro",
    "-Sforce":    "force",
    "-Spom":      "pom",
    "-Stree":     "tree",
    "-Sverbose":  "verbose",
    "-Sdescribe": "describe",
    "-Strace":    "trace",
}

# flag -> (DepsOpts attribute, option label, value label)
_SINGULAR: Dict[str, Tuple[str, str, str]] = {
    "-Sdeps":    ("deps_data", "deps data", "deps data value (EDN)"),
    "-Scp":      ("force_cp",  "classpath", "classpath value (CP)"),
    "-Sthreads": ("threads",   "threads",   "threads value (N)"),
}

# Alias prefixes that pick the run mode and close the dependency group,
# checked in order: (prefix, mode, DepsOpts attribute taking the rest of the token)
_MODE_PREFIXES = (
    ("-M",  Mode.MAIN, "main_aliases"),
    ("-X",  Mode.EXEC, "exec_aliases"),
    ("-T:", Mode.TOOL, "tool_aliases"),
    ("-T",  Mode.TOOL, "tool_name"),
)

_INIT_FLAGS = {
    "-i":       ("init",   "init",   "init path"),
    "--init":   ("init",   "init",   "init path"),
    "-e":       ("eval",   "eval",   "eval string"),
    "--eval":   ("eval",   "eval",   "eval string"),
    "--report": ("report", "report", "report target"),
}

_HELP_FLAGS = ("-h", "-?", "--help")

# Plain decimal, optional sign; no padding or digit separators.
_INTEGER = re.compile(r"[+-]?[0-9]+")


def read_options(
    argv: List[str],
    clj_run: bool,
    *,
    platform: str = sys.platform,
) -> Tuple[Options, bool]:
    """
    Parse a full argument vector (``argv[0]`` is the program name).

    Returns ``(options, exit_now)``; *exit_now* is True when a version flag was
    handled and nothing else should run.
    """
    if not argv:
        raise EmptyInvocationError("missing application argument (0)")

    opts = Options()
    pos = _launcher_opts(opts, argv, 1, clj_run, platform)

    argv = cmdline.linuxize(argv, opts.native_args)

    pos, done = _deps_opts(opts, argv, pos)
    if done:
        return opts, True
    if pos is None:
        return opts, False

    pos = _init_opts(opts, argv, pos)
    pos = _main_opt(opts, argv, pos)

    if opts.main.help and (opts.deps.main_aliases or opts.deps.repl_aliases):
        opts.main.help = False
        opts.args.append(opts.main.help_arg)

    opts.args.extend(argv[pos:])
    return opts, False


def _launcher_opts(opts: Options, argv: List[str], pos: int, clj_run: bool, platform: str) -> int:
    opts.rlwrap = clj_run
    opts.native_args = platform != "win32"

    rebel = False
    while pos < len(argv):
        arg = argv[pos]
        if arg == "--rebel":
            if not clj_run:
                raise ReadlineOptionError(f"readline option {arg} can only be used with clj")
            if rebel:
                raise ReadlineOptionError(f"readline option {arg} defined more than one time")
            rebel = True
            opts.rlwrap = False
            opts.deps.deps_data = REBEL_DEPS
            opts.main.main_args.extend(["-m", REBEL_MAIN])
        elif arg == "--native-args":
            opts.native_args = True
        else:
            break
        pos += 1
    return pos


def _take_value(argv: List[str], pos: int, message: str) -> str:
    if pos + 1 >= len(argv):
        raise MissingValueError(message)
    return argv[pos + 1]


def _deps_opts(opts: Options, argv: List[str], pos: int) -> Tuple[Optional[int], bool]:
    """
    Returns ``(next_pos, exit_now)``.  *next_pos* is None after ``--``: the
    remaining tokens have already been moved to the trailing arguments.
    """
    deps = opts.deps
    while pos < len(argv):
        arg = argv[pos]

        if arg == "-version":
            print(f"Clojure CLI version {VERSION}", file=sys.stderr)
            return pos, True
        if arg == "--version":
            print(f"Clojure CLI version {VERSION}")
            return pos, True

        if arg == "--":
            opts.args.extend(argv[pos + 1:])
            return None, False

        if arg.startswith("-J"):
            deps.jvm_opts.append(arg[2:])
        elif arg.startswith(_REMOVED_PREFIXES):
            raise RemovedOptionError(f"{arg[:2]} is no longer supported, {_MIGRATE_HINT}")
        elif arg == "-A":
            raise MissingValueError("-A requires an alias")
        elif arg.startswith("-A"):
            deps.repl_aliases.append(arg[2:])
        elif arg.startswith(("-M", "-X", "-T")):
            _select_mode(opts, arg)
            return pos + 1, False
        elif arg in _TOGGLES:
            setattr(deps, _TOGGLES[arg], True)
        elif arg in _SINGULAR:
            attr, label, value_label = _SINGULAR[arg]
            if getattr(deps, attr) is not None:
                raise DuplicateOptionError(f"{label} option {arg} defined more than one time")
            value = _take_value(argv, pos, f"{value_label} not defined for {arg} option")
            if attr == "threads":
                if not _INTEGER.fullmatch(value):
                    raise InvalidValueError(f"threads value '{value}' is not a number")
                deps.threads = int(value)
            else:
                setattr(deps, attr, value)
            pos += 1
        elif arg in _REMOVED_FLAGS:
            raise RemovedOptionError(_REMOVED_FLAGS[arg])
        elif arg.startswith("-S"):
            raise UnknownOptionError(f"invalid option:{arg}")
        else:
            break
        pos += 1

    return pos, False


def _select_mode(opts: Options, arg: str) -> None:
    for prefix, mode, attr in _MODE_PREFIXES:
        if arg.startswith(prefix):
            opts.mode = mode
            if arg[2:]:
                setattr(opts.deps, attr, arg[2:])
            return


def _init_opts(opts: Options, argv: List[str], pos: int) -> int:
    init = opts.init
    while pos < len(argv):
        arg = argv[pos]
        if arg not in _INIT_FLAGS:
            break
        attr, label, value_label = _INIT_FLAGS[arg]
        if getattr(init, attr) is not None:
            raise DuplicateOptionError(f"{label} option {arg} defined more than one time")
        value = _take_value(argv, pos, f"{value_label} not defined for {arg} option")
        if attr == "report" and not value:
            raise InvalidValueError(f"empty report target is not valid for {arg} option")
        setattr(init, attr, value)
        pos += 2
    return pos


def _main_opt(opts: Options, argv: List[str], pos: int) -> int:
    if pos >= len(argv):
        return pos
    arg = argv[pos]
    if arg in ("-m", "--main"):
        ns = _take_value(argv, pos, f"main ns-name not defined for {arg} option")
        opts.main.main_args.extend(["-m", ns])
        return pos + 2
    if arg in ("-r", "--repl"):
        opts.main.repl = True
        return pos + 1
    if arg in _HELP_FLAGS:
        opts.main.help = True
        opts.main.help_arg = arg
        return pos + 1
    return pos
