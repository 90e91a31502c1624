"""
Command assembly for every process the launcher starts.

The builders here only compute argument lists; :mod:`cljlaunch.runner`
starts them.  Each builder returns an :class:`Invocation` whose argument
list has had empty strings removed, since optional pieces are appended as
``""`` when absent.
"""
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from cljlaunch import fs
from cljlaunch.config import (
    CP_FILE_MARKER,
    CP_INLINE_LIMIT,
    IS_WINDOWS,
    RLWRAP,
    RLWRAP_ARGS,
)
from cljlaunch.hasher import CacheArtifacts
from cljlaunch.options import Mode, Options

MAKE_CLASSPATH_NS = "clojure.tools.deps.script.make-classpath2"
GENERATE_MANIFEST_NS = "clojure.tools.deps.script.generate-manifest2"
EXEC_NS = "clojure.run.exec"
CLOJURE_MAIN = "clojure.main"


@dataclass(frozen=True)
class Invocation:
    """
    A process to start.  ``argv[0]`` is the program name as shown to the
    child; *executable* is the file actually run.
    """
    executable: str
    argv:       Tuple[str, ...]

    def display(self) -> str:
        return " ".join(self.argv)


def remove_empty(args: Iterable[str]) -> List[str]:
    return [a for a in args if a != ""]


def _invocation(executable: str, args: Iterable[str]) -> Invocation:
    return Invocation(executable=executable, argv=tuple(remove_empty([executable, *args])))


# ─────────────────────────────────────────────────────────────────────────────
# Argument groups
# ─────────────────────────────────────────────────────────────────────────────

def build_tools_args(options: Options, stale: bool) -> List[str]:
    """
    Options forwarded to the classpath / manifest scripts.  Only needed when
    the classpath is being recomputed or a pom is being generated.
    """
    deps = options.deps
    if not (stale or deps.pom):
        return []

    args: List[str] = []
    if deps.deps_data:
        args += ["--config-data", deps.deps_data]
    if deps.main_aliases:
        args.append(f"-M{deps.main_aliases}")
    if deps.repl_aliases:
        args.append(f"-A{''.join(deps.repl_aliases)}")
    if deps.exec_aliases:
        args.append(f"-X{deps.exec_aliases}")
    if options.mode is Mode.TOOL:
        args.append("--tool-mode")
    if deps.tool_name:
        args += ["--tool-name", deps.tool_name]
    if deps.tool_aliases:
        args.append(f"-T{deps.tool_aliases}")
    if deps.force_cp:
        args.append("--skip-cp")
    if deps.threads is not None and deps.threads > 0:
        args += ["--threads", str(deps.threads)]
    if deps.tree:
        args.append("--tree")
    if deps.trace:
        args.append("--trace")
    return args


def init_args(options: Options) -> List[str]:
    init = options.init
    args: List[str] = []
    if init.init:
        args += ["-i", init.init]
    if init.eval:
        args += ["-e", init.eval]
    if init.report:
        args += ["--report", init.report]
    return args


def read_cache_opts(path: Path) -> List[str]:
    """Whitespace-separated options stored in a ``.jvm`` / ``.main`` file."""
    if not fs.file_exists(path):
        return []
    return path.read_text(encoding="utf-8").split()


# ─────────────────────────────────────────────────────────────────────────────
# Classpath
# ─────────────────────────────────────────────────────────────────────────────

def active_classpath(options: Options, artifacts: CacheArtifacts) -> str:
    """
    The classpath handed to java: nothing for ``-Sdescribe``, the ``-Scp``
    value if given, otherwise the cached one.  A cached classpath over
    :data:`CP_INLINE_LIMIT` bytes is passed by reference as ``@<cp file>``.
    """
    if options.deps.describe:
        return ""
    if options.deps.force_cp:
        return options.deps.force_cp

    data = artifacts.cp_file.read_bytes()
    if len(data) > CP_INLINE_LIMIT:
        return f"{CP_FILE_MARKER}{artifacts.cp_file}"
    return data.decode("utf-8")


def exec_classpath(cp: str, exec_jar: Path) -> str:
    """
    Append the exec jar to *cp*.

    For a ``@file`` classpath a sibling ``<file>.exec`` is kept with the jar
    appended, rewritten whenever it is not newer than the source file.
    """
    if not cp.startswith(CP_FILE_MARKER):
        return f"{cp}{os.pathsep}{exec_jar}"

    source = Path(cp[len(CP_FILE_MARKER):])
    target = source.with_name(source.name + ".exec")
    if not fs.is_newer_file(target, source):
        fs.copy_file(source, target)
        with open(target, "a", encoding="utf-8") as fh:
            fh.write(f"{os.pathsep}{exec_jar}")
    return f"{CP_FILE_MARKER}{target}"


# ─────────────────────────────────────────────────────────────────────────────
# Builders
# ─────────────────────────────────────────────────────────────────────────────

def make_classpath_cmd(
    java_cmd: str,
    tools_cp: Path,
    artifacts: CacheArtifacts,
    config_user: str,
    config_project: str,
    tools_args: Sequence[str],
    *,
    jvm_env_opts: Sequence[str] = (),
) -> Invocation:
    """Run the tools jar to (re)write the cache files for one key."""
    return _invocation(java_cmd, [
        *jvm_env_opts,
        "-classpath", str(tools_cp),
        CLOJURE_MAIN,
        "-m", MAKE_CLASSPATH_NS,
        "--config-user", config_user,
        "--config-project", config_project,
        "--basis-file", str(artifacts.basis_file),
        "--cp-file", str(artifacts.cp_file),
        "--jvm-file", str(artifacts.jvm_file),
        "--main-file", str(artifacts.main_file),
        "--manifest-file", str(artifacts.manifest_file),
        *tools_args,
    ])


def generate_pom_cmd(
    java_cmd: str,
    tools_cp: Path,
    config_user: str,
    config_project: str,
    tools_args: Sequence[str],
    *,
    jvm_env_opts: Sequence[str] = (),
) -> Invocation:
    return _invocation(java_cmd, [
        *jvm_env_opts,
        "-classpath", str(tools_cp),
        CLOJURE_MAIN,
        "-m", GENERATE_MANIFEST_NS,
        "--config-user", config_user,
        "--config-project", config_project,
        "--gen=pom",
        *tools_args,
    ])


def execute_cmd(
    java_cmd: str,
    jvm_cache_opts: Sequence[str],
    jvm_opts: Sequence[str],
    basis_file: Path,
    classpath: str,
    args: Sequence[str],
    *,
    java_opts: Sequence[str] = (),
) -> Invocation:
    """``-X`` / ``-T``: *classpath* must already include the exec jar."""
    return _invocation(java_cmd, [
        *java_opts,
        *jvm_cache_opts,
        *jvm_opts,
        f"-Dclojure.basis={basis_file}",
        "-classpath", classpath,
        CLOJURE_MAIN,
        "-m", EXEC_NS,
        *args,
    ])


def rlwrap_path() -> Optional[str]:
    return shutil.which(RLWRAP)


def clojure_cmd(
    java_cmd: str,
    jvm_cache_opts: Sequence[str],
    jvm_opts: Sequence[str],
    basis_file: Path,
    classpath: str,
    main_cache_opts: Sequence[str],
    clojure_args: Sequence[str],
    *,
    rlwrap: bool = False,
    java_opts: Sequence[str] = (),
    wrapper: Optional[str] = None,
) -> Invocation:
    """
    Plain ``clojure.main`` run (REPL or ``-M``).  With *rlwrap* set, the
    command is wrapped in rlwrap when it is installed; *wrapper* overrides
    the PATH lookup.
    """
    inner = _invocation(java_cmd, [
        *java_opts,
        *jvm_cache_opts,
        *jvm_opts,
        f"-Dclojure.basis={basis_file}",
        "-classpath", classpath,
        CLOJURE_MAIN,
        *main_cache_opts,
        *clojure_args,
    ])
    if not rlwrap or IS_WINDOWS:
        return inner

    wrapper = wrapper or rlwrap_path()
    if not wrapper:
        return inner
    return Invocation(executable=wrapper, argv=(RLWRAP, *RLWRAP_ARGS, *inner.argv))
