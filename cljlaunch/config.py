"""
Central configuration for the Clojure launcher.

Fixed names (tools version, distribution layout, cache file extensions) live
here as module constants.  Everything that depends on the machine or the
environment is resolved by small functions and collected once, at the entry
point, into an immutable :class:`LauncherConfig` that is passed down to the
stages that need it.
"""
from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from cljlaunch.errors import JavaNotFoundError

# ── Clojure tools distribution ────────────────────────────────────────────────
VERSION = "1.12.0.1517"

DEPS_EDN         = "deps.edn"
EXAMPLE_DEPS_EDN = "example-deps.edn"
TOOLS_EDN        = "tools.edn"
EXEC_JAR         = "exec.jar"
TOOLS_JAR        = f"clojure-tools-{VERSION}.jar"
LIBEXEC_DIR      = "libexec"

TOOLS_ARCHIVE = f"clojure-tools-{VERSION}.tar.gz"
TOOLS_URL = (
    "https://github.com/clojure/brew-install/releases/download/"
    f"{VERSION}/{TOOLS_ARCHIVE}"
)
# Top-level directory inside the release archive.
ARCHIVE_ROOT = "clojure-tools"

# Files the launcher needs from the archive, in install order.
REQUIRED_FILES = (DEPS_EDN, EXAMPLE_DEPS_EDN, TOOLS_EDN, EXEC_JAR, TOOLS_JAR)

# ── Install location ──────────────────────────────────────────────────────────
# Override the root with CLJLAUNCH_HOME; each tools version gets its own subdir.
HOME_DIR_NAME = ".cljlaunch"

# ── Cache ─────────────────────────────────────────────────────────────────────
# Bump when the layout or meaning of the cache files changes.
CACHE_VERSION = "6"
PROJECT_CACHE_DIR = ".cpcache"
MISSING_PATH = "NIL"

# Classpath files larger than this are passed to java as ``@file``.
CP_INLINE_LIMIT = 2048
CP_FILE_MARKER = "@"

# ── Readline wrappers ─────────────────────────────────────────────────────────
RLWRAP = "rlwrap"
RLWRAP_ARGS = ("-r", "-q", '"', "-b", "(){}[],^%#@\";:'")

REBEL_DEPS = '{:deps {com.bhauman/rebel-readline {:mvn/version "0.1.4"}}}'
REBEL_MAIN = "rebel-readline.main"

IS_WINDOWS = sys.platform == "win32"


@dataclass(frozen=True)
class LauncherConfig:
    """
    Paths resolved once per process.

    install_dir – unpacked tools distribution for :data:`VERSION`
    java_cmd    – java executable used for every invocation
    tools_cp    – classpath of the delegated tools jar
    exec_jar    – auxiliary jar appended for -X / -T
    config_dir  – user config dir (holds the user deps.edn)
    tools_dir   – user tool descriptors (``<name>.edn``)
    """
    install_dir: Path
    java_cmd:    str
    tools_cp:    Path
    exec_jar:    Path
    config_dir:  Path
    tools_dir:   Path


# ─────────────────────────────────────────────────────────────────────────────
# Directory resolution
# ─────────────────────────────────────────────────────────────────────────────

def _home() -> Path:
    env = os.environ.get("HOME")
    return Path(env) if env else Path.home()


def install_dir() -> Path:
    root = os.environ.get("CLJLAUNCH_HOME")
    base = Path(root) if root else _home() / HOME_DIR_NAME
    return base / VERSION


def config_dir() -> Path:
    """User config dir: CLJ_CONFIG, then XDG_CONFIG_HOME, then ~/.clojure."""
    env = os.environ.get("CLJ_CONFIG")
    if env is not None:
        return Path(env)
    env = os.environ.get("XDG_CONFIG_HOME")
    if env is not None:
        return Path(env) / "clojure"
    return _home() / ".clojure"


def user_cache_dir(cfg_dir: Path) -> Path:
    """User cache dir: CLJ_CACHE, then XDG_CACHE_HOME, then <config>/.cpcache."""
    env = os.environ.get("CLJ_CACHE")
    if env is not None:
        return Path(env)
    env = os.environ.get("XDG_CACHE_HOME")
    if env is not None:
        return Path(env) / "clojure"
    return cfg_dir / PROJECT_CACHE_DIR


def tools_dir(cfg_dir: Path) -> Path:
    return cfg_dir / "tools"


def tools_classpath(install: Path) -> Path:
    return install / LIBEXEC_DIR / TOOLS_JAR


def exec_jar(install: Path) -> Path:
    return install / LIBEXEC_DIR / EXEC_JAR


def java_command() -> str:
    """
    Resolve the java executable: JAVA_CMD wins, then ``java`` on PATH, then
    ``$JAVA_HOME/bin/java``.
    """
    env = os.environ.get("JAVA_CMD")
    if env:
        return env

    found = shutil.which("java")
    if found:
        return found

    java_home = os.environ.get("JAVA_HOME")
    if not java_home:
        raise JavaNotFoundError("could not find java executable - please set JAVA_HOME")
    name = "java.exe" if IS_WINDOWS else "java"
    return str(Path(java_home) / "bin" / name)


def env_opts(name: str) -> List[str]:
    """Whitespace-split value of an options variable such as JAVA_OPTS."""
    return os.environ.get(name, "").split()


def load_config() -> LauncherConfig:
    """Build the process-wide configuration.  Call once, at the entry point."""
    install = install_dir()
    cfg_dir = config_dir()
    return LauncherConfig(
        install_dir=install,
        java_cmd=java_command(),
        tools_cp=tools_classpath(install),
        exec_jar=exec_jar(install),
        config_dir=cfg_dir,
        tools_dir=tools_dir(cfg_dir),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Config file chain
# ─────────────────────────────────────────────────────────────────────────────

def config_paths(install: Path, cfg_dir: Path, repro: bool) -> Tuple[List[str], str]:
    """
    Return ``(paths, config_user)``.

    The chain is install deps.edn, user deps.edn, project deps.edn; the user
    file is left out (and *config_user* is empty) under ``-Srepro``.
    """
    if repro:
        return [str(install / DEPS_EDN), DEPS_EDN], ""
    user = str(cfg_dir / DEPS_EDN)
    return [str(install / DEPS_EDN), user, DEPS_EDN], user


def select_cache_dir(
    cfg_dir: Path,
    cwd: Path,
    *,
    writable: bool,
) -> Tuple[Path, str]:
    """
    Return ``(cache_dir, cache_key_discriminator)``.

    A project with its own deps.edn caches under ``.cpcache`` next to it.  If
    that directory cannot be written, the user cache is shared instead and the
    working directory goes into the cache key so projects do not collide.
    """
    if (cwd / DEPS_EDN).is_file():
        if writable:
            return cwd / PROJECT_CACHE_DIR, ""
        return user_cache_dir(cfg_dir), str(cwd.resolve())
    return user_cache_dir(cfg_dir), ""


def describe_path(path: str) -> str:
    """Escape a path for embedding in EDN strings."""
    if IS_WINDOWS:
        return path.replace("\\", "\\\\")
    return path
