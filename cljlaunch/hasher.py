"""
Classpath cache for the Clojure launcher.

How it works
------------
Computing a classpath means running the delegated tools jar on the JVM, so
the results are cached as a family of sibling files in a cache directory,
all named after one *cache key*::

    <key>.cp         classpath string
    <key>.jvm        JVM options collected from aliases
    <key>.main       main options collected from aliases
    <key>.basis      resolved basis (EDN)
    <key>.manifest   extra files the basis depends on, one path per line

The key is a CRC-32 over everything on the command line that can change the
classpath (alias strings, ``-Sdeps`` data, tool name) plus the config file
chain, where each config file contributes its path if it exists or ``NIL``
if it does not.  Collisions only pick the wrong slot; the staleness checks
below still catch a slot whose inputs have moved on.

Staleness follows the make model: the ``.cp`` file is the target and it is
rebuilt when any input is newer, when a jar it lists has disappeared, or when
a flag asks for a fresh resolution.

Public API
----------
  checksum_of(options, config_paths, discriminator)   -> str
  cache_artifacts(cache_dir, key)                      -> CacheArtifacts
  is_stale(options, artifacts, config_paths, tools_dir) -> bool
"""
from __future__ import annotations

import os
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import List

from cljlaunch import fs
from cljlaunch.config import CACHE_VERSION, MISSING_PATH
from cljlaunch.options import Options

_SEPARATOR = "|"


@dataclass(frozen=True)
class CacheArtifacts:
    cp_file:       Path
    jvm_file:      Path
    main_file:     Path
    basis_file:    Path
    manifest_file: Path


def cache_artifacts(cache_dir: Path, key: str) -> CacheArtifacts:
    return CacheArtifacts(
        cp_file=cache_dir / f"{key}.cp",
        jvm_file=cache_dir / f"{key}.jvm",
        main_file=cache_dir / f"{key}.main",
        basis_file=cache_dir / f"{key}.basis",
        manifest_file=cache_dir / f"{key}.manifest",
    )


def checksum_of(options: Options, config_paths: List[str], discriminator: str = "") -> str:
    """
    Compute the cache key for *options* and *config_paths*.

    Unset alias kinds contribute an empty field so every value keeps its
    position.  The only I/O is an existence check per config file.
    """
    deps = options.deps
    parts = [
        CACHE_VERSION,
        discriminator,
        "".join(deps.repl_aliases),
        deps.exec_aliases,
        deps.main_aliases,
        deps.deps_data or "",
        deps.tool_name,
        deps.tool_aliases,
    ]
    for path in config_paths:
        parts.append(path if fs.file_exists(path) else MISSING_PATH)

    text = _SEPARATOR.join(parts)
    return str(zlib.crc32(text.encode("utf-8")))


def _forced(options: Options) -> bool:
    deps = options.deps
    return deps.force or deps.trace or deps.tree or deps.prep


def _missing_jar(cp_file: Path) -> bool:
    """True if the cached classpath lists a jar that no longer exists."""
    classpath = cp_file.read_text(encoding="utf-8")
    for entry in classpath.strip().split(os.pathsep):
        if entry.endswith(".jar") and not fs.file_exists(entry):
            return True
    return False


def _manifest_changed(artifacts: CacheArtifacts) -> bool:
    if not fs.file_exists(artifacts.manifest_file):
        return False
    for path in fs.read_nonempty_lines(artifacts.manifest_file):
        if not fs.file_exists(path):
            return True
        if fs.is_newer_file(path, artifacts.cp_file):
            return True
    return False


def is_stale(
    options: Options,
    artifacts: CacheArtifacts,
    config_paths: List[str],
    tools_dir: Path,
) -> bool:
    """
    Decide whether the cached classpath must be recomputed.

    Checked in order, first hit wins:
      1. ``-Sforce`` / ``-Strace`` / ``-Stree`` / ``-P``, or no ``.cp`` file
      2. the named tool's descriptor (``<tools_dir>/<name>.edn``) is newer
      3. a jar listed in the ``.cp`` file is gone
      4. a config file is newer than the ``.cp`` file
      5. a file listed in the ``.manifest`` is gone or newer

    ``stat`` errors propagate.
    """
    cp_file = artifacts.cp_file
    if _forced(options) or not fs.file_exists(cp_file):
        return True

    tool_name = options.deps.tool_name
    if tool_name and fs.is_newer_file(tools_dir / f"{tool_name}.edn", cp_file):
        return True

    if _missing_jar(cp_file):
        return True

    if any(fs.is_newer_file(path, cp_file) for path in config_paths):
        return True

    return _manifest_changed(artifacts)
