"""
Clojure tools distribution and user config seeding.

  - Download the official tools release archive (once per version)
  - Extract only the files the launcher needs into the install dir
  - Seed the user config dir with an example deps.edn and tools.edn
"""
from __future__ import annotations

import shutil
import tarfile
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Iterable, List

import cljlaunch.logger as log
from cljlaunch import fs
from cljlaunch.config import (
    ARCHIVE_ROOT,
    DEPS_EDN,
    EXAMPLE_DEPS_EDN,
    LIBEXEC_DIR,
    REQUIRED_FILES,
    TOOLS_ARCHIVE,
    TOOLS_EDN,
    TOOLS_URL,
    LauncherConfig,
)
from cljlaunch.errors import ToolsInstallError


def install_target(install_dir: Path, name: str) -> Path:
    """Jars go under ``libexec/``; everything else sits at the top level."""
    if name.endswith(".jar"):
        return install_dir / LIBEXEC_DIR / name
    return install_dir / name


def is_installed(install_dir: Path) -> bool:
    return all(fs.file_exists(install_target(install_dir, f)) for f in REQUIRED_FILES)


def download(url: str, dest: Path) -> None:
    """Single blocking GET streamed to *dest*.  No retry, no resume."""
    log.info(f"Downloading {url}")
    try:
        with urllib.request.urlopen(url) as resp, open(dest, "wb") as out:
            shutil.copyfileobj(resp, out)
    except (urllib.error.URLError, OSError) as exc:
        dest.unlink(missing_ok=True)
        raise ToolsInstallError(f"failed to download {url}: {exc}") from exc


def extract(archive: Path, install_dir: Path, names: Iterable[str] = REQUIRED_FILES) -> List[str]:
    """
    Copy the members ``clojure-tools/<name>`` of *archive* into place.
    Returns the names that were extracted.
    """
    wanted = {f"{ARCHIVE_ROOT}/{name}": name for name in names}
    extracted: List[str] = []
    try:
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar:
                name = wanted.get(member.name)
                if name is None or not member.isfile():
                    continue
                src = tar.extractfile(member)
                if src is None:
                    continue
                target = install_target(install_dir, name)
                target.parent.mkdir(parents=True, exist_ok=True)
                with src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)
                log.info(f"  {member.name}  →  {target}")
                extracted.append(name)
    except (tarfile.TarError, OSError) as exc:
        raise ToolsInstallError(f"failed to extract {archive}: {exc}") from exc
    return extracted


def ensure_tools(install_dir: Path, *, url: str = TOOLS_URL) -> bool:
    """
    Make sure the tools distribution is unpacked in *install_dir*.

    Returns True if anything had to be installed.
    """
    if is_installed(install_dir):
        return False

    (install_dir / LIBEXEC_DIR).mkdir(parents=True, exist_ok=True)
    start = time.time()
    archive = install_dir / TOOLS_ARCHIVE
    if not fs.file_exists(archive):
        download(url, archive)

    log.info("Extracting clojure tools")
    extract(archive, install_dir)
    archive.unlink()

    if not is_installed(install_dir):
        missing = [f for f in REQUIRED_FILES if not fs.file_exists(install_target(install_dir, f))]
        raise ToolsInstallError(f"tools archive is missing: {', '.join(missing)}")
    log.success(f"Clojure tools installed in {log.elapsed_since(start)}")
    return True


def seed_user_config(config: LauncherConfig) -> None:
    """Copy example-deps.edn and tools.edn into the user config if absent."""
    fs.ensure_seed_file(config.install_dir / EXAMPLE_DEPS_EDN, config.config_dir / DEPS_EDN)
    fs.ensure_seed_file(config.install_dir / TOOLS_EDN, config.tools_dir / TOOLS_EDN)
