"""
File-system helpers: existence checks, timestamp comparison, atomic copies.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Union

import cljlaunch.logger as log

PathLike = Union[str, Path]


def file_exists(path: PathLike) -> bool:
    """True for an existing regular file; directories do not count."""
    return Path(path).is_file()


def dir_exists(path: PathLike) -> bool:
    return Path(path).is_dir()


def is_read_only_dir(path: PathLike) -> bool:
    """A missing directory is treated as read-only."""
    p = Path(path)
    if not p.is_dir():
        return True
    return not os.access(p, os.W_OK)


def is_newer_file(path: PathLike, than: PathLike) -> bool:
    """
    True when *path* was modified strictly after *than*.

    A missing *path* is never newer; a missing *than* is always older.
    ``stat`` failures other than absence propagate.
    """
    if not file_exists(path):
        return False
    if not file_exists(than):
        return True
    return os.stat(path).st_mtime_ns > os.stat(than).st_mtime_ns


def read_nonempty_lines(path: PathLike) -> List[str]:
    with open(path, "r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip()]


def copy_file(src: PathLike, dst: PathLike) -> None:
    """
    Copy *src* to *dst* atomically.

    The data goes to a temporary file beside *dst* first and is then renamed
    into place with ``os.replace``, so readers never see a partial file.
    """
    dst = Path(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=dst.parent, prefix=f".{dst.name}~")
    try:
        os.close(fd)
        shutil.copyfile(src, tmp)
        os.replace(tmp, dst)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def ensure_seed_file(template: PathLike, dest: PathLike) -> bool:
    """
    Copy *template* to *dest* unless *dest* already exists.

    Returns True if a copy was made.
    """
    dest = Path(dest)
    if file_exists(dest):
        return False
    copy_file(template, dest)
    log.info(f"Created {dest}")
    return True
