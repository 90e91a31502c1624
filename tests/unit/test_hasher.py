import os
import zlib
from pathlib import Path

import pytest

import cljlaunch.hasher as hasher
from cljlaunch.options import Options


def _touch(path: Path, mtime_ns: int, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


BASE = 1_600_000_000 * 10**9
OLDER = BASE - 10**9
NEWER = BASE + 10**9


@pytest.fixture
def artifacts(tmp_path):
    return hasher.cache_artifacts(tmp_path / "cache", "1234")


@pytest.fixture
def fresh(tmp_path, artifacts):
    """An existing .cp file, a config file older than it, and a tools dir."""
    cp = _touch(artifacts.cp_file, BASE, "src")
    cfg = _touch(tmp_path / "deps.edn", OLDER, "{}")
    tools_dir = tmp_path / "tools"
    tools_dir.mkdir()
    return cp, [str(cfg)], tools_dir


def test_cache_artifacts_share_key(tmp_path):
    a = hasher.cache_artifacts(tmp_path, "99")
    assert a.cp_file == tmp_path / "99.cp"
    assert a.jvm_file == tmp_path / "99.jvm"
    assert a.main_file == tmp_path / "99.main"
    assert a.basis_file == tmp_path / "99.basis"
    assert a.manifest_file == tmp_path / "99.manifest"


def test_checksum_matches_documented_layout(tmp_path):
    present = _touch(tmp_path / "deps.edn", BASE)
    missing = tmp_path / "nope" / "deps.edn"

    opts = Options()
    opts.deps.repl_aliases = [":a", ":b"]
    opts.deps.main_aliases = ":m"
    opts.deps.deps_data = "{:x 1}"

    key = hasher.checksum_of(opts, [str(present), str(missing)], "/work")
    text = f"6|/work|:a:b||:m|{{:x 1}}|||{present}|NIL"
    assert key == str(zlib.crc32(text.encode("utf-8")))


def test_checksum_is_stable(tmp_path):
    cfg = _touch(tmp_path / "deps.edn", BASE)
    opts = Options()
    opts.deps.exec_aliases = ":x"
    first = hasher.checksum_of(opts, [str(cfg)])
    assert hasher.checksum_of(opts, [str(cfg)]) == first


def test_checksum_follows_file_existence(tmp_path):
    cfg = tmp_path / "deps.edn"
    opts = Options()
    without = hasher.checksum_of(opts, [str(cfg)])
    cfg.write_text("{}")
    with_file = hasher.checksum_of(opts, [str(cfg)])
    assert without != with_file
    cfg.unlink()
    assert hasher.checksum_of(opts, [str(cfg)]) == without


def test_checksum_keeps_alias_positions():
    exec_opts = Options()
    exec_opts.deps.exec_aliases = ":foo"
    main_opts = Options()
    main_opts.deps.main_aliases = ":foo"
    assert hasher.checksum_of(exec_opts, []) != hasher.checksum_of(main_opts, [])


def test_checksum_uses_discriminator():
    opts = Options()
    assert hasher.checksum_of(opts, [], "/a") != hasher.checksum_of(opts, [], "/b")


def test_missing_cp_file_is_stale(artifacts, tmp_path):
    assert hasher.is_stale(Options(), artifacts, [], tmp_path) is True


def test_up_to_date_cache_is_not_stale(artifacts, fresh):
    _, paths, tools_dir = fresh
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is False


@pytest.mark.parametrize("flag", ["force", "trace", "tree", "prep"])
def test_flags_force_staleness(artifacts, fresh, flag):
    _, paths, tools_dir = fresh
    opts = Options()
    setattr(opts.deps, flag, True)
    assert hasher.is_stale(opts, artifacts, paths, tools_dir) is True


def test_newer_config_file_is_stale(artifacts, fresh, tmp_path):
    _, paths, tools_dir = fresh
    newer = _touch(tmp_path / "user" / "deps.edn", NEWER)
    assert hasher.is_stale(Options(), artifacts, paths + [str(newer)], tools_dir) is True


def test_same_mtime_is_not_newer(artifacts, fresh, tmp_path):
    _, paths, tools_dir = fresh
    same = _touch(tmp_path / "user" / "deps.edn", BASE)
    assert hasher.is_stale(Options(), artifacts, paths + [str(same)], tools_dir) is False


def test_missing_config_file_is_ignored(artifacts, fresh, tmp_path):
    _, paths, tools_dir = fresh
    paths.append(str(tmp_path / "absent" / "deps.edn"))
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is False


def test_newer_tool_descriptor_is_stale(artifacts, fresh):
    _, paths, tools_dir = fresh
    _touch(tools_dir / "new.edn", NEWER)
    opts = Options()
    opts.deps.tool_name = "new"
    assert hasher.is_stale(opts, artifacts, paths, tools_dir) is True


def test_older_tool_descriptor_is_fine(artifacts, fresh):
    _, paths, tools_dir = fresh
    _touch(tools_dir / "new.edn", OLDER)
    opts = Options()
    opts.deps.tool_name = "new"
    assert hasher.is_stale(opts, artifacts, paths, tools_dir) is False


def test_deleted_jar_is_stale(artifacts, fresh, tmp_path):
    _, paths, tools_dir = fresh
    kept = _touch(tmp_path / "m2" / "kept.jar", OLDER)
    gone = tmp_path / "m2" / "gone.jar"
    _touch(artifacts.cp_file, BASE, os.pathsep.join(["src", str(kept), str(gone)]))
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is True

    _touch(gone, OLDER)
    os.utime(artifacts.cp_file, ns=(BASE, BASE))
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is False


def test_manifest_entries(artifacts, fresh, tmp_path):
    _, paths, tools_dir = fresh
    local = _touch(tmp_path / "local" / "deps.edn", OLDER)
    _touch(artifacts.manifest_file, OLDER, f"\n{local}\n\n")
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is False

    os.utime(local, ns=(NEWER, NEWER))
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is True

    local.unlink()
    assert hasher.is_stale(Options(), artifacts, paths, tools_dir) is True
