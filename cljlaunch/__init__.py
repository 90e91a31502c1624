# Re-export the public API so callers can write `from cljlaunch import X`.
from cljlaunch.config import VERSION, LauncherConfig, load_config
from cljlaunch.errors import LauncherError, OptionError, ProcessError
from cljlaunch.hasher import CacheArtifacts, cache_artifacts, checksum_of, is_stale
from cljlaunch.options import Mode, Options, read_options

__version__ = "0.1.0"

__all__ = [
    "VERSION",
    "LauncherConfig",
    "load_config",
    "LauncherError",
    "OptionError",
    "ProcessError",
    "CacheArtifacts",
    "cache_artifacts",
    "checksum_of",
    "is_stale",
    "Mode",
    "Options",
    "read_options",
]
