"""
Launch pipeline: options → cache key → (refresh) → final command.

  1. Seed the user config dir and work out the deps.edn chain
  2. Pick the cache dir and compute the cache key
  3. Refresh the cached classpath through the tools jar if it is stale
  4. Do exactly one thing: write a pom, print the classpath, describe the
     environment, or run the program
"""
from __future__ import annotations

from pathlib import Path
from typing import List

import cljlaunch.logger as log
from cljlaunch import commands, fs, hasher, runner, tools
from cljlaunch.config import (
    DEPS_EDN,
    VERSION,
    LauncherConfig,
    config_paths,
    describe_path,
    env_opts,
    select_cache_dir,
)
from cljlaunch.options import Mode, Options


def describe(
    paths: List[str],
    config: LauncherConfig,
    config_user: str,
    cache_dir: Path,
    options: Options,
) -> str:
    """The EDN map printed by ``-Sdescribe``."""
    path_vector = "".join(f'"{p}" ' for p in paths)
    deps = options.deps
    return (
        f'{{:version "{VERSION}"\n'
        f" :config-files [{describe_path(path_vector)}]\n"
        f' :config-user "{describe_path(config_user)}"\n'
        f' :config-project "{describe_path(DEPS_EDN)}"\n'
        f' :install-dir "{describe_path(str(config.install_dir))}"\n'
        f' :config-dir "{describe_path(str(config.config_dir))}"\n'
        f' :cache-dir "{describe_path(str(cache_dir))}"\n'
        f" :force {str(deps.force).lower()}\n"
        f" :repro {str(deps.repro).lower()}\n"
        f' :main-aliases "{deps.main_aliases}"\n'
        f' :repl-aliases "{" ".join(deps.repl_aliases)}"}}'
    )


def launch(options: Options, config: LauncherConfig) -> None:
    """Carry out a parsed command line.  Errors propagate to the caller."""
    deps = options.deps
    cwd = Path.cwd()

    tools.seed_user_config(config)
    paths, config_user = config_paths(config.install_dir, config.config_dir, deps.repro)

    cache_dir, discriminator = select_cache_dir(
        config.config_dir, cwd, writable=not fs.is_read_only_dir(cwd),
    )
    key = hasher.checksum_of(options, paths, discriminator)
    artifacts = hasher.cache_artifacts(cache_dir, key)

    if deps.verbose:
        log.field("version", VERSION)
        log.field("install_dir", str(config.install_dir))
        log.field("config_dir", str(config.config_dir))
        log.field("config_paths", " ".join(paths))
        log.field("cache_dir", str(cache_dir))
        log.field("cp_file", str(artifacts.cp_file))

    stale = hasher.is_stale(options, artifacts, paths, config.tools_dir)
    tools_args = commands.build_tools_args(options, stale)
    tool_env_opts = env_opts("CLJ_JVM_OPTS")

    if stale and not deps.describe:
        if deps.verbose:
            log.info("Refreshing classpath")
        cache_dir.mkdir(parents=True, exist_ok=True)
        runner.run(commands.make_classpath_cmd(
            config.java_cmd, config.tools_cp, artifacts, config_user, DEPS_EDN,
            tools_args, jvm_env_opts=tool_env_opts,
        ), verbose=deps.verbose)

    cp = commands.active_classpath(options, artifacts)

    if deps.pom:
        runner.run(commands.generate_pom_cmd(
            config.java_cmd, config.tools_cp, config_user, DEPS_EDN,
            tools_args, jvm_env_opts=tool_env_opts,
        ), verbose=deps.verbose)
    elif deps.prep:
        return
    elif deps.print_classpath:
        print(cp)
    elif deps.describe:
        print(describe(paths, config, config_user, cache_dir, options))
    elif deps.tree:
        return
    elif deps.trace:
        log.info("Wrote trace.edn")
    elif options.mode in (Mode.EXEC, Mode.TOOL):
        _run_exec(options, config, artifacts, cp)
    else:
        _run_main(options, config, artifacts, cp)


def _run_exec(options: Options, config: LauncherConfig, artifacts: hasher.CacheArtifacts, cp: str) -> None:
    invocation = commands.execute_cmd(
        config.java_cmd,
        commands.read_cache_opts(artifacts.jvm_file),
        options.deps.jvm_opts,
        artifacts.basis_file,
        commands.exec_classpath(cp, config.exec_jar),
        options.args,
        java_opts=env_opts("JAVA_OPTS"),
    )
    runner.run_cancellable(invocation, verbose=options.deps.verbose)


def _run_main(options: Options, config: LauncherConfig, artifacts: hasher.CacheArtifacts, cp: str) -> None:
    if options.mode is Mode.REPL and options.args:
        log.warn("WARNING: Implicit use of clojure.main with options is deprecated, use -M $@")

    clojure_args = [
        *commands.init_args(options),
        *options.main.main_args,
        *(["--repl"] if options.main.repl else []),
        *options.args,
    ]
    invocation = commands.clojure_cmd(
        config.java_cmd,
        commands.read_cache_opts(artifacts.jvm_file),
        options.deps.jvm_opts,
        artifacts.basis_file,
        cp,
        commands.read_cache_opts(artifacts.main_file),
        clojure_args,
        rlwrap=options.rlwrap,
        java_opts=env_opts("JAVA_OPTS"),
    )
    runner.run_cancellable(invocation, verbose=options.deps.verbose)
