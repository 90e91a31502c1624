"""
Entry points for the ``clojure`` and ``clj`` commands.

``clj`` differs from ``clojure`` only in wrapping the REPL with rlwrap by
default and in accepting ``--rebel``.
"""
from __future__ import annotations

import sys
from typing import List, Optional

import cljlaunch.logger as log
from cljlaunch import tools
from cljlaunch.config import VERSION, load_config
from cljlaunch.errors import LauncherError, ProcessError
from cljlaunch.launcher import launch
from cljlaunch.options import read_options

USAGE = f"""\
Version: {VERSION} of the clojure tools

Usage:
  Start a REPL   clj     [clj-opt*] [-Aaliases]
  Exec fn(s)     clojure [clj-opt*] -X[aliases] a/fn? [kpath v]* kv-map?
  Run tool       clojure [clj-opt*] -T[name|aliases] a/fn [kpath v] kv-map?
  Run main       clojure [launcher-opt*] [clj-opt*] -M[aliases] [init-opt*] [main-opt] [arg*]
  Prepare        clojure [launcher-opt*] [clj-opt*] -P [other exec opts]

exec-opts:
  -Aaliases         Use concatenated aliases to modify classpath
  -X[aliases]       Use concatenated aliases to modify classpath or supply exec fn/args
  -T[name|aliases]  Invoke tool by name or via aliases ala -X
  -M[aliases]       Use concatenated aliases to modify classpath or supply main opts
  -P                Prepare deps - download libs, cache classpath, but don't exec

clj-opts:
  -Jopt          Pass opt through in java_opts, ex: -J-Xmx512m
  -Sdeps EDN     Deps data to use as the last deps file to be merged
  -Spath         Compute classpath and echo to stdout only
  -Stree         Print dependency tree
  -Scp CP        Do NOT compute or cache classpath, use this one instead
  -Srepro        Ignore the ~/.clojure/deps.edn config file
  -Sforce        Force recomputation of the classpath (don't use the cache)
  -Sverbose      Print important path info to console
  -Sdescribe     Print environment and command parsing info as data
  -Sthreads N    Set specific number of download threads
  -Strace        Write a trace.edn file that traces deps expansion
  -Spom          Generate (or update) pom.xml with deps and paths
  --             Stop parsing dep options and pass remaining arguments to clojure.main
  -version       Print the version to stderr and exit
  --version      Print the version to stdout and exit

init-opt:
  -i, --init path     Load a file or resource
  -e, --eval string   Eval exprs in string; print non-nil values
  --report target     Report uncaught exception to "file" (default), "stderr", or "none"

main-opt:
  -m, --main ns-name  Call the -main function from namespace w/args
  -r, --repl          Run a repl
  path                Run a script from a file or resource
  -                   Run a script from standard input
  -h, -?, --help      Print this help message and exit

launcher-opt:
  --rebel        clj only. Use rebel-readline instead of rlwrap for the REPL
  --native-args  Use the command line as received, without re-splitting it
                 on Windows (the default everywhere else)

Environment:
  CLJ_CONFIG, XDG_CONFIG_HOME   user config dir (default ~/.clojure)
  CLJ_CACHE, XDG_CACHE_HOME     user cache dir
  CLJLAUNCH_HOME                tools install root (default ~/.cljlaunch)
  JAVA_CMD, JAVA_HOME           java executable
  JAVA_OPTS, CLJ_JVM_OPTS       extra JVM options for programs / for the tools
"""


def exit_status(returncode: int) -> int:
    """Map a child status to ours; death by signal N becomes 128 + N, as in a shell."""
    if returncode < 0:
        return 128 - returncode
    return returncode or 1


def main(argv: Optional[List[str]] = None, *, clj_run: bool = False) -> int:
    """Run one invocation and return the process exit code."""
    argv = list(sys.argv if argv is None else argv)
    verbose = False
    try:
        config = load_config()
        tools.ensure_tools(config.install_dir)

        options, exit_now = read_options(argv, clj_run)
        if exit_now:
            return 0
        if options.main.help:
            print(USAGE)
            return 0

        verbose = options.deps.verbose
        launch(options, config)
    except ProcessError as exc:
        if verbose:
            log.error(str(exc))
        return exit_status(exc.returncode)
    except (LauncherError, OSError) as exc:
        log.error(str(exc))
        return 1
    return 0


def clojure_main() -> None:
    sys.exit(main(clj_run=False))


def clj_main() -> None:
    sys.exit(main(clj_run=True))
