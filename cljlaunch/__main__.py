from cljlaunch.cli import clojure_main

if __name__ == "__main__":
    clojure_main()
