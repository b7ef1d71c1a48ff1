# benchmark.py - train-or-load every configured regressor and write its error report
import sys

from fare_bench.cli import benchmark_main

if __name__ == "__main__":
    sys.exit(benchmark_main())
