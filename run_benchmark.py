#!/usr/bin/env python3
"""
Benchmark the wheel sieve.

Times:
1. Building coverage to the configured bound
2. Counting and enumerating primes
3. Random primality queries (safe vs. token-checked)
4. Factorization of random integers (sieve vs. wheel trial division)

Then verifies against a plain Eratosthenes sieve and writes a CSV.

Usage:
    python run_benchmark.py
    python run_benchmark.py --config config/default.yaml --bound 1e9
"""

import argparse
import time
from pathlib import Path

import numpy as np
import pandas as pd

from wheelsieve.config import load_config
from wheelsieve.contracts import Known
from wheelsieve.engine import PrimeSieve
from wheelsieve.trial_division import factor_wheel
from wheelsieve.verify import verify_factorizations, verify_primality


def timed(label: str, rows: list, fn, *args, **kwargs):
    print(f"  {label}...", end=" ", flush=True)
    t0 = time.time()
    result = fn(*args, **kwargs)
    elapsed = time.time() - t0
    print(f"{elapsed:.2f}s")
    rows.append({'step': label, 'seconds': elapsed})
    return result


def run_benchmark(config: dict) -> pd.DataFrame:
    bench = config['benchmark']
    bound = int(bench['bound'])
    queries = int(bench['queries'])
    rng = np.random.default_rng(bench['seed'])
    rows = []

    print("=" * 60)
    print(f"Wheel Sieve Benchmark: bound = {bound:,}")
    print("=" * 60)

    sieve = PrimeSieve.from_config(config)

    print("-" * 60)
    print("1. Coverage")
    print("-" * 60)
    coverage = timed(f"ensure_coverage({bound:,})", rows, sieve.ensure_coverage, bound)
    print(f"  {sieve!r}")

    print("-" * 60)
    print("2. Counting and enumeration")
    print("-" * 60)
    count = timed("count_primes_upto", rows, sieve.count_primes_upto, bound)
    primes = timed("primes_upto", rows, sieve.primes_upto, bound)
    print(f"  pi({bound:,}) = {count:,}, largest = {int(primes[-1]):,}")

    print("-" * 60)
    print("3. Primality queries")
    print("-" * 60)
    candidates = rng.integers(1, bound, size=queries) | 1

    def query_all(**kwargs):
        return sum(sieve.is_prime(int(n), **kwargs) for n in candidates)

    safe = timed(f"{queries:,} is_prime", rows, query_all)
    fast = timed(f"{queries:,} is_prime (token, odd)", rows, query_all,
                 known=Known.NOT_DIV_2, coverage=coverage)
    ok = safe == fast
    if not ok:
        print(f"  MISMATCH token path found {fast:,} primes, safe path {safe:,}")
    print(f"  {safe:,} primes among {queries:,} odd candidates")

    print("-" * 60)
    print("4. Factorization")
    print("-" * 60)
    lo, hi = (int(x) for x in bench['factor_range'])
    numbers = [int(x) for x in rng.integers(lo, hi, size=min(queries, 1000))]
    timed(f"{len(numbers):,} factor (sieve)", rows,
          lambda: [sieve.factor(n) for n in numbers])
    timed(f"{len(numbers):,} factor (wheel)", rows,
          lambda: [factor_wheel(n) for n in numbers])

    print()
    ok = verify_primality(sieve, int(bench['verify_limit'])) and ok
    ok = verify_factorizations(sieve, numbers) and ok

    df = pd.DataFrame(rows)
    df['bound'] = bound
    df['verified'] = ok
    return df


def main():
    parser = argparse.ArgumentParser(description='Benchmark the wheel sieve')
    parser.add_argument('--config', type=str, default='config/default.yaml',
                        help='Path to config file')
    parser.add_argument('--bound', type=float, default=None,
                        help='Override benchmark.bound')
    parser.add_argument('--queries', type=int, default=None,
                        help='Override benchmark.queries')
    parser.add_argument('--output', type=str, default=None,
                        help='Override benchmark.output CSV path')
    args = parser.parse_args()

    config = load_config(args.config)
    if args.bound is not None:
        config['benchmark']['bound'] = int(args.bound)
    if args.queries is not None:
        config['benchmark']['queries'] = args.queries
    if args.output is not None:
        config['benchmark']['output'] = args.output

    total_start = time.time()
    df = run_benchmark(config)

    output = Path(config['benchmark']['output'])
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)

    print()
    print("=" * 60)
    print(f"Done in {time.time() - total_start:.1f}s, results in {output}")
    print("=" * 60)


if __name__ == '__main__':
    main()
