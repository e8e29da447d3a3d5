"""
Benchmarks for merkle-commit tree operations.

Run with: python -m merkle_commit.utils.benchmark
"""

import time
import statistics
from typing import Callable, List
from dataclasses import dataclass

from merkle_commit.crypto import sha256, keccak256, Sha256Hasher, Keccak256Hasher
from merkle_commit.core.tree import MerkleTree, verify_opening
from merkle_commit.utils.logger import get_logger

logger = get_logger("benchmark")


# =============================================================================
# Benchmark Framework
# =============================================================================


@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""
    name: str
    iterations: int
    total_time_ms: float
    avg_time_ms: float
    min_time_ms: float
    max_time_ms: float
    ops_per_sec: float

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.ops_per_sec:.0f} ops/s "
            f"(avg={self.avg_time_ms:.3f}ms, min={self.min_time_ms:.3f}ms, max={self.max_time_ms:.3f}ms)"
        )


def benchmark(
    name: str,
    func: Callable,
    iterations: int = 1000,
    warmup: int = 100,
) -> BenchmarkResult:
    """
    Run a benchmark.

    Args:
        name: Benchmark name
        func: Function to benchmark (no args)
        iterations: Number of iterations
        warmup: Warmup iterations

    Returns:
        BenchmarkResult
    """
    for _ in range(warmup):
        func()

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func()
        end = time.perf_counter()
        times.append((end - start) * 1000)  # ms

    total = sum(times)
    avg = statistics.mean(times)

    return BenchmarkResult(
        name=name,
        iterations=iterations,
        total_time_ms=total,
        avg_time_ms=avg,
        min_time_ms=min(times),
        max_time_ms=max(times),
        ops_per_sec=1000 / avg if avg > 0 else float("inf"),
    )


def _leaves(count: int) -> List[bytes]:
    return [f"leaf-{i}".encode() for i in range(count)]


# =============================================================================
# Hash Benchmarks
# =============================================================================


def benchmark_hashing() -> List[BenchmarkResult]:
    """Benchmark raw and domain-separated hashing."""
    results = []
    data = b"x" * 64
    digest = sha256(data)

    results.append(benchmark("SHA-256 (64 bytes)", lambda: sha256(data), iterations=10000))
    results.append(benchmark("Keccak-256 (64 bytes)", lambda: keccak256(data), iterations=10000))

    for hasher in (Sha256Hasher(), Keccak256Hasher()):
        results.append(benchmark(
            f"{hasher.name} hash_internal",
            lambda h=hasher: h.hash_internal(digest, digest),
            iterations=10000,
        ))

    return results


# =============================================================================
# Tree Benchmarks
# =============================================================================


def benchmark_build() -> List[BenchmarkResult]:
    """Benchmark full construction."""
    results = []

    small = _leaves(16)
    results.append(benchmark(
        "Build (height 4, 16 leaves)",
        lambda: MerkleTree.build_from_height(4, small),
        iterations=500,
    ))

    big = _leaves(1024)
    results.append(benchmark(
        "Build (height 10, 1024 leaves)",
        lambda: MerkleTree.build_from_height(10, big),
        iterations=20,
        warmup=2,
    ))

    return results


def benchmark_updates() -> List[BenchmarkResult]:
    """Benchmark single-leaf updates against batched flushes."""
    results = []
    tree = MerkleTree.build_from_height(10, _leaves(1024))

    results.append(benchmark(
        "Insert + update (height 10)",
        lambda: tree.insert_and_update(517, b"updated"),
        iterations=2000,
    ))

    def batched():
        for i in range(0, 64):
            tree.insert(i, b"batched")
        tree.flush()

    def unbatched():
        for i in range(0, 64):
            tree.insert_and_update(i, b"unbatched")

    results.append(benchmark("64 writes + flush (height 10)", batched, iterations=100, warmup=5))
    results.append(benchmark("64 insert_and_update (height 10)", unbatched, iterations=100, warmup=5))

    return results


def benchmark_openings() -> List[BenchmarkResult]:
    """Benchmark opening generation and verification."""
    results = []
    tree = MerkleTree.build_from_height(10, _leaves(1024))
    root = tree.get_root()

    results.append(benchmark(
        "Opening generation (height 10)",
        lambda: tree.get_opening(300),
        iterations=2000,
    ))

    opening = tree.get_opening(300)
    results.append(benchmark(
        "Opening verification (height 10)",
        lambda: verify_opening(opening, root, height=10),
        iterations=2000,
    ))

    encoded = opening.to_bytes()
    results.append(benchmark(
        "Opening decode + verify (height 10)",
        lambda: verify_opening(type(opening).from_bytes(encoded), root, height=10),
        iterations=2000,
    ))

    return results


# =============================================================================
# Main
# =============================================================================


def run_all_benchmarks() -> None:
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("merkle-commit Performance Benchmarks")
    print("=" * 60)

    sections = [
        ("Hashing", benchmark_hashing),
        ("Build", benchmark_build),
        ("Updates", benchmark_updates),
        ("Openings", benchmark_openings),
    ]

    for section_name, bench_func in sections:
        print(f"\n{section_name}")
        print("-" * 40)
        logger.debug(f"Running {section_name} benchmarks")
        results = bench_func()
        for r in results:
            print(f"  {r}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    run_all_benchmarks()
