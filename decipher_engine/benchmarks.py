"""Benchmark suite for Decipher Engine.

Every transformer and both scorers are pure regex passes over the input, so
runtime grows with snippet size. This suite times each of them over scaled
copies of the bundled sample and records wall time, throughput and resident
memory.
"""

import cProfile
import io
import json
import os
import pstats
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, List, Optional

import psutil

from decipher_engine.core.registry import BUILTIN_TRANSFORMERS
from decipher_engine.core.scoring import calculate_readability_score, get_challenge_score
from decipher_engine.samples import load_sample

DEFAULT_SCALES = (1, 4, 16)


@dataclass
class PerformanceMetrics:
    """Container for one benchmark measurement."""

    execution_time: float = 0.0  # seconds
    memory_peak: float = 0.0  # resident set size in MB
    input_size: int = 0  # characters
    throughput: float = 0.0  # characters per second
    top_functions: Dict[str, float] = field(default_factory=dict)


class PerformanceProfiler:
    """Measure one code block."""

    def __init__(self):
        self.process = psutil.Process(os.getpid())
        self.metrics = PerformanceMetrics()

    @contextmanager
    def profile(self, enable_cprofile: bool = False):
        profiler = cProfile.Profile() if enable_cprofile else None
        start_rss = self.process.memory_info().rss
        start = time.perf_counter()
        if profiler:
            profiler.enable()
        try:
            yield self.metrics
        finally:
            if profiler:
                profiler.disable()
            self.metrics.execution_time = time.perf_counter() - start
            end_rss = self.process.memory_info().rss
            self.metrics.memory_peak = max(start_rss, end_rss) / (1024 * 1024)
            if self.metrics.execution_time > 0:
                self.metrics.throughput = self.metrics.input_size / self.metrics.execution_time
            if profiler:
                self.metrics.top_functions = self._top_functions(profiler)

    @staticmethod
    def _top_functions(profiler: cProfile.Profile, limit: int = 10) -> Dict[str, float]:
        stats = pstats.Stats(profiler, stream=io.StringIO())
        ranked = sorted(stats.stats.items(), key=lambda item: item[1][3], reverse=True)[:limit]
        return {f"{func[0]}:{func[1]}({func[2]})": timing[3] for func, timing in ranked}


class DecipherBenchmarks:
    """Times transformers and scorers over scaled inputs."""

    def __init__(self, scales=DEFAULT_SCALES, base_code: Optional[str] = None):
        self.scales = tuple(scales)
        self.base_code = base_code if base_code is not None else load_sample()
        self.results: Dict[str, PerformanceMetrics] = {}

    def _measure(self, name: str, code: str, func: Callable[[str], object], enable_cprofile=False):
        profiler = PerformanceProfiler()
        with profiler.profile(enable_cprofile=enable_cprofile) as metrics:
            metrics.input_size = len(code)
            func(code)
        self.results[name] = profiler.metrics
        return profiler.metrics

    def benchmark_transformers(self):
        for scale in self.scales:
            code = "\n".join([self.base_code] * scale)
            for transformer in BUILTIN_TRANSFORMERS:
                self._measure(f"{transformer.transformer_id}_x{scale}", code, transformer.transform)

    def benchmark_scorers(self):
        for scale in self.scales:
            code = "\n".join([self.base_code] * scale)
            transformed = BUILTIN_TRANSFORMERS[-1].transform(code).code
            self._measure(f"readability_x{scale}", code, calculate_readability_score)
            self._measure(
                f"challenge_x{scale}", code, lambda original: get_challenge_score(original, transformed)
            )

    def run_all(self) -> Dict[str, PerformanceMetrics]:
        self.benchmark_transformers()
        self.benchmark_scorers()
        return self.results

    def print_results(self):
        if not self.results:
            print("No results to display")
            return

        print("\n" + "=" * 90)
        print(f"{'Benchmark':<36} {'Time (s)':<12} {'Chars':<10} {'Chars/s':<16} {'RSS (MB)':<10}")
        print("-" * 90)
        for name, metrics in self.results.items():
            print(
                f"{name:<36} {metrics.execution_time:<12.4f} {metrics.input_size:<10} "
                f"{metrics.throughput:<16.0f} {metrics.memory_peak:<10.2f}"
            )
        print("=" * 90 + "\n")

    def export_results_json(self, filepath: str):
        with open(filepath, "w") as f:
            json.dump({name: asdict(m) for name, m in self.results.items()}, f, indent=2)


def run_benchmarks(scales: List[int] = None) -> Dict[str, PerformanceMetrics]:
    """Entry point for running benchmarks."""
    benchmarks = DecipherBenchmarks(scales or DEFAULT_SCALES)
    results = benchmarks.run_all()
    benchmarks.print_results()
    return results


if __name__ == "__main__":
    run_benchmarks()
