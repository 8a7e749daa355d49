"""Performance benchmark suite for the composition engine.

Measures tree expansion latency, context query cost and persisted-form
conversion for binary subdivision trees of increasing depth.
"""

import time
from typing import Callable, Dict, List

import numpy as np

from composer.composer import Composer
from composer.composition import Composition
from composer.config import ComposerOptions
from composer.element import Element, element
from composer.elements import PlayNote
from composer.render import AdhocRenderer, RenderEngine
from composer.timing import TimingRelation


@element("BenchSpan")
class BenchSpan(Element):
    """Span subdivided in two until ``depth`` reaches zero."""

    depth: int


@element("BenchChord")
class BenchChord(Element):
    root: int


def render_span(segment, context):
    span = segment.element
    if span.depth == 0:
        chord = context.find(BenchChord).get()
        root = chord.element.root if chord is not None else 60
        note = root + int(context.rng().integers(0, 12))
        return [PlayNote(note=note, velocity=90).over(segment.timing)]

    halves = segment.timing.divide_into(max(1, segment.timing.length // 2))[:2]
    children = [BenchSpan(depth=span.depth - 1).over(t) for t in halves]
    if span.depth % 3 == 0:
        children.insert(0, BenchChord(root=48 + span.depth).over(segment.timing))
    return children


def build_engine() -> RenderEngine:
    return RenderEngine([AdhocRenderer(BenchSpan, render_span)])


def _stats(latencies: List[float]) -> Dict[str, float]:
    latencies_arr = np.array(latencies)
    return {
        "avg_ms": float(np.mean(latencies_arr)),
        "p50_ms": float(np.percentile(latencies_arr, 50)),
        "p95_ms": float(np.percentile(latencies_arr, 95)),
        "p99_ms": float(np.percentile(latencies_arr, 99)),
        "min_ms": float(np.min(latencies_arr)),
        "max_ms": float(np.max(latencies_arr)),
    }


def _time(func: Callable[[], object], num_iterations: int) -> List[float]:
    latencies: List[float] = []
    for _ in range(num_iterations):
        start_time = time.perf_counter()
        func()
        latencies.append((time.perf_counter() - start_time) * 1000.0)
    return latencies


class CompositionBenchmark:
    """Benchmarks composition expansion performance."""

    def __init__(self, ticks_per_beat: int = 480):
        """Initialize benchmark suite.

        Args:
            ticks_per_beat: Beat length used by the composer
        """
        self.ticks_per_beat = ticks_per_beat
        self.composer = Composer(build_engine(), ComposerOptions(ticks_per_beat=ticks_per_beat))

    def compose(self, depth: int, seed: int = 42) -> Composition:
        """Compose a subdivision tree ``depth`` levels deep."""
        length = self.ticks_per_beat * (2**depth)
        return self.composer.compose(BenchSpan(depth=depth).over((0, length)), seed=seed)

    def benchmark_compose(self, depth: int = 8, num_iterations: int = 20) -> Dict[str, float]:
        """Benchmark full expansion of one tree.

        Args:
            depth: Subdivision depth (``2**depth`` leaves)
            num_iterations: Number of iterations for averaging

        Returns:
            Latency statistics plus ``segments`` and ``segments_per_sec``
        """
        segments = len(self.compose(depth))
        results = _stats(_time(lambda: self.compose(depth), num_iterations))
        results["segments"] = float(segments)
        results["segments_per_sec"] = segments * 1000.0 / results["avg_ms"]
        return results

    def benchmark_queries(self, depth: int = 8, num_iterations: int = 200) -> Dict[str, float]:
        """Benchmark finished-tree queries.

        Args:
            depth: Subdivision depth of the queried tree
            num_iterations: Number of iterations

        Returns:
            Benchmark results dictionary
        """
        composition = self.compose(depth)
        length = composition.root.timing.length
        window = (length // 4, length // 2)

        def query():
            composition.find(PlayNote).with_timing(TimingRelation.WITHIN, window).get_all()

        return _stats(_time(query, num_iterations))

    def benchmark_serialization(self, depth: int = 8, num_iterations: int = 20) -> Dict[str, float]:
        """Benchmark a JSON save/load cycle.

        Args:
            depth: Subdivision depth of the serialized tree
            num_iterations: Number of iterations

        Returns:
            Benchmark results dictionary
        """
        composition = self.compose(depth)
        return _stats(
            _time(lambda: Composition.from_json(composition.to_json()), num_iterations)
        )

    def run_full_suite(self) -> Dict[str, Dict[str, float]]:
        """Run complete benchmark suite.

        Returns:
            Dictionary with all benchmark results
        """
        print("Running Composer Performance Benchmark Suite...")
        print("=" * 60)

        print("\n1. Composition (depth 8, 20 iterations)...")
        compose_results = self.benchmark_compose()
        print(f"   Segments: {int(compose_results['segments'])}")
        print(f"   Average: {compose_results['avg_ms']:.2f}ms")
        print(f"   P95: {compose_results['p95_ms']:.2f}ms")
        print(f"   Throughput: {compose_results['segments_per_sec']:.0f} segments/sec")

        print("\n2. Finished-tree queries (200 iterations)...")
        query_results = self.benchmark_queries()
        print(f"   Average: {query_results['avg_ms']:.3f}ms")
        print(f"   P95: {query_results['p95_ms']:.3f}ms")

        print("\n3. JSON round trip (20 iterations)...")
        serialization_results = self.benchmark_serialization()
        print(f"   Average: {serialization_results['avg_ms']:.2f}ms")
        print(f"   P95: {serialization_results['p95_ms']:.2f}ms")

        print("\n" + "=" * 60)
        print("Performance Target Validation:")
        print(f"   Compose P95 < 1000ms: {'✓ PASS' if compose_results['p95_ms'] < 1000 else '✗ FAIL'}")
        print(f"   Throughput > 1000 segments/sec: {'✓ PASS' if compose_results['segments_per_sec'] > 1000 else '✗ FAIL'}")
        print("=" * 60)

        return {
            "compose": compose_results,
            "queries": query_results,
            "serialization": serialization_results,
        }


def main() -> None:
    """Run benchmark suite from command line."""
    benchmark = CompositionBenchmark()
    results = benchmark.run_full_suite()

    import json
    from pathlib import Path

    results_file = Path("benchmark_results.json")
    with open(results_file, "w") as f:
        json.dump(results, f, indent=2)

    print(f"\nResults saved to {results_file}")


if __name__ == "__main__":
    main()
