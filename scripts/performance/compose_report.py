#!/usr/bin/env python3
"""
Composition Performance Report Generator

Composes binary subdivision trees of increasing depth and reports
expansion latency, throughput and tree statistics.

Usage:
    python scripts/performance/compose_report.py --max-depth 10 --iterations 5
"""

import argparse
import time
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
from tabulate import tabulate

from composer import (
    AdhocRenderer,
    Composer,
    ComposerOptions,
    Composition,
    Element,
    PlayNote,
    RenderEngine,
    element,
)
from composer.logging_config import setup_logging


@element("ReportSpan")
class ReportSpan(Element):
    depth: int


@element("ReportScale")
class ReportScale(Element):
    tonic: int


def render_span(segment, context):
    """Halve a span; leaf spans play one note from the enclosing scale."""
    span = segment.element
    if span.depth == 0:
        scale = context.find(ReportScale).get()
        tonic = scale.element.tonic if scale is not None else 60
        return [PlayNote(note=tonic + int(context.rng().integers(0, 12)), velocity=80).over(segment.timing)]

    children = [
        ReportSpan(depth=span.depth - 1).over(t)
        for t in segment.timing.divide_into(segment.timing.length // 2)
    ]
    if span.depth % 4 == 0:
        children.insert(0, ReportScale(tonic=48 + span.depth % 12).over(segment.timing))
    return children


class ComposeReport:
    """Generate expansion performance report across tree depths."""

    def __init__(self, ticks_per_beat: int, seed: int):
        """
        Initialize report generator.

        Args:
            ticks_per_beat: Beat length used by the composer
            seed: Global composition seed
        """
        self.ticks_per_beat = ticks_per_beat
        self.seed = seed
        self.composer = Composer(
            RenderEngine([AdhocRenderer(ReportSpan, render_span)]),
            ComposerOptions(ticks_per_beat=ticks_per_beat),
        )

    def compose(self, depth: int) -> Composition:
        length = self.ticks_per_beat * (2**depth)
        return self.composer.compose(ReportSpan(depth=depth).over((0, length)), seed=self.seed)

    def measure(self, depth: int, iterations: int) -> Dict:
        """Collect latency and tree statistics for one depth."""
        latencies: List[float] = []
        composition: Optional[Composition] = None
        for _ in range(iterations):
            start_time = time.perf_counter()
            composition = self.compose(depth)
            latencies.append((time.perf_counter() - start_time) * 1000.0)

        latencies_arr = np.array(latencies)
        avg_ms = float(np.mean(latencies_arr))
        return {
            "depth": depth,
            "segments": len(composition),
            "leaves": len(composition.leaves()),
            "avg_ms": round(avg_ms, 2),
            "p95_ms": round(float(np.percentile(latencies_arr, 95)), 2),
            "segments_per_sec": int(len(composition) * 1000.0 / avg_ms) if avg_ms > 0 else 0,
            "json_kb": round(len(composition.to_json()) / 1024, 1),
        }

    def generate_report(self, min_depth: int, max_depth: int, iterations: int) -> str:
        """
        Generate formatted report.

        Returns:
            Report text
        """
        rows = [self.measure(depth, iterations) for depth in range(min_depth, max_depth + 1)]

        output = []
        output.append("=" * 80)
        output.append("COMPOSER EXPANSION PERFORMANCE REPORT")
        output.append(f"Generated: {datetime.now().isoformat(timespec='seconds')}")
        output.append(
            f"Ticks per beat: {self.ticks_per_beat}  Seed: {self.seed}  Iterations: {iterations}"
        )
        output.append("=" * 80)
        output.append("")
        output.append(
            tabulate(
                [
                    [
                        r["depth"],
                        r["segments"],
                        r["leaves"],
                        r["avg_ms"],
                        r["p95_ms"],
                        r["segments_per_sec"],
                        r["json_kb"],
                    ]
                    for r in rows
                ],
                headers=["Depth", "Segments", "Leaves", "Avg (ms)", "P95 (ms)", "Segments/s", "JSON (KB)"],
                tablefmt="simple",
            )
        )
        output.append("")
        return "\n".join(output)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate composition expansion performance report")
    parser.add_argument("--min-depth", type=int, default=4, help="Smallest subdivision depth (default: 4)")
    parser.add_argument("--max-depth", type=int, default=10, help="Largest subdivision depth (default: 10)")
    parser.add_argument("--iterations", type=int, default=5, help="Compositions per depth (default: 5)")
    parser.add_argument("--ticks-per-beat", type=int, default=480, help="Beat length in ticks (default: 480)")
    parser.add_argument("--seed", type=int, default=42, help="Global composition seed (default: 42)")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument(
        "--output",
        help="Output file path (default: print to stdout)",
    )

    args = parser.parse_args()
    if args.min_depth < 0 or args.max_depth < args.min_depth:
        parser.error("--max-depth must be >= --min-depth >= 0")

    setup_logging(args.log_level.upper())

    report = ComposeReport(args.ticks_per_beat, args.seed).generate_report(
        args.min_depth, args.max_depth, max(1, args.iterations)
    )

    if args.output:
        with open(args.output, "w") as f:
            f.write(report)
        print(f"Report written to: {args.output}")
    else:
        print(report)


if __name__ == "__main__":
    main()
