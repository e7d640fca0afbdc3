#!/usr/bin/env python3
"""
Example: Build a chart, compile it and export it to every format.

Usage:
    python examples/convert_chart.py
    # Creates: examples/output/demo.{chart,primitive,official,rpe}.json

Shows the whole pipeline:
1. A chart is authored with nested lines and a curve note track
2. The compiler flattens it to a primitive chart
3. The exporters write official and RPE documents
"""

import json
from pathlib import Path

from chuk_mcp_phichain.charts import ChartManager, validate_chart
from chuk_mcp_phichain.compiler import ChartCompiler, CompileOptions
from chuk_mcp_phichain.converter import write_chart
from chuk_mcp_phichain.core import Easing
from chuk_mcp_phichain.settings import ConversionSettings


async def main() -> None:
    """Author the demo chart and export it."""
    examples_dir = Path(__file__).parent
    output_dir = examples_dir / "output"
    output_dir.mkdir(exist_ok=True)

    print("CHUK Phichain Chart Converter")
    print("=" * 40)

    manager = ChartManager(output_dir)
    await manager.create("demo", bpm=174, line_count=1)

    # A child line orbiting the root line
    child = await manager.add_line("demo", "orbit", parent="0")
    await manager.add_event("demo", "0", "rotation", "1", "8", 0.0, 360.0, Easing.EASE_IN_OUT_SINE)
    await manager.add_event("demo", child, "x", "1", "4", 0.0, 300.0, Easing.EASE_OUT_QUAD)
    await manager.add_event("demo", child, "x", "4", "8", 300.0, 0.0, Easing.EASE_IN_QUAD)

    # Notes on both lines, two of them joined by a curve
    await manager.add_note("demo", "0", "tap", "1", x=-300)
    await manager.add_note("demo", "0", "tap", "3", x=300)
    await manager.add_note("demo", "0", "hold", "4", hold_beat="2")
    await manager.add_note("demo", child, "flick", "6")
    await manager.add_curve_note_track("demo", "0", 0, 1, density=4, curve=Easing.EASE_IN_SINE)

    await manager.add_bpm_point("demo", "8", 200)

    chart = await manager.require("demo")
    print(f"Lines: {chart.line_count}")
    print(f"Notes: {chart.note_count}")
    print(f"Events: {chart.event_count}")
    print()

    validation = validate_chart(chart)
    print(validation)
    print()

    path = await manager.save("demo")
    print(f"Saved: {path}")

    print("Compiling...")
    result = ChartCompiler(CompileOptions(reuse_lines=True)).compile(chart)
    for kind, counts in result.summary().items():
        print(f"  {kind}: {counts['before']} -> {counts['after']}")
    print()

    settings = ConversionSettings()
    for target in ("primitive", "official", "rpe"):
        output_path = output_dir / f"demo.{target}.json"
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(write_chart(chart, target, settings), f, ensure_ascii=False)
        print(f"Wrote {output_path}")

    print()
    print("Done! Load the official or RPE file in a chart player.")


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
