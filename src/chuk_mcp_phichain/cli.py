#!/usr/bin/env python3
"""
Command line chart converter.

Usage:
    chuk-phichain-convert song.json song.rpe.json --from official --to rpe
    chuk-phichain-convert chart.json out.json --from phichain --to official \\
        --settings phichain.yaml --round 3

Flags override the values loaded from --settings.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any

from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.converter import convert_file
from chuk_mcp_phichain.errors import PhichainError
from chuk_mcp_phichain.settings import ConversionSettings, dump_settings, load_settings

logger = logging.getLogger(__name__)

_FORMAT_CHOICES = [f.value for f in FormatName]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chuk-phichain-convert",
        description="Convert rhythm game charts between formats",
    )
    parser.add_argument("input", help="Source chart file (JSON)")
    parser.add_argument("output", help="Destination chart file (JSON)")
    parser.add_argument("--from", dest="source", choices=_FORMAT_CHOICES, required=True, help="Source format")
    parser.add_argument("--to", dest="target", choices=_FORMAT_CHOICES, required=True, help="Target format")
    parser.add_argument("--settings", help="YAML settings file")
    parser.add_argument("--save-settings", metavar="PATH", help="Write the effective settings to a YAML file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    official = parser.add_argument_group("official input")
    official.add_argument(
        "--no-easing-fitting",
        dest="easing_fitting",
        action="store_false",
        default=None,
        help="Keep linear events instead of fitting easings",
    )
    official.add_argument("--easing-fitting-epsilon", type=float, help="Maximum deviation when fitting")
    official.add_argument("--constant-event-shrink-to", metavar="BEAT", help="Length constant events are shortened to")

    output = parser.add_argument_group("official output")
    output.add_argument("--minimum-beat", metavar="BEAT", help="Slice length for eased move events")

    rpe = parser.add_argument_group("rpe input")
    rpe.add_argument("--remove-fake-notes", action="store_true", default=None, help="Drop fake notes")
    rpe.add_argument("--remove-ui-controls", action="store_true", default=None, help="Drop lines attached to UI")

    common = parser.add_argument_group("output")
    common.add_argument("--round", type=int, help="Decimal places kept for positions and speeds")

    compile_group = parser.add_argument_group("compile")
    compile_group.add_argument(
        "--keep-unit-lines",
        dest="remove_unit_lines",
        action="store_false",
        default=None,
        help="Keep lines that are never visible and have no notes",
    )
    compile_group.add_argument(
        "--reuse-lines", action="store_true", default=None, help="Pack lines with disjoint lifetimes"
    )

    return parser


def apply_overrides(settings: ConversionSettings, args: argparse.Namespace) -> ConversionSettings:
    """Return settings with every flag that was given applied."""
    overrides: dict[str, dict[str, Any]] = {
        "official_input": {
            "easing_fitting": args.easing_fitting,
            "easing_fitting_epsilon": args.easing_fitting_epsilon,
            "constant_event_shrink_to": args.constant_event_shrink_to,
        },
        "official_output": {"minimum_beat": args.minimum_beat},
        "rpe_input": {
            "remove_fake_notes": args.remove_fake_notes,
            "remove_ui_controls": args.remove_ui_controls,
        },
        "common_output": {"round": args.round},
        "compile": {
            "remove_unit_lines": args.remove_unit_lines,
            "reuse_lines": args.reuse_lines,
        },
    }

    data = settings.to_yaml_dict()
    for section, values in overrides.items():
        data[section].update({key: value for key, value in values.items() if value is not None})
    return ConversionSettings.from_yaml_dict(data)


def main(argv: list[str] | None = None) -> int:
    """Run the converter; returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        settings = apply_overrides(load_settings(args.settings), args)
        if args.save_settings:
            dump_settings(settings, args.save_settings)

        path = convert_file(args.input, args.output, args.source, args.target, settings)
    except (PhichainError, ValueError, OSError) as e:
        logger.error("Conversion failed: %s", e)
        return 1

    logger.info("Wrote %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
