"""
Tests for the command line converter.
"""

import json
from pathlib import Path

import pytest

from chuk_mcp_phichain.cli import apply_overrides, build_parser, main
from chuk_mcp_phichain.core import Beat
from chuk_mcp_phichain.settings import ConversionSettings, dump_settings, load_settings


def write_official(path: Path) -> Path:
    path.write_text(
        json.dumps(
            {
                "formatVersion": 3,
                "offset": 0.1,
                "judgeLineList": [
                    {"bpm": 120, "notesAbove": [{"type": 1, "time": 32, "positionX": 1.0}]}
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_required(self) -> None:
        """Input, output and both formats are required."""
        args = build_parser().parse_args(["a.json", "b.json", "--from", "official", "--to", "rpe"])
        assert args.input == "a.json"
        assert args.output == "b.json"
        assert args.source == "official"
        assert args.target == "rpe"
        assert args.settings is None

    def test_unknown_format(self) -> None:
        """Formats are limited to the registered ones."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["a.json", "b.json", "--from", "osu", "--to", "rpe"])

    def test_flags_default_to_none(self) -> None:
        """Flags that are not given do not override settings."""
        args = build_parser().parse_args(["a", "b", "--from", "rpe", "--to", "official"])
        assert args.easing_fitting is None
        assert args.remove_fake_notes is None
        assert args.remove_unit_lines is None
        assert args.round is None


class TestApplyOverrides:
    """Tests for merging flags into settings."""

    def test_no_flags(self) -> None:
        """Without flags the settings are unchanged."""
        args = build_parser().parse_args(["a", "b", "--from", "rpe", "--to", "official"])
        settings = ConversionSettings()
        assert apply_overrides(settings, args) == settings

    def test_flags(self) -> None:
        """Given flags replace settings values."""
        args = build_parser().parse_args(
            [
                "a",
                "b",
                "--from",
                "official",
                "--to",
                "primitive",
                "--no-easing-fitting",
                "--constant-event-shrink-to",
                "1/2",
                "--minimum-beat",
                "1/8",
                "--remove-fake-notes",
                "--round",
                "3",
                "--keep-unit-lines",
                "--reuse-lines",
            ]
        )
        settings = apply_overrides(ConversionSettings(), args)
        assert settings.official_input.easing_fitting is False
        assert settings.official_input.constant_event_shrink_to == Beat.of(0, 1, 2)
        assert settings.official_output.minimum_beat == Beat.of(0, 1, 8)
        assert settings.rpe_input.remove_fake_notes is True
        assert settings.rpe_input.remove_ui_controls is False
        assert settings.common_output.round == 3
        assert settings.compile.remove_unit_lines is False
        assert settings.compile.reuse_lines is True

    def test_flags_override_file(self, temp_dir: Path) -> None:
        """Flags win over values loaded from a settings file."""
        path = temp_dir / "phichain.yaml"
        path.write_text("common_output:\n  round: 5\ncompile:\n  reuse_lines: true\n")
        args = build_parser().parse_args(["a", "b", "--from", "rpe", "--to", "official", "--round", "1"])

        settings = apply_overrides(load_settings(path), args)
        assert settings.common_output.round == 1
        assert settings.compile.reuse_lines is True


class TestMain:
    """Tests for running the converter."""

    def test_convert(self, temp_dir: Path) -> None:
        """A successful conversion writes the output and exits 0."""
        source = write_official(temp_dir / "song.json")
        output = temp_dir / "out" / "song.rpe.json"

        code = main([str(source), str(output), "--from", "official", "--to", "rpe"])
        assert code == 0

        rpe = json.loads(output.read_text(encoding="utf-8"))
        assert rpe["META"]["offset"] == 100
        assert len(rpe["judgeLineList"]) == 1

    def test_save_settings(self, temp_dir: Path) -> None:
        """The effective settings can be written out."""
        source = write_official(temp_dir / "song.json")
        saved = temp_dir / "effective.yaml"

        code = main(
            [
                str(source),
                str(temp_dir / "song.chart.json"),
                "--from",
                "official",
                "--to",
                "phichain",
                "--reuse-lines",
                "--save-settings",
                str(saved),
            ]
        )
        assert code == 0
        assert load_settings(saved).compile.reuse_lines is True

    def test_missing_input(self, temp_dir: Path) -> None:
        """Missing input files exit 1."""
        code = main([str(temp_dir / "missing.json"), str(temp_dir / "out.json"), "--from", "rpe", "--to", "official"])
        assert code == 1

    def test_invalid_document(self, temp_dir: Path) -> None:
        """Documents that fail validation exit 1."""
        source = temp_dir / "bad.json"
        source.write_text(json.dumps({"formatVersion": 3, "judgeLineList": [{"bpm": -1}]}), encoding="utf-8")
        code = main([str(source), str(temp_dir / "out.json"), "--from", "official", "--to", "rpe"])
        assert code == 1

    def test_invalid_settings(self, temp_dir: Path) -> None:
        """Invalid settings files exit 1."""
        source = write_official(temp_dir / "song.json")
        settings = temp_dir / "bad.yaml"
        settings.write_text("common_output:\n  round: -1\n")
        code = main(
            [str(source), str(temp_dir / "out.json"), "--from", "official", "--to", "rpe", "--settings", str(settings)]
        )
        assert code == 1

    def test_settings_file(self, temp_dir: Path) -> None:
        """Settings files are applied."""
        source = write_official(temp_dir / "song.json")
        settings = dump_settings(ConversionSettings(), temp_dir / "phichain.yaml")
        code = main(
            [str(source), str(temp_dir / "out.json"), "--from", "official", "--to", "primitive", "--settings", str(settings)]
        )
        assert code == 0
