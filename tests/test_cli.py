"""Tests for the command-line interface."""

import pytest

from genstudio.__main__ import build_parser, main, print_progress
from genstudio.generation import GenerationProgress


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    import dotenv

    monkeypatch.setattr(dotenv, "load_dotenv", lambda *a, **k: False)


def test_parser_commands():
    parser = build_parser()
    args = parser.parse_args(["batch", "tulips", "--count", "3"])
    assert (args.command, args.prompt, args.count) == ("batch", "tulips", 3)

    args = parser.parse_args(["video", "storm", "-t", "epic-zoom", "-s", "smooth-elegant"])
    assert (args.template, args.style) == ("epic-zoom", "smooth-elegant")

    args = parser.parse_args(["limits", "add", "25", "--period", "weekly", "--no-block"])
    assert (args.amount, args.period, args.no_block) == (25.0, "weekly", True)


def test_print_progress(capsys):
    print_progress(GenerationProgress(progress=43.3, stage="Creating image..."))
    assert capsys.readouterr().out == "  [ 43%] Creating image...\n"


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: genstudio" in capsys.readouterr().out


def test_image_without_keys_fails_with_message(capsys):
    assert main(["image", "tulips"]) == 1
    assert "No API key configured for image generation" in capsys.readouterr().err


def test_keys_usage_and_templates(capsys):
    assert main(["keys", "set", "runwayml", "rw-" + "k" * 30]) == 0
    assert main(["providers"]) == 0
    out = capsys.readouterr().out
    assert "Video provider: runwayml" in out
    assert "Image provider: none" in out

    assert main(["upgrade"]) == 0
    assert main(["usage"]) == 0
    assert "Tier       : pro" in capsys.readouterr().out

    assert main(["templates", "--category", "effect"]) == 0
    out = capsys.readouterr().out
    assert "slow-motion" in out
    assert "cinematic-pan" not in out


def test_limits_and_gallery(capsys, tmp_path):
    assert main(["limits", "add", "10", "--period", "daily"]) == 0
    assert main(["limits", "list"]) == 0
    assert "$0.00 / $10.00 (0%)" in capsys.readouterr().out

    assert main(["gallery", "list"]) == 0
    assert "Gallery is empty." in capsys.readouterr().out

    assert main(["gallery", "remove", "image-missing"]) == 1
    assert "Media item 'image-missing' not found" in capsys.readouterr().err


def test_recommend_without_key_uses_fallback(capsys):
    assert main(["recommend", "zoom into a fast car"]) == 0
    out = capsys.readouterr().out
    assert "epic-zoom" in out
    assert "energetic-dynamic" in out
