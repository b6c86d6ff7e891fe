"""CLI tests for the diagnostic commands."""

import json
from pathlib import Path

from typer.testing import CliRunner

import hig_search.main as main_module


def _write_corpus(tmp_path: Path) -> Path:
    sections = [
        {
            "id": "buttons",
            "title": "Buttons",
            "platform": "iOS",
            "category": "selection-and-input",
            "content": "Buttons initiate actions.",
        },
        {
            "id": "menus",
            "title": "Menus",
            "platform": "macOS",
            "category": "navigation",
            "content": "Menus list commands.",
        },
    ]
    path = tmp_path / "corpus.json"
    path.write_text(json.dumps(sections))
    return path


def test_analyze_command_shows_intent() -> None:
    runner = CliRunner()

    result = runner.invoke(main_module.app, ["analyze", "how to add a button"])

    assert result.exit_code == 0
    assert "find_example" in result.stdout


def test_analyze_command_rejects_empty_query() -> None:
    result = CliRunner().invoke(main_module.app, ["analyze", "   "])

    assert result.exit_code == 1
    assert "Invalid query" in result.stdout


def test_search_command_without_semantics(tmp_path: Path) -> None:
    corpus = _write_corpus(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "button", "--corpus", str(corpus), "--no-semantic", "--platform", "iOS"],
    )

    assert result.exit_code == 0
    assert "Buttons" in result.stdout
    assert "Menus" not in result.stdout


def test_search_command_rejects_bad_filter(tmp_path: Path) -> None:
    corpus = _write_corpus(tmp_path)

    result = CliRunner().invoke(
        main_module.app,
        ["search", "button", "--corpus", str(corpus), "--no-semantic", "--platform", "android"],
    )

    assert result.exit_code == 1


def test_search_command_rejects_invalid_corpus(tmp_path: Path) -> None:
    corpus = tmp_path / "corpus.json"
    corpus.write_text(json.dumps([{"id": "x", "title": "X", "platform": "Android"}]))

    result = CliRunner().invoke(
        main_module.app, ["search", "button", "--corpus", str(corpus), "--no-semantic"]
    )

    assert result.exit_code == 1
    assert "Invalid corpus" in result.stdout


def test_pattern_command(tmp_path: Path) -> None:
    corpus = _write_corpus(tmp_path)

    result = CliRunner().invoke(main_module.app, ["pattern", "Butt*", "--corpus", str(corpus)])

    assert result.exit_code == 0
    assert "Buttons" in result.stdout
    assert "Butt" in result.stdout


def test_mapping_command() -> None:
    result = CliRunner().invoke(main_module.app, ["mapping", "button"])

    assert result.exit_code == 0
    assert "UIButton" in result.stdout
    assert "Related:" in result.stdout


def test_mapping_command_unknown_component() -> None:
    result = CliRunner().invoke(main_module.app, ["mapping", "widget"])

    assert result.exit_code == 1


def test_xref_command() -> None:
    result = CliRunner().invoke(main_module.app, ["xref", "slider", "--symbol", "UISlider"])

    assert result.exit_code == 0
    assert "UISlider" in result.stdout
    assert "direct" in result.stdout
