"""
autolens CLI Test Suite

Tests:
1. expand to stdout and to a file
2. plan, text and JSON
3. check against fresh and stale output
4. Exit codes for rejected declarations and bad input
"""

import json
import textwrap

import pytest

from autolens.cli import main


MODELS = textwrap.dedent('''\
    from dataclasses import dataclass

    from autolens import autolens


    @autolens
    @dataclass(frozen=True)
    class Point:
        __public__ = ("x", "y")

        x: int
        y: int
''')

REJECTED = MODELS + textwrap.dedent('''\


    @autolens
    class Account:
        balance: int
''')


@pytest.fixture
def models(tmp_path):
    path = tmp_path / "models.py"
    path.write_text(MODELS, encoding="utf-8")
    return path


def run(*argv):
    return main(["--no-color", *map(str, argv)])


# --- Test 1: expand ---

def test_expand_writes_to_stdout(models, capsys):
    assert run("expand", models) == 0
    out = capsys.readouterr().out
    assert "class AllLenses:" in out
    assert 'FieldRef("Point", "x", __name__)' in out


def test_expand_writes_output_file(models, tmp_path, capsys):
    target = tmp_path / "models_gen.py"
    assert run("expand", models, "-o", target) == 0
    assert "def _autolens_init(cls, x: int, y: int) -> Point:" in target.read_text(encoding="utf-8")
    assert "1 declaration(s)" in capsys.readouterr().out


def test_expand_in_place_twice_is_stable(models, capsys):
    assert run("expand", models, "-o", models) == 0
    once = models.read_text(encoding="utf-8")
    assert run("expand", models, "-o", models) == 0
    assert models.read_text(encoding="utf-8") == once
    assert "[alreadyExpanded]" in capsys.readouterr().err


# --- Test 2: plan ---

def test_plan_json(models, capsys):
    assert run("plan", models, "--json") == 0
    payload = json.loads(capsys.readouterr().out)
    [plan] = payload["plans"]
    assert plan["declaration"] == "Point"
    assert plan["lenses"] == ["x", "y"]
    assert plan["initializer"] == "synthesized"
    assert payload["diagnostics"] == []


def test_plan_text(models, capsys):
    assert run("plan", models) == 0
    out = capsys.readouterr().out
    assert "Point" in out
    assert "registry: 2 entries" in out


# --- Test 3: check ---

def test_check_accepts_fresh_output(models, tmp_path, capsys):
    target = tmp_path / "models_gen.py"
    run("expand", models, "-o", target)
    assert run("check", models, target) == 0
    assert "is up to date" in capsys.readouterr().out


def test_check_rejects_stale_output(models, tmp_path, capsys):
    target = tmp_path / "models_gen.py"
    target.write_text(MODELS, encoding="utf-8")
    assert run("check", models, target) == 1
    assert "out of date" in capsys.readouterr().out


def test_check_rejects_missing_output(models, tmp_path):
    assert run("check", models, tmp_path / "absent.py") == 1


# --- Test 4: Errors ---

def test_rejected_declaration_fails_expand(tmp_path, capsys):
    path = tmp_path / "bad.py"
    path.write_text(REJECTED, encoding="utf-8")
    target = tmp_path / "bad_gen.py"

    assert run("expand", path, "-o", target) == 1
    err = capsys.readouterr().err
    assert "[typeIsNotStruct]" in err
    assert "nothing written" in err
    assert not target.exists()


def test_rejected_declaration_fails_plan_json(tmp_path, capsys):
    path = tmp_path / "bad.py"
    path.write_text(REJECTED, encoding="utf-8")

    assert run("plan", path, "--json") == 1
    payload = json.loads(capsys.readouterr().out)
    assert [d["id"] for d in payload["diagnostics"]] == ["typeIsNotStruct"]


def test_missing_file(tmp_path, capsys):
    assert run("expand", tmp_path / "nope.py") == 1
    assert "File not found" in capsys.readouterr().err


def test_syntax_error(tmp_path, capsys):
    path = tmp_path / "broken.py"
    path.write_text("class P(:\n    pass\n", encoding="utf-8")
    assert run("plan", path) == 1
    assert "Syntax error" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert run() == 0
    assert "usage: autolens" in capsys.readouterr().out
