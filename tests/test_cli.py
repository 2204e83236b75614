"""
Command-line interface
Run with:  python -m pytest tests/ -v
"""

import pytest
from typer.testing import CliRunner

from cli import ExitCode, app
from conftest import keyword_in_other_space
from imcode.space import keyword_space

runner = CliRunner()


# ── encode / decode ───────────────────────────────────────────────────────────
def test_encode_then_decode_inline(carrier):
    result = runner.invoke(app, ["encode", str(carrier), "abc", "hello there"])
    assert result.exit_code == ExitCode.OK, result.output

    result = runner.invoke(app, ["decode", str(carrier), "abc"])
    assert result.exit_code == ExitCode.OK, result.output
    assert "hello there" in result.stdout

def test_encode_infile_outfile(carrier, tmp_path):
    payload = tmp_path / "secret.bin"
    payload.write_bytes(b"\x00\x10binary\xff")
    stego = tmp_path / "stego.png"
    before = carrier.read_bytes()

    result = runner.invoke(app, ["encode", str(carrier), "abc", "--in", str(payload), "-o", str(stego)])
    assert result.exit_code == ExitCode.OK, result.output
    assert carrier.read_bytes() == before

    out = tmp_path / "recovered.bin"
    result = runner.invoke(app, ["decode", str(stego), "abc", "--outfile", str(out)])
    assert result.exit_code == ExitCode.OK, result.output
    assert out.read_bytes() == b"\x00\x10binary\xff"

def test_encode_requires_data(carrier):
    result = runner.invoke(app, ["encode", str(carrier), "abc"])
    assert result.exit_code == ExitCode.INVALID_INPUT

def test_encode_too_much_data(carrier):
    result = runner.invoke(app, ["encode", str(carrier), "abc", "x" * 10_000])
    assert result.exit_code == ExitCode.INVALID_INPUT

def test_encode_missing_image(tmp_path):
    result = runner.invoke(app, ["encode", str(tmp_path / "nope.png"), "abc", "data"])
    assert result.exit_code == ExitCode.INVALID_INPUT

def test_encode_missing_infile(carrier, tmp_path):
    result = runner.invoke(app, ["encode", str(carrier), "abc", "-i", str(tmp_path / "nope.bin")])
    assert result.exit_code == ExitCode.INVALID_INPUT

def test_decode_wrong_keyword(carrier, tmp_path):
    runner.invoke(app, ["encode", str(carrier), "abc", "hidden"])
    out = tmp_path / "out.txt"
    result = runner.invoke(app, ["decode", str(carrier), keyword_in_other_space("abc"), "-o", str(out)])
    assert result.exit_code == ExitCode.INVALID_INPUT
    assert not out.exists()

def test_decode_untouched_image(carrier):
    result = runner.invoke(app, ["decode", str(carrier), "abc"])
    assert result.exit_code == ExitCode.INVALID_INPUT


# ── collision ─────────────────────────────────────────────────────────────────
def test_collision_same_keyword():
    result = runner.invoke(app, ["collision", "same", "same"])
    assert result.exit_code == ExitCode.COLLISION
    assert str(keyword_space("same")) in result.stdout

def test_collision_separate_spaces():
    other  = keyword_in_other_space("abc")
    result = runner.invoke(app, ["collision", "abc", other])
    assert result.exit_code == ExitCode.OK
    assert str(keyword_space("abc")) in result.stdout
    assert str(keyword_space(other)) in result.stdout

def test_verbose_flag():
    result = runner.invoke(app, ["--verbose", "collision", "same", "same"])
    assert result.exit_code == ExitCode.COLLISION


# ── capacity ──────────────────────────────────────────────────────────────────
@pytest.mark.parametrize("extra", [[], ["--keyword", "abc"]])
def test_capacity(carrier, extra):
    result = runner.invoke(app, ["capacity", str(carrier), *extra])
    assert result.exit_code == ExitCode.OK, result.output
    assert "Available" in result.stdout
