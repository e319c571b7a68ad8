"""Tests for PSK conversion CLI."""
import os
import subprocess
import sys
import tempfile

from psk_fixtures import chunk_header, skinned_triangle_with_bone_index, triangle_psk

TOOL_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def run_cli(*args):
    return subprocess.run(
        [sys.executable, "extract_models.py", *args],
        capture_output=True,
        text=True,
        cwd=TOOL_DIR,
    )


def test_cli_help():
    """CLI should show help."""
    result = run_cli("--help")
    assert result.returncode == 0
    assert "usage" in result.stdout.lower()


def test_cli_extract_single():
    """CLI should convert a single PSK file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        input_path = os.path.join(tmpdir, "test.psk")
        with open(input_path, "wb") as f:
            f.write(triangle_psk(with_skeleton=True))

        output_dir = os.path.join(tmpdir, "output")
        result = run_cli(input_path, "-o", output_dir)

        assert result.returncode == 0, result.stderr
        assert os.path.exists(os.path.join(output_dir, "test.glb"))
        assert "Converted 1/1" in result.stdout


def test_cli_continues_after_bad_file():
    """A bad file is reported and the others are still converted."""
    with tempfile.TemporaryDirectory() as tmpdir:
        good_path = os.path.join(tmpdir, "good.psk")
        with open(good_path, "wb") as f:
            f.write(triangle_psk())

        bad_path = os.path.join(tmpdir, "bad.psk")
        with open(bad_path, "wb") as f:
            f.write(chunk_header("GARBAGE!", 0, 0))

        output_dir = os.path.join(tmpdir, "output")
        result = run_cli(bad_path, good_path, "-o", output_dir)

        assert result.returncode == 1
        assert "Failed" in result.stderr
        assert "bad.psk" in result.stderr
        assert os.path.exists(os.path.join(output_dir, "good.glb"))
        assert not os.path.exists(os.path.join(output_dir, "bad.glb"))
        assert "Converted 1/2" in result.stdout


def test_cli_list_chunks():
    with tempfile.TemporaryDirectory() as tmpdir:
        input_path = os.path.join(tmpdir, "test.psk")
        with open(input_path, "wb") as f:
            f.write(triangle_psk())

        result = run_cli(input_path, "--list")

        assert result.returncode == 0
        assert "VTXW0000" in result.stdout
        assert "RAWWEIGHTS" in result.stdout


def test_cli_missing_input():
    result = run_cli("does_not_exist.psk")
    assert result.returncode == 1
    assert "not found" in result.stderr


def test_cli_continues_after_bad_bone_weights():
    """Weights pointing at missing bones fail that file only."""
    with tempfile.TemporaryDirectory() as tmpdir:
        bad_path = os.path.join(tmpdir, "weights.psk")
        with open(bad_path, "wb") as f:
            f.write(skinned_triangle_with_bone_index(-1))

        good_path = os.path.join(tmpdir, "good.psk")
        with open(good_path, "wb") as f:
            f.write(triangle_psk(with_skeleton=True))

        output_dir = os.path.join(tmpdir, "output")
        result = run_cli(bad_path, good_path, "-o", output_dir)

        assert result.returncode == 1
        assert "Traceback" not in result.stderr
        assert "references bone -1" in result.stderr
        assert os.path.exists(os.path.join(output_dir, "good.glb"))
        assert "Converted 1/2" in result.stdout
