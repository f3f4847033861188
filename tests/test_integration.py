import os
import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image


def _make_png(path: Path, array: np.ndarray) -> None:
    Image.fromarray(array).save(path)


def run_cli(tmp_path: Path, args):
    cmd = [sys.executable, "-m", "imgcmp"] + args
    env = dict(os.environ)
    existing = env.get("PYTHONPATH", "")
    src_path = str(Path(__file__).resolve().parents[1] / "src")
    env["PYTHONPATH"] = f"{src_path}{os.pathsep}{existing}" if existing else src_path
    return subprocess.run(cmd, cwd=tmp_path, env=env, capture_output=True, text=True)


def test_cli_identical_images(tmp_path):
    img = np.full((100, 100, 3), 17, dtype=np.uint8)
    _make_png(tmp_path / "ref.png", img)
    _make_png(tmp_path / "out.png", img)

    proc = run_cli(tmp_path, ["ref.png", "out.png", "-o", "diff.png", "-v"])

    assert proc.returncode == 0
    assert "MATCH" in proc.stdout
    assert "Different Pixels: 0%" in proc.stdout
    assert not (tmp_path / "diff.png").exists()


def test_cli_single_pixel_mismatch(tmp_path):
    before = np.zeros((2, 2, 3), dtype=np.uint8)
    after = before.copy()
    after[0, 1] = 255
    _make_png(tmp_path / "before.png", before)
    _make_png(tmp_path / "after.png", after)

    proc = run_cli(tmp_path, ["before.png", "after.png", "-t", "0.1", "-o", "diff.png"])

    assert proc.returncode == 1
    assert "MISMATCH DETECTED" in proc.stdout
    assert (tmp_path / "diff.png").exists()


def test_cli_missing_input(tmp_path):
    proc = run_cli(tmp_path, ["absent.png", "also_absent.png"])

    assert proc.returncode == 2
    assert "absent.png" in proc.stderr
