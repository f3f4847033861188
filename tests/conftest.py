import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure src directory is on the path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


@pytest.fixture
def black_2x2():
    return np.zeros((2, 2, 3), dtype=np.uint8)


@pytest.fixture
def one_white_pixel_2x2():
    img = np.zeros((2, 2, 3), dtype=np.uint8)
    img[1, 0] = 255
    return img
