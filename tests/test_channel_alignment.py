import numpy as np

from imgcmp.compare import compare_images


def test_alpha_ignored_when_only_one_image_has_it():
    rgb = np.full((2, 2, 3), 90, dtype=np.uint8)
    rgba = np.concatenate([rgb, np.zeros((2, 2, 1), dtype=np.uint8)], axis=2)
    result = compare_images(rgb, rgba)
    assert result.matches
    assert result.channels == 3


def test_alpha_compared_when_both_have_it():
    a = np.full((2, 2, 4), 200, dtype=np.uint8)
    b = a.copy()
    b[0, 1, 3] = 0
    result = compare_images(a, b)
    assert result.channels == 4
    assert result.mismatched_pixels == 1


def test_greyscale_promoted_against_colour():
    grey = np.full((3, 3), 77, dtype=np.uint8)
    colour = np.full((3, 3, 3), 77, dtype=np.uint8)
    colour[2, 2] = (77, 77, 78)
    result = compare_images(grey, colour)
    assert result.channels == 3
    assert result.mismatched_pixels == 1


def test_grey_alpha_against_rgba_keeps_alpha():
    grey_alpha = np.zeros((1, 2, 2), dtype=np.uint8)
    grey_alpha[..., 0] = 10
    grey_alpha[..., 1] = 255
    rgba = np.zeros((1, 2, 4), dtype=np.uint8)
    rgba[..., :3] = 10
    rgba[..., 3] = 255
    rgba[0, 1, 3] = 128
    result = compare_images(grey_alpha, rgba)
    assert result.channels == 4
    assert result.mismatched_pixels == 1


def test_grey_alpha_against_rgb_drops_alpha():
    grey_alpha = np.zeros((2, 2, 2), dtype=np.uint8)
    grey_alpha[..., 0] = 40
    rgb = np.full((2, 2, 3), 40, dtype=np.uint8)
    result = compare_images(grey_alpha, rgb)
    assert result.matches
    assert result.channels == 3


def test_two_dimensional_and_single_channel_grids_agree():
    flat = np.arange(9, dtype=np.uint8).reshape(3, 3)
    stacked = flat[:, :, np.newaxis]
    result = compare_images(flat, stacked)
    assert result.matches
    assert result.channels == 1
