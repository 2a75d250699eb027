import numpy as np
import pytest

from loccorr.draw import C_R, C_W, Img3, Pattern


def _black(h=20, w=20):
    return Img3(np.zeros((h, w, 3), dtype=np.uint8))


def test_cross_shape():
    p = Pattern.cross(5, 7)
    assert p.data.shape == (5, 7)
    assert np.all(p.data[:, 3] == 255)
    assert np.all(p.data[2, :] == 255)
    assert np.count_nonzero(p.data) == 5 + 7 - 1


def test_cross_bad_size():
    with pytest.raises(ValueError):
        Pattern.cross(0, 3)


def test_img3_size():
    img = Img3(np.zeros((4, 6, 3)))
    assert (img.w, img.h) == (6, 4)
    with pytest.raises(ValueError):
        Img3(np.zeros((4, 6)))


def test_draw_centre():
    img = _black()
    Pattern.cross(5, 7).draw3(img, 10, 10, C_R)
    assert tuple(img.data[10, 10]) == C_R
    assert tuple(img.data[8, 10]) == C_R
    assert tuple(img.data[10, 7]) == C_R
    assert not img.data[0, 0].any()
    assert not img.data[9, 9].any()


def test_draw_corner():
    img = _black()
    Pattern.cross(5, 7).draw3(img, 0, 0, C_R)
    assert tuple(img.data[0, 0]) == C_R
    assert not img.data[5:, 5:].any()


def test_draw_outside():
    img = _black()
    Pattern.cross(5, 7).draw3(img, 100, 100, C_R)
    Pattern.cross(5, 7).draw3(img, -10, 5, C_R)
    assert not img.data.any()


def test_blending_bounds():
    base = np.full((10, 10, 3), 100, dtype=np.uint8)
    img = Img3(base.copy())
    mask = np.zeros((5, 5), dtype=np.uint8)
    mask[1, 1] = 255
    mask[2, 2] = 128
    Pattern(mask).draw3(img, 5, 5, C_W)
    assert tuple(img.data[4, 4]) == C_W
    assert np.all(img.data[5, 5] > 100)
    assert np.all(img.data[5, 5] < 255)
    assert tuple(img.data[4, 5]) == (100, 100, 100)