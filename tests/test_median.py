import random
import statistics

import numpy as np
import pytest

from loccorr.fits import Image
from loccorr.median import (
    RunningMedian,
    calc_background,
    calc_median,
    get_median,
    get_stat,
)


def make_image(data):
    arr = np.asarray(data, dtype=np.float32)
    img = Image(arr.shape[1], arr.shape[0], arr)
    img.update_minmax()
    return img


def test_calc_median_single_value():
    assert calc_median([7.0]) == 7.0


def test_calc_median_odd_network_size():
    assert calc_median([5, 1, 4, 2, 3]) == 3.0


@pytest.mark.parametrize("n", [2, 4, 6, 8, 16])
def test_calc_median_averaged_sizes(n):
    rng = random.Random(n)
    values = [float(rng.randint(0, 100)) for _ in range(n)]
    assert calc_median(values) == pytest.approx(statistics.median(values))


@pytest.mark.parametrize("n", [3, 5, 7, 9, 11, 25, 31])
def test_calc_median_odd_sizes(n):
    rng = random.Random(n)
    values = [float(rng.randint(0, 1000)) for _ in range(n)]
    assert calc_median(values) == statistics.median(values)


@pytest.mark.parametrize("n", [10, 12, 20])
def test_calc_median_other_even_sizes_use_lower_middle(n):
    rng = random.Random(n)
    values = [float(rng.randint(0, 1000)) for _ in range(n)]
    assert calc_median(values) == statistics.median_low(values)


def test_calc_median_empty_raises():
    with pytest.raises(ValueError):
        calc_median([])


def test_running_median_matches_window():
    rng = random.Random(1)
    rm = RunningMedian(5)
    seen = []
    for _ in range(40):
        v = float(rng.randint(-50, 50))
        rm.insert(v)
        seen.append(v)
        window = seen[-5:]
        assert rm.median() == pytest.approx(statistics.median(window))
        assert len(rm) == len(window)


def test_running_median_stat():
    rm = RunningMedian(4)
    for v in [3, 9, 1, 7, 5]:
        rm.insert(v)
    med, lo, hi = rm.stat()
    assert lo == 1.0
    assert hi == 9.0
    assert med == pytest.approx(statistics.median([9, 1, 7, 5]))


def test_running_median_errors():
    with pytest.raises(ValueError):
        RunningMedian(0)
    with pytest.raises(ValueError):
        RunningMedian(3).median()


def test_get_median_removes_spike_and_keeps_borders_zero():
    data = np.full((7, 9), 4.0, dtype=np.float32)
    data[3, 4] = 100.0
    out = get_median(make_image(data), 1)
    assert out.data.shape == (7, 9)
    assert np.all(out.data[1:-1, 1:-1] == 4.0)
    assert np.all(out.data[0, :] == 0.0)
    assert np.all(out.data[:, -1] == 0.0)
    assert out.maxval == 4.0 and out.minval == 0.0


def test_get_median_matches_window_median():
    rng = np.random.default_rng(3)
    data = rng.integers(0, 100, size=(8, 10)).astype(np.float32)
    out = get_median(make_image(data), 2)
    assert out.data[4, 5] == np.median(data[2:7, 3:8])


def test_get_median_bad_seed():
    with pytest.raises(ValueError):
        get_median(make_image(np.ones((5, 5))), 0)


def test_get_stat_constant_image():
    mean, std = get_stat(make_image(np.full((6, 6), 3.0)), 1)
    assert np.allclose(mean.data[1:-1, 1:-1], 3.0)
    assert np.allclose(std.data[1:-1, 1:-1], 0.0)
    assert np.all(mean.data[0] == 0.0)


def test_get_stat_matches_window():
    rng = np.random.default_rng(5)
    data = rng.random((9, 9)).astype(np.float32)
    mean, std = get_stat(make_image(data), 2)
    window = data[2:7, 3:8].astype(np.float64)
    assert mean.data[4, 5] == pytest.approx(window.mean(), rel=1e-5)
    assert std.data[4, 5] == pytest.approx(window.std(), rel=1e-4)


@pytest.mark.parametrize("seed", [0, 3])
def test_get_stat_bad_seed(seed):
    with pytest.raises(ValueError):
        get_stat(make_image(np.ones((6, 6))), seed)


def test_calc_background_between_extremes():
    data = np.full((100, 100), 10.0, dtype=np.float32)
    data[:2, :5] = 200.0
    img = make_image(data)
    bk = calc_background(img)
    assert img.minval < bk < img.maxval


def test_calc_background_zero_image():
    with pytest.raises(ValueError):
        calc_background(make_image(np.full((5, 5), 2.0)))


def test_calc_background_overilluminated():
    data = np.full((20, 20), 200.0, dtype=np.float32)
    data[0, 0] = 0.0
    with pytest.raises(ValueError):
        calc_background(make_image(data))