"""CIEDE2000 tests against the Sharma, Wu & Dalal (2005) supplementary data."""

import math

import numpy as np
import pytest

from ciede2000 import ciede2000, delta_e_2000


# (Lab 1, Lab 2, ΔE00) from the published test table
SHARMA_PAIRS = [
    ((50.0000, 2.6772, -79.7751), (50.0000, 0.0000, -82.7485), 2.0425),
    ((50.0000, 3.1571, -77.2803), (50.0000, 0.0000, -82.7485), 2.8615),
    ((50.0000, 2.8361, -74.0200), (50.0000, 0.0000, -82.7485), 3.4412),
    ((50.0000, -1.3802, -84.2814), (50.0000, 0.0000, -82.7485), 1.0000),
    ((50.0000, 0.0000, 0.0000), (50.0000, -1.0000, 2.0000), 2.3669),
    ((50.0000, 2.4900, -0.0010), (50.0000, -2.4900, 0.0009), 7.1792),
    ((50.0000, 2.4900, -0.0010), (50.0000, -2.4900, 0.0010), 7.1792),
    ((50.0000, 2.4900, -0.0010), (50.0000, -2.4900, 0.0011), 7.2195),
    ((50.0000, 2.4900, -0.0010), (50.0000, -2.4900, 0.0012), 7.2195),
    ((50.0000, -0.0010, 2.4900), (50.0000, 0.0009, -2.4900), 4.8045),
    ((50.0000, -0.0010, 2.4900), (50.0000, 0.0010, -2.4900), 4.8045),
    ((50.0000, -0.0010, 2.4900), (50.0000, 0.0011, -2.4900), 4.7461),
    ((50.0000, 2.5000, 0.0000), (50.0000, 0.0000, -2.5000), 4.3065),
    ((50.0000, 2.5000, 0.0000), (73.0000, 25.0000, -18.0000), 27.1492),
    ((50.0000, 2.5000, 0.0000), (61.0000, -5.0000, 29.0000), 22.8977),
    ((50.0000, 2.5000, 0.0000), (56.0000, -27.0000, -3.0000), 31.9030),
    ((50.0000, 2.5000, 0.0000), (58.0000, 24.0000, 15.0000), 19.4535),
    ((50.0000, 2.5000, 0.0000), (50.0000, 3.1736, 0.5854), 1.0000),
    ((50.0000, 2.5000, 0.0000), (50.0000, 3.2972, 0.0000), 1.0000),
    ((50.0000, 2.5000, 0.0000), (50.0000, 1.8634, 0.5757), 1.0000),
    ((50.0000, 2.5000, 0.0000), (50.0000, 3.2592, 0.3350), 1.0000),
    ((60.2574, -34.0099, 36.2677), (60.4626, -34.1751, 39.4387), 1.2644),
    ((63.0109, -31.0961, -5.8663), (62.8187, -29.7946, -4.0864), 1.2630),
    ((61.2901, 3.7196, -5.3901), (61.4292, 2.2480, -4.9620), 1.8731),
    ((35.0831, -44.1164, 3.7933), (35.0232, -40.0716, 1.5901), 1.8645),
    ((22.7233, 20.0904, -46.6940), (23.0331, 14.9730, -42.5619), 2.0373),
    ((36.4612, 47.8580, 18.3852), (36.2715, 50.5065, 21.2231), 1.4146),
    ((90.8027, -2.0831, 1.4410), (91.1528, -1.6435, 0.0447), 1.4441),
    ((90.9257, -0.5406, -0.9208), (88.6381, -0.8985, -0.7239), 1.5381),
    ((6.7747, -0.2908, -2.4247), (5.8714, -0.0985, -2.2286), 0.6377),
    ((2.0776, 0.0795, -1.1350), (0.9033, -0.0636, -0.5514), 0.9082),
]


@pytest.mark.parametrize("lab1, lab2, expected", SHARMA_PAIRS)
def test_reference_pairs(lab1, lab2, expected):
    assert ciede2000(lab1, lab2) == pytest.approx(expected, abs=1e-4)


@pytest.mark.parametrize("lab1, lab2, expected", SHARMA_PAIRS)
def test_reference_pairs_reversed(lab1, lab2, expected):
    assert ciede2000(lab2, lab1) == pytest.approx(expected, abs=1e-4)


def test_symmetric_and_zero_on_identity():
    rng = np.random.default_rng(7)
    L = rng.uniform(0, 100, size=(500, 2))
    ab = rng.uniform(-128, 128, size=(500, 2, 2))
    for i in range(500):
        x = (L[i, 0], ab[i, 0, 0], ab[i, 0, 1])
        y = (L[i, 1], ab[i, 1, 0], ab[i, 1, 1])
        assert ciede2000(x, y) == ciede2000(y, x)
        assert ciede2000(x, x) == 0.0


def test_black_white():
    # Mean lightness is 50, so S_L = 1 and only the lightness term remains
    assert ciede2000((0, 0, 0), (100, 0, 0)) == pytest.approx(100.0)
    assert ciede2000((100, 0, 0), (0, 0, 0)) == pytest.approx(100.0)


def test_neutral_colors_with_signed_zeros():
    assert ciede2000((50, -0.0, -0.0), (50, 0.0, 0.0)) == 0.0
    assert ciede2000((50, -0.0, -0.0), (60, 0.0, 0.0)) > 0


def test_hue_wraparound_is_finite():
    # Hues on either side of 0°/360° take the wrap-around branches
    result = ciede2000((50, 10, -0.5), (50, 10, 0.5))
    assert math.isfinite(result)
    assert result < 1.5


def test_broadcast_matches_scalar():
    first = np.array([40.0, 20.0, -30.0])
    others = np.array([
        [40.0, 20.0, -30.0],
        [45.0, -10.0, 5.0],
        [80.0, 0.0, 0.0],
        [10.0, 60.0, 60.0],
    ])
    batch = delta_e_2000(first, others)
    assert batch.shape == (4,)
    for other, distance in zip(others, batch):
        assert distance == pytest.approx(ciede2000(first, other), rel=1e-12)


def test_no_nan_over_random_batch():
    rng = np.random.default_rng(11)
    lab1 = np.column_stack([rng.uniform(-5, 105, 2000), rng.uniform(-150, 150, (2000, 2))])
    lab2 = np.column_stack([rng.uniform(-5, 105, 2000), rng.uniform(-150, 150, (2000, 2))])
    distances = delta_e_2000(lab1, lab2)
    assert np.isfinite(distances).all()
    assert (distances >= 0).all()
