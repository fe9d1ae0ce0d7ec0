import math

import pytest
import numpy as np

from molsolvent.core.errors import ConfigurationError
from molsolvent.utils.helpers import (
    format_number,
    minimum_image,
    parse_count,
    parse_float,
    safe_divide,
    shell_volumes,
    update_dict_recursively,
    validate_triplet,
)


@pytest.mark.parametrize("token, expected", [
    ("1.5", 1.5),
    ("-2e3", -2000.0),
    ("7", 7.0),
    ("abc", 0.0),
    ("", 0.0),
    ("1.2.3", 0.0),
    ("1_5", 0.0),
    ("1e_3", 0.0),
])
def test_parse_float(token, expected):
    """Test that malformed numbers parse as zero."""
    assert parse_float(token) == expected


def test_parse_count():
    """Test that atom counts are plain decimal integers."""
    assert parse_count(" 12\n") == 12
    with pytest.raises(ValueError):
        parse_count("1_2")
    with pytest.raises(ValueError):
        parse_count("two")


@pytest.mark.parametrize("value, expected", [
    (3, "3"),
    (np.int64(12), "12"),
    (True, "1"),
    (0.1, "0.1"),
    (2.0, "2.0"),
    (np.float64(1 / 3), "0.3333333333333333"),
    (1e-20, "1e-20"),
])
def test_format_number(value, expected):
    """Test number formatting for result tables."""
    assert format_number(value) == expected


def test_format_number_round_trips():
    """Test that formatted floats read back unchanged."""
    rng = np.random.default_rng(0)
    for value in rng.normal(scale=1e3, size=50):
        assert float(format_number(value)) == value


def test_minimum_image():
    """Test the minimum image shift."""
    box = np.array([10.0, 10.0, 10.0])
    delta = np.array([[9.0, -6.0, 4.9], [-9.5, 0.0, 5.1]])
    np.testing.assert_allclose(minimum_image(delta, box), [[-1.0, 4.0, 4.9], [0.5, 0.0, -4.9]])


def test_shell_volumes_sum_to_sphere():
    """Test that the shell volumes add up to the sphere volume."""
    shells = shell_volumes(10, 0.3)
    assert shells.shape == (10,)
    assert np.all(np.diff(shells) > 0)
    assert shells.sum() == pytest.approx(4.0 / 3.0 * math.pi * 3.0 ** 3)


def test_safe_divide():
    """Test division with zero denominators."""
    result = safe_divide(np.array([1.0, 2.0, 3.0]), np.array([2.0, 0.0, 4.0]), fill_value=-1.0)
    np.testing.assert_array_equal(result, [0.5, -1.0, 0.75])


def test_safe_divide_broadcasts():
    """Test safe division with broadcast shapes."""
    result = safe_divide(np.ones((2, 3)), np.array([1.0, 0.0, 2.0])[None, :])
    np.testing.assert_array_equal(result, [[1.0, 0.0, 0.5], [1.0, 0.0, 0.5]])


def test_update_dict_recursively():
    """Test recursive dictionary update."""
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    update_dict_recursively(base, {"b": {"c": 5}, "e": 6})
    assert base == {"a": 1, "b": {"c": 5, "d": 3}, "e": 6}


@pytest.mark.parametrize("values", [[1.0, 2.0], [1, 2, 3, 4], []])
def test_validate_triplet(values):
    """Test validation of three-component settings."""
    with pytest.raises(ConfigurationError, match="must have 3 components"):
        validate_triplet(values, "bloc")
