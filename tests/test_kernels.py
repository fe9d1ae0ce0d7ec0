import math

import pytest
import numpy as np

from molsolvent.core.errors import ConfigurationError
from molsolvent.core.kernels import distance, radius_of_gyration


def test_distance_345():
    """Test the distance of a 3-4-5 triangle."""
    vec, dist = distance([0.0, 0.0, 0.0], [3.0, 4.0, 0.0])
    np.testing.assert_array_equal(vec, [-3.0, -4.0, 0.0])
    assert dist == 5.0


def test_distance_same_point():
    """Test the distance between identical points."""
    _, dist = distance([1.5, 2.5, -3.0], [1.5, 2.5, -3.0])
    assert dist == 0.0


def test_gyration_two_equal_masses():
    """Test the radius of gyration of two equal masses."""
    radius = radius_of_gyration([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]], ["C", "C"], {"C": 12.0})
    assert radius == pytest.approx(math.sqrt(1.0 / 3.0))


def test_gyration_mass_weighted_centre():
    """Test that the centre is weighted by mass."""
    # centre at x = 3, squared deviations 9 + 1 over 3 * 2
    radius = radius_of_gyration([[0.0, 0.0, 0.0], [4.0, 0.0, 0.0]], ["H", "O"], {"H": 1.0, "O": 3.0})
    assert radius == pytest.approx(math.sqrt(10.0 / 6.0))


def test_gyration_single_atom():
    """Test the radius of gyration of one atom."""
    assert radius_of_gyration([[1.0, 2.0, 3.0]], ["C"], {"C": 1.0}) == 0.0


def test_gyration_missing_mass():
    """Test that a type without a mass raises ConfigurationError."""
    with pytest.raises(ConfigurationError, match="mass for atom type `N` doesn't exist"):
        radius_of_gyration([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], ["C", "N"], {"C": 12.0})
