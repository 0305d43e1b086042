import random
from pathlib import Path

import pytest

from genetic_tsp.distance_mat import DistanceMatrix

TEST_DATA = Path(__file__).parent / "test-data"


def is_permutation(order, n):
    return sorted(order) == list(range(n))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def six_cities_path():
    return TEST_DATA / "6_cities.txt"


@pytest.fixture
def six_cities(six_cities_path):
    rows = [
        [float(x) for x in line.split(";")]
        for line in six_cities_path.read_text().splitlines()
        if line.strip()
    ]
    return DistanceMatrix(rows)


@pytest.fixture
def integer_matrix():
    # Asymmetric, integer valued so tour lengths are exact.
    gen = random.Random(7)
    n = 9
    return DistanceMatrix([[0 if i == j else gen.randint(1, 50) for j in range(n)] for i in range(n)])
