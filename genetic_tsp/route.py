import operator
import random
from dataclasses import dataclass
from itertools import chain
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import numpy as np

from .exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from .distance_mat import DistanceMatrix


def check_probability(probability: float) -> float:
    # NaN fails both comparisons.
    if not 0.0 <= probability <= 1.0:
        raise InvalidArgumentError("probability", probability, "0.0 <= probability <= 1.0")
    return float(probability)


@dataclass(frozen=True)
class Route:
    """A closed tour: ``order[-1]`` connects back to ``order[0]``."""

    order: Tuple[int, ...]

    def __post_init__(self):
        try:
            order = tuple(operator.index(city) for city in self.order)
        except TypeError:
            raise InvalidArgumentError("order", list(self.order), "integer city indices") from None
        if sorted(order) != list(range(len(order))):
            raise InvalidArgumentError("order", list(order), f"a permutation of 0..{len(order) - 1}")
        object.__setattr__(self, "order", order)

    def __len__(self) -> int:
        return len(self.order)

    def check_matrix(self, matrix: "DistanceMatrix") -> None:
        if len(self.order) != matrix.n:
            raise InvalidArgumentError("route length", len(self.order), f"{matrix.n} cities")

    def length(self, matrix: "DistanceMatrix") -> float:
        """Total distance of the closed tour."""
        self.check_matrix(matrix)
        if len(self.order) < 2:
            return 0.0
        idx = np.asarray(self.order)
        return float(matrix.values[idx, np.roll(idx, -1)].sum())

    def fitness(self, matrix: "DistanceMatrix") -> float:
        """Negated tour length, so fitter routes score higher."""
        return -self.length(matrix)

    def recombine(
        self, other: "Route", matrix: "DistanceMatrix", rng: Optional[random.Random] = None
    ) -> "Route":
        """
        Order crossover.

        A random non-empty slice ``order[a:b]`` is copied from ``self`` into
        the same positions of the child. The remaining positions are filled
        left to right with the cities of ``other`` in the order they appear
        there, skipping those already taken from ``self``. When the slice is
        the whole tour the child equals ``self``.
        """
        self.check_matrix(matrix)
        other.check_matrix(matrix)
        rng = rng or random
        n = len(self.order)
        if n < 2:
            return self
        a, b = sorted(rng.sample(range(n + 1), 2))
        child = list(self.order)
        kept = set(self.order[a:b])
        donor = (city for city in other.order if city not in kept)
        for pos in chain(range(a), range(b, n)):
            child[pos] = next(donor)
        return Route(child)

    def mutate(self, probability: float, rng: Optional[random.Random] = None) -> "Route":
        """Swap two random positions with the given probability."""
        probability = check_probability(probability)
        rng = rng or random
        n = len(self.order)
        if n < 2 or rng.random() >= probability:
            return self
        i, j = rng.sample(range(n), 2)
        order = list(self.order)
        order[i], order[j] = order[j], order[i]
        return Route(order)


def as_route(order: Sequence[int]) -> Route:
    return order if isinstance(order, Route) else Route(tuple(order))
