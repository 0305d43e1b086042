"""
Population of candidate tours and the operators that replace it each generation.

Every operator returns a new :class:`Population`; the routes of the input
are shared, never modified.
"""

import concurrent.futures
import functools
import random
from typing import Iterable, List, Optional, Sequence, Tuple

from .distance_mat import DistanceMatrix
from .evaluation import fitness_values
from .exceptions import InvalidArgumentError
from .route import Route, as_route, check_probability

# Offspring are bred in chunks of this size, each with its own generator,
# so results do not depend on whether an executor is used.
BREED_CHUNK_SIZE = 16


def tournament_select(
    routes: Sequence[Route], fitness: Sequence[float], tournament_size: int, rng: random.Random
) -> Route:
    entrants = rng.sample(range(len(routes)), min(tournament_size, len(routes)))
    # max() keeps the first of equally fit entrants.
    winner = max(entrants, key=lambda i: fitness[i])
    return routes[winner]


def _breed(
    routes: Sequence[Route],
    fitness: Sequence[float],
    mutation_probability: float,
    tournament_size: int,
    matrix: DistanceMatrix,
    chunk: Tuple[int, int],
) -> List[Route]:
    count, seed = chunk
    rng = random.Random(seed)
    children = []
    for _ in range(count):
        mother = tournament_select(routes, fitness, tournament_size, rng)
        father = tournament_select(routes, fitness, tournament_size, rng)
        child = mother.recombine(father, matrix, rng)
        children.append(child.mutate(mutation_probability, rng))
    return children


class Population:
    def __init__(self, routes: Iterable[Sequence[int]] = ()):
        self.routes: Tuple[Route, ...] = tuple(as_route(r) for r in routes)
        sizes = {len(r) for r in self.routes}
        if len(sizes) > 1:
            raise InvalidArgumentError("route lengths", sorted(sizes), "routes over the same cities")

    @classmethod
    def from_matrix(cls, matrix: DistanceMatrix, size: int, rng: Optional[random.Random] = None) -> "Population":
        return cls(matrix.random_population(size, rng))

    def __len__(self) -> int:
        return len(self.routes)

    def __iter__(self):
        return iter(self.routes)

    def __repr__(self) -> str:
        return f"Population(size={len(self.routes)})"

    def fitness(self, matrix: DistanceMatrix, device=None) -> List[float]:
        return fitness_values(matrix, self.routes, device)

    def _ranking(self, matrix: DistanceMatrix, device=None) -> List[Tuple[Route, float]]:
        fitness = self.fitness(matrix, device)
        # sorted() is stable, ties keep population order.
        order = sorted(range(len(self.routes)), key=lambda i: -fitness[i])
        return [(self.routes[i], fitness[i]) for i in order]

    def evolve(
        self,
        mutation_probability: float,
        matrix: DistanceMatrix,
        rng: Optional[random.Random] = None,
        tournament_size: int = 2,
        executor: Optional[concurrent.futures.Executor] = None,
        device=None,
    ) -> "Population":
        """
        Generational replacement: one child per member.

        Each child comes from two tournament-selected parents, recombined and
        then mutated with ``mutation_probability``. Elitism is left to
        :meth:`select_fittest`.
        """
        mutation_probability = check_probability(mutation_probability)
        if tournament_size < 2:
            raise InvalidArgumentError("tournament_size", tournament_size, ">= 2")
        rng = rng or random
        size = len(self.routes)
        if size == 0:
            return Population()
        fitness = self.fitness(matrix, device)
        chunks = []
        for start in range(0, size, BREED_CHUNK_SIZE):
            count = min(BREED_CHUNK_SIZE, size - start)
            chunks.append((count, rng.getrandbits(64)))

        # Picklable, for process pools.
        breed = functools.partial(_breed, self.routes, fitness, mutation_probability, tournament_size, matrix)
        if executor is None:
            results = map(breed, chunks)
        else:
            results = executor.map(breed, chunks)
        return Population(child for children in results for child in children)

    def add_random_routes(
        self, n: int, matrix: DistanceMatrix, rng: Optional[random.Random] = None
    ) -> "Population":
        """Diversity injection: append ``n`` fresh random routes."""
        if n < 0:
            raise InvalidArgumentError("n", n, ">= 0")
        return Population(self.routes + tuple(matrix.random_population(n, rng)))

    def select_fittest(self, keep: int, matrix: DistanceMatrix, device=None) -> "Population":
        if not 0 <= keep <= len(self.routes):
            raise InvalidArgumentError("keep", keep, f"0 <= keep <= {len(self.routes)}")
        return Population(route for route, _ in self._ranking(matrix, device)[:keep])

    def select_top_k(self, k: int, matrix: DistanceMatrix, device=None) -> List[Tuple[Route, float]]:
        """The ``min(k, len(self))`` best routes with their fitness, best first."""
        if k < 0:
            raise InvalidArgumentError("k", k, ">= 0")
        return self._ranking(matrix, device)[:k]
