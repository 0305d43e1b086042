"""
Generation loop of the genetic algorithm.

Each generation the population is bred (:meth:`Population.evolve`), topped up
with random routes and truncated back to its size, keeping the fittest. The
mutation probability decays linearly from 1.0 towards 0 over the run.
"""

import concurrent.futures
import contextlib
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .distance_mat import DistanceMatrix
from .evaluation import resolve_device
from .exceptions import InvalidArgumentError, InvalidConfigurationError, SolverTimeoutError
from .log import get_logger
from .population import Population
from .route import Route

logger = get_logger(__name__)


@dataclass
class SolverConfig:
    n_generations: int
    n_routes: int = 30
    n_random_per_generation: int = 10
    top_n: int = 1
    tournament_size: int = 2
    random_seed: Optional[int] = None
    log_every: int = 100
    device: Optional[str] = None

    def validate(self) -> "SolverConfig":
        if self.n_generations < 0:
            raise InvalidConfigurationError("n_generations", self.n_generations, ">= 0")
        if self.n_routes < 2:
            raise InvalidConfigurationError("n_routes", self.n_routes, ">= 2")
        if self.n_random_per_generation < 0:
            raise InvalidConfigurationError("n_random_per_generation", self.n_random_per_generation, ">= 0")
        if not 1 <= self.top_n <= self.n_routes:
            raise InvalidConfigurationError("top_n", self.top_n, f"1 <= top_n <= n_routes ({self.n_routes})")
        if self.tournament_size < 2:
            raise InvalidConfigurationError("tournament_size", self.tournament_size, ">= 2")
        return self


# Population 30, 10 random routes per generation; the service reports three
# routes, the command line only the best one.
SERVICE_DEFAULTS = {"n_routes": 30, "n_random_per_generation": 10, "top_n": 3}
CLI_DEFAULTS = {"n_routes": 30, "n_random_per_generation": 10, "top_n": 1}


def duration_to_ms(seconds: float) -> int:
    """Whole milliseconds in a ``time.perf_counter`` difference."""
    return int(seconds * 1000)


@contextlib.contextmanager
def breeding_pool(workers: int):
    """Process pool for ``Population.evolve``, or ``None`` to breed inline when ``workers <= 1``."""
    if workers < 0:
        raise InvalidConfigurationError("workers", workers, ">= 0")
    if workers <= 1:
        yield None
        return
    with concurrent.futures.ProcessPoolExecutor(max_workers=workers) as pool:
        yield pool


def mutation_probability(generation: int, n_generations: int) -> float:
    if n_generations <= 0:
        raise InvalidArgumentError("n_generations", n_generations, "> 0")
    return min(1.0, max(0.0, 1.0 - generation / n_generations))


class GeneticSolver:
    def __init__(
        self,
        config: SolverConfig,
        matrix: DistanceMatrix,
        rng: Optional[random.Random] = None,
        executor: Optional[concurrent.futures.Executor] = None,
    ):
        self.cfg = config.validate()
        self.matrix = matrix
        self.rng = rng or random.Random(config.random_seed)
        self.executor = executor
        self.device = resolve_device(config.device)
        self.generation = 0
        self.population = Population.from_matrix(matrix, config.n_routes, self.rng)

    @property
    def done(self) -> bool:
        return self.generation >= self.cfg.n_generations

    def step(self) -> None:
        cfg = self.cfg
        p = mutation_probability(self.generation, cfg.n_generations)
        self.population = (
            self.population.evolve(
                p,
                self.matrix,
                rng=self.rng,
                tournament_size=cfg.tournament_size,
                executor=self.executor,
                device=self.device,
            )
            .add_random_routes(cfg.n_random_per_generation, self.matrix, self.rng)
            .select_fittest(cfg.n_routes, self.matrix, device=self.device)
        )
        self.generation += 1
        if cfg.log_every and self.generation % cfg.log_every == 0:
            best = max(self.population.fitness(self.matrix, self.device))
            logger.debug(
                "generation %d/%d: mutation_probability=%.3f best_length=%.2f",
                self.generation, cfg.n_generations, p, -best,
            )

    def best(self, k: Optional[int] = None) -> List[Tuple[Route, float]]:
        k = self.cfg.top_n if k is None else k
        return self.population.select_top_k(k, self.matrix, device=self.device)

    def run(self, deadline: Optional[float] = None) -> List[Tuple[Route, float]]:
        """
        Run the remaining generations and return the ``top_n`` best routes.

        ``deadline`` is a ``time.monotonic()`` value checked before every
        generation; passing it raises :class:`SolverTimeoutError`.
        """
        while not self.done:
            if deadline is not None and time.monotonic() > deadline:
                raise SolverTimeoutError(self.generation, self.cfg.n_generations)
            self.step()
        result = self.best()
        logger.info(
            "finished %d generations on %d cities, best length %.2f",
            self.generation, self.matrix.n, -result[0][1],
        )
        return result


def solve_tsp(
    distance_matrix: DistanceMatrix,
    n_generations: int,
    n_routes: int,
    n_random_individuals_per_generation: int,
    top_n: int,
    rng: Optional[random.Random] = None,
    deadline: Optional[float] = None,
    executor: Optional[concurrent.futures.Executor] = None,
    device: Optional[str] = None,
) -> List[Tuple[Route, float]]:
    """
    Compute routes for the traveling-salesman-problem defined by
    ``distance_matrix``.

    Args:
        distance_matrix: Distances that define the fitness of a route.
        n_generations: How many generations the algorithm runs for.
        n_routes: How many routes are kept in the population.
        n_random_individuals_per_generation: Random routes added every
            generation.
        top_n: How many routes to return.

    Returns:
        ``(route, fitness)`` pairs, fittest first. Fitness is the negated
        tour length.
    """
    config = SolverConfig(
        n_generations=n_generations,
        n_routes=n_routes,
        n_random_per_generation=n_random_individuals_per_generation,
        top_n=top_n,
        device=device,
    )
    return GeneticSolver(config, distance_matrix, rng=rng, executor=executor).run(deadline)
