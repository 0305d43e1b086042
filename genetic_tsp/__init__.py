"""
Genetic algorithm for the traveling salesman problem, with an HTTP service and a CLI.
"""

from .distance_mat import DistanceMatrix
from .population import Population
from .route import Route
from .tsp_solver import GeneticSolver, SolverConfig, solve_tsp

__all__ = [
    "DistanceMatrix",
    "Population",
    "Route",
    "GeneticSolver",
    "SolverConfig",
    "solve_tsp",
]
