import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import torch

from .distance_mat import DistanceMatrix
from .route import Route


def resolve_device(device: Union[str, torch.device, None] = None) -> torch.device:
    if device is not None:
        return torch.device(device)
    return torch.device("cuda:0") if torch.cuda.is_available() else torch.device("cpu")


def tour_lengths(
    matrix: DistanceMatrix, routes: Sequence[Route], device: Union[str, torch.device, None] = None
) -> torch.Tensor:
    """Length of every route in one gather: ``dist[idx, idx.roll(-1)].sum(dim=1)``."""
    dist = matrix.as_tensor(resolve_device(device))
    if not routes:
        return torch.zeros(0, dtype=dist.dtype, device=dist.device)
    for route in routes:
        route.check_matrix(matrix)
    idx = torch.tensor([route.order for route in routes], dtype=torch.long, device=dist.device)
    return dist[idx, idx.roll(-1, dims=1)].sum(dim=1)


def fitness_values(
    matrix: DistanceMatrix, routes: Sequence[Route], device: Union[str, torch.device, None] = None
) -> List[float]:
    return (-tour_lengths(matrix, routes, device)).tolist()


@dataclass
class SolveResult:
    route: List[int]
    length: float
    optimum: Optional[float] = None

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.length - self.optimum) / self.optimum
