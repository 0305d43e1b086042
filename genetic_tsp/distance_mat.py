import math
import numbers
import random
from typing import Dict, List, Optional, Sequence

import networkx as nx
import numpy as np
import torch

from .exceptions import InvalidArgumentError, InvalidMatrixError
from .route import Route


class DistanceMatrix:
    """
    Immutable square matrix of non-negative distances between cities ``0..n-1``.

    Rows may differ from columns (asymmetric instances). The diagonal is not
    forced to zero, but a route never travels from a city to itself.
    """

    def __init__(self, distances: Sequence[Sequence[float]]):
        try:
            rows = [list(row) for row in distances]
        except TypeError:
            raise InvalidMatrixError("expected a sequence of rows") from None
        n = len(rows)
        if n < 2:
            raise InvalidMatrixError(f"need at least 2 cities, got {n}")
        for i, row in enumerate(rows):
            if len(row) != n:
                raise InvalidMatrixError(f"row {i} has {len(row)} entries, expected {n}", row=i)
            for j, value in enumerate(row):
                if isinstance(value, bool) or not isinstance(value, numbers.Real):
                    raise InvalidMatrixError(f"entry is not a real number: {value!r}", row=i, col=j)
                if not math.isfinite(value):
                    raise InvalidMatrixError(f"entry is not finite: {value}", row=i, col=j)
                if value < 0:
                    raise InvalidMatrixError(f"entry is negative: {value}", row=i, col=j)
        values = np.array(rows, dtype=np.float64)
        values.setflags(write=False)
        self._values = values
        self._tensors: Dict[str, torch.Tensor] = {}

    @classmethod
    def from_graph(cls, graph: nx.Graph, nodes: Optional[List] = None) -> "DistanceMatrix":
        """
        Build a matrix from the ``weight`` attribute of a (di)graph's edges.

        City ``i`` is ``nodes[i]``; by default the graph's own node order.
        Pairs without an edge are rejected rather than guessed.
        """
        nodes = list(graph.nodes()) if nodes is None else list(nodes)
        idx_map = {node: i for i, node in enumerate(nodes)}
        mat = np.full((len(nodes), len(nodes)), np.inf)
        np.fill_diagonal(mat, 0.0)
        for u, v, w in graph.edges(data="weight", default=1.0):
            if u not in idx_map or v not in idx_map:
                continue
            mat[idx_map[u], idx_map[v]] = w
            if not graph.is_directed():
                mat[idx_map[v], idx_map[u]] = w
        return cls(mat)

    def __getstate__(self):
        # Device tensors are rebuilt on demand in the receiving process.
        return {"values": self._values}

    def __setstate__(self, state):
        values = np.array(state["values"], dtype=np.float64)
        values.setflags(write=False)
        self._values = values
        self._tensors = {}

    @property
    def n(self) -> int:
        return self._values.shape[0]

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the underlying array."""
        return self._values

    def __len__(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return f"DistanceMatrix(n={self.n})"

    def distance(self, i: int, j: int) -> float:
        n = self.n
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"city index out of range for {n} cities: ({i}, {j})")
        return float(self._values[i, j])

    def as_tensor(self, device: torch.device) -> torch.Tensor:
        # One copy per device; the matrix never changes.
        key = str(device)
        if key not in self._tensors:
            self._tensors[key] = torch.as_tensor(self._values.copy(), dtype=torch.float64, device=device)
        return self._tensors[key]

    def random_route(self, rng: Optional[random.Random] = None) -> Route:
        rng = rng or random
        order = list(range(self.n))
        rng.shuffle(order)
        return Route(order)

    def random_population(self, size: int, rng: Optional[random.Random] = None) -> List[Route]:
        if size < 0:
            raise InvalidArgumentError("size", size, ">= 0")
        return [self.random_route(rng) for _ in range(size)]
