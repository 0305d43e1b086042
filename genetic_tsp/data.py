from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import tsplib95
from tsplib95.exceptions import ParsingError

from .distance_mat import DistanceMatrix
from .exceptions import InvalidMatrixError

DEFAULT_DELIMITER = ";"


@dataclass
class Instance:
    name: str
    path: Path
    matrix: DistanceMatrix
    nodes: List
    optimum: Optional[float] = None


def parse_delimited_matrix(lines: Iterable[str], delimiter: str = DEFAULT_DELIMITER) -> DistanceMatrix:
    rows = []
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            rows.append([float(field) for field in line.split(delimiter)])
        except ValueError:
            raise InvalidMatrixError(f"line {line_no} is not a {delimiter!r}-separated list of numbers") from None
    return DistanceMatrix(rows)


def load_delimited_matrix(path: Path, delimiter: str = DEFAULT_DELIMITER) -> Instance:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            matrix = parse_delimited_matrix(f, delimiter)
    except UnicodeDecodeError:
        raise InvalidMatrixError(f"{path} is not UTF-8 text") from None
    return Instance(name=path.stem, path=path, matrix=matrix, nodes=list(range(matrix.n)))


def _load_tsplib(path: Path):
    try:
        return tsplib95.load(path)
    except UnicodeDecodeError:
        raise InvalidMatrixError(f"{path} is not UTF-8 text") from None
    except ParsingError as exc:
        raise InvalidMatrixError(f"{path} is not a valid TSPLIB file: {exc}") from None


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _load_optimum(problem, path: Path) -> Optional[float]:
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        tour_file = _load_tsplib(candidate)
        if not tour_file.tours:
            continue
        nodes = list(tour_file.tours[0])
        return float(sum(problem.get_weight(a, b) for a, b in zip(nodes, nodes[1:] + nodes[:1])))
    return None


def load_tsplib_instance(path: Path) -> Instance:
    """Load a TSPLIB ``.tsp`` file, plus its optimal tour length when a tour file is next to it."""
    path = Path(path)
    problem = _load_tsplib(path)
    graph = problem.get_graph()
    nodes = list(graph.nodes())
    matrix = DistanceMatrix.from_graph(graph, nodes)
    return Instance(
        name=problem.name or path.stem,
        path=path,
        matrix=matrix,
        nodes=nodes,
        optimum=_load_optimum(problem, path),
    )


def load_matrix(path: Path, delimiter: str = DEFAULT_DELIMITER) -> Instance:
    path = Path(path)
    if path.suffix.lower() == ".tsp":
        return load_tsplib_instance(path)
    return load_delimited_matrix(path, delimiter)
