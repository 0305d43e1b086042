import argparse
import sys
import time
from pathlib import Path

import uvicorn

from .data import DEFAULT_DELIMITER, load_matrix
from .evaluation import SolveResult
from .exceptions import InputValidationError, TSPError
from .log import get_logger, setup_logger
from .tsp_solver import CLI_DEFAULTS, GeneticSolver, SolverConfig, breeding_pool, duration_to_ms

logger = get_logger(__name__)


def solve(args) -> int:
    path = Path(args.path)
    logger.info("loading distances from %s", path)
    instance = load_matrix(path, delimiter=args.delimiter)
    config = SolverConfig(
        n_generations=args.generations,
        n_routes=args.routes,
        n_random_per_generation=args.random_routes,
        top_n=CLI_DEFAULTS["top_n"],
        random_seed=args.seed,
        device=args.device,
    )
    before = time.perf_counter()
    with breeding_pool(args.workers) as executor:
        (route, fitness), = GeneticSolver(config, instance.matrix, executor=executor).run()
    elapsed = duration_to_ms(time.perf_counter() - before)

    result = SolveResult(route=list(route.order), length=-fitness, optimum=instance.optimum)
    print(f"route: {' '.join(str(instance.nodes[i]) for i in result.route)}")
    print(f"distance: {result.length}")
    if result.optimum is not None:
        print(f"optimum: {result.optimum} (gap {result.gap:.2%})")
    print(f"computation took {elapsed} ms")
    return 0


def serve(args) -> int:
    uvicorn.run(
        "genetic_tsp.api:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="genetic-tsp", description="Genetic algorithm TSP solver")
    parser.add_argument("--log-level", default="INFO")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser("solve", help="Solve a distance matrix read from a file")
    solve_parser.add_argument("path", help="delimited text matrix, or a TSPLIB .tsp file")
    solve_parser.add_argument("--delimiter", default=DEFAULT_DELIMITER)
    solve_parser.add_argument("--generations", type=int, default=1000)
    solve_parser.add_argument("--routes", type=int, default=CLI_DEFAULTS["n_routes"])
    solve_parser.add_argument("--random-routes", type=int, default=CLI_DEFAULTS["n_random_per_generation"])
    solve_parser.add_argument("--seed", type=int, default=None)
    solve_parser.add_argument("--device", default=None, help="torch device used to score routes")
    solve_parser.add_argument("--workers", type=int, default=0, help="processes used to breed offspring")
    solve_parser.set_defaults(func=solve)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=serve)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(args.log_level)
    try:
        return args.func(args)
    except (InputValidationError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except TSPError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
