"""
HTTP interface: ``GET /alive`` and ``POST /tsp``.

Run with ``genetic-tsp serve`` or ``uvicorn --factory genetic_tsp.api:create_app``.
"""

import logging
import time
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .distance_mat import DistanceMatrix
from .exceptions import InputValidationError, InvalidConfigurationError, SolverTimeoutError, TSPError
from .log import get_logger, setup_logger
from .settings import ServiceSettings
from .tsp_solver import SERVICE_DEFAULTS, breeding_pool, duration_to_ms, solve_tsp

logger = get_logger(__name__)

NOT_FOUND = "Not found!"
COMPUTATION_FAILED = "Your computation could not be done."
COMPUTATION_TIMEOUT = "Your computation took too long."


class SolveTspData(BaseModel):
    distances: List[List[float]]
    n_generations: int = Field(..., ge=0)


class RouteWithFitness(BaseModel):
    route: List[int]
    # Positive tour length.
    fitness: float


def create_app(settings: Optional[ServiceSettings] = None) -> FastAPI:
    settings = settings or ServiceSettings.from_env()
    setup_logger(settings.log_level)
    app = FastAPI(title="genetic-tsp")

    @app.get("/alive")
    def liveness_probe():
        return "alive"

    @app.post("/tsp", response_model=List[RouteWithFitness])
    def solve(data: SolveTspData):
        matrix = DistanceMatrix(data.distances)
        logger.info("received %d x %d distance matrix, %d generations", matrix.n, matrix.n, data.n_generations)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("distances: %s", matrix.values.tolist())
        if data.n_generations > settings.max_generations:
            raise InvalidConfigurationError("n_generations", data.n_generations, f"<= {settings.max_generations}")
        deadline = None if settings.timeout is None else time.monotonic() + settings.timeout
        before = time.perf_counter()
        with breeding_pool(settings.workers) as executor:
            best = solve_tsp(
                matrix,
                data.n_generations,
                SERVICE_DEFAULTS["n_routes"],
                SERVICE_DEFAULTS["n_random_per_generation"],
                SERVICE_DEFAULTS["top_n"],
                deadline=deadline,
                executor=executor,
                device=settings.device,
            )
        logger.info("computation took %d ms", duration_to_ms(time.perf_counter() - before))
        return [RouteWithFitness(route=list(route.order), fitness=-fitness) for route, fitness in best]

    @app.exception_handler(InputValidationError)
    async def invalid_input(request: Request, exc: InputValidationError):
        logger.info("rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=422, content={"detail": exc.message})

    @app.exception_handler(SolverTimeoutError)
    async def timed_out(request: Request, exc: SolverTimeoutError):
        logger.warning("%s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content=COMPUTATION_TIMEOUT)

    @app.exception_handler(TSPError)
    async def failed_computation(request: Request, exc: TSPError):
        logger.error("%s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content=COMPUTATION_FAILED)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content=NOT_FOUND)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("unexpected error on %s", request.url.path)
        return JSONResponse(status_code=500, content=COMPUTATION_FAILED)

    return app
