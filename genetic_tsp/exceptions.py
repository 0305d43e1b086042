"""
Exceptions raised by the solver core and translated by the api / cli layers.
"""

from typing import Any, Dict, Optional


class TSPError(Exception):
    """Base exception for genetic_tsp."""

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputValidationError(TSPError, ValueError):
    """Raised when user supplied input (matrix or configuration) is unusable."""


class InvalidMatrixError(InputValidationError):
    """Raised when a distance matrix is not square, too small or has bad entries."""

    def __init__(self, reason: str, row: Optional[int] = None, col: Optional[int] = None):
        details = {}
        if row is not None:
            details["row"] = row
        if col is not None:
            details["col"] = col
        super().__init__(f"Invalid distance matrix: {reason}", details)


class InvalidArgumentError(TSPError, ValueError):
    """Raised when a component is called with out-of-contract arguments."""

    def __init__(self, parameter: str, value: Any = None, expected: Optional[str] = None):
        message = f"Invalid argument: {parameter} = {value}"
        if expected:
            message += f" (expected: {expected})"
        super().__init__(message, {"parameter": parameter, "value": value})


class SolverTimeoutError(TSPError):
    """Raised when a deadline passes between two generations."""

    def __init__(self, generation: int, n_generations: int):
        super().__init__(
            f"Deadline passed after {generation} of {n_generations} generations",
            {"generation": generation, "n_generations": n_generations},
        )


class InvalidConfigurationError(InputValidationError, InvalidArgumentError):
    """Raised when solver settings break their documented constraints."""

    def __init__(self, parameter: str, value: Any = None, expected: Optional[str] = None):
        message = f"Invalid configuration parameter: {parameter} = {value}"
        if expected:
            message += f" (expected: {expected})"
        TSPError.__init__(self, message, {"parameter": parameter, "value": value})
