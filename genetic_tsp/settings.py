import os
from dataclasses import dataclass
from typing import Optional


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


@dataclass
class ServiceSettings:
    timeout: Optional[float] = None
    max_generations: int = 100000
    device: Optional[str] = None
    log_level: str = "INFO"
    workers: int = 0

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        return cls(
            timeout=_env_float("GENETIC_TSP_TIMEOUT"),
            max_generations=int(os.environ.get("GENETIC_TSP_MAX_GENERATIONS", "100000")),
            device=os.environ.get("GENETIC_TSP_DEVICE") or None,
            log_level=os.environ.get("GENETIC_TSP_LOG_LEVEL", "INFO"),
            workers=int(os.environ.get("GENETIC_TSP_WORKERS", "0")),
        )
