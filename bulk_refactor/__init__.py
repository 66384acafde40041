import logging

from .config import SearchSpec, RunConfig, NoopError
from .runtime import Refactor, RunReport, RunState, RunStatus

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["SearchSpec", "RunConfig", "NoopError", "Refactor", "RunReport", "RunState", "RunStatus"]
