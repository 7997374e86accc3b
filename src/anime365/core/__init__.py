"""Client facade."""

from .client import Anime365Client, run_blocking

__all__ = ["Anime365Client", "run_blocking"]
