"""Annealing solver configuration."""

from dotenv import find_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine the environment file path, or None if not found
ENV_FILE = find_dotenv(usecwd=True) or None

FINAL_TEMPERATURE = 1e-5
"""The outer loop stops once the nominal temperature falls to or below this floor."""


class SolverConfig(BaseSettings):
    """Configuration settings for the annealing solver.

    Every field can be overridden by an `ANNEAL_<FIELD>` environment variable or a `.env` file.
    """

    base_temperature: float = Field(default=1.0, gt=0)
    """Starting temperature of the coldest replica. Rung i runs at this times 2**i. Default: 1.0."""

    cooling_rate: float = Field(default=0.9, gt=0, lt=1)
    """Factor applied to the temperature after every outer step. Default: 0.9."""

    internal_iterations: int = Field(default=1000, ge=1)
    """Number of Metropolis iterations each replica runs per outer step. Default: 1000."""

    swap_count: int = Field(default=1, ge=1)
    """Number of cell swaps making up one neighbor proposal. Default: 1."""

    replica_count: int = Field(default=6, ge=1)
    """Number of replicas in the temperature ladder. Default: 6."""

    seed: int | None = Field(default=None, ge=0)
    """Master seed for all random streams. If None (default), one is drawn from OS entropy."""

    max_workers: int | None = Field(default=None, ge=1)
    """Maximum number of workers to use. If None (default), min(replica_count, cpu_count - 1)."""

    use_processes: bool = True
    """Run replicas in worker processes (True, default) or in threads (False)."""

    report_interval: int = Field(default=10, ge=1)
    """Interval (in outer steps) at which to log progress. Default: 10."""

    log_dir: str = "logs"
    """Directory under which per-run log files are written by the command-line runner."""

    model_config = SettingsConfigDict(
        env_prefix="ANNEAL_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="forbid",
    )


config = SolverConfig()
"""Default configuration, read from the environment at import time."""
