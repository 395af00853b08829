"""Simulation execution parameters."""

from typing import Optional

from pydantic import BaseModel, Field


class SimulationConfig(BaseModel):
    """Simulation execution parameters.

    Attributes:
        trial_count: Number of independent trials (rows of every table).
        year_count: Number of simulated years (columns of every table).
        random_seed: Root seed. Every variable, asset and trial block derives
            its own sub-stream from it, so a fixed seed reproduces
            bit-identical tables whatever the worker count.
        block_size: Trials per random sub-stream and per parallel work item.
        n_workers: Worker processes for environment generation and sweeps.
            ``None`` uses the number of physical cores.

    Examples:
        Case-study run::

            sim = SimulationConfig(trial_count=100_000, year_count=5, random_seed=2024)
    """

    trial_count: int = Field(default=10_000, ge=1, description="Number of trials")
    year_count: int = Field(default=5, ge=1, le=100, description="Number of years")
    random_seed: Optional[int] = Field(
        default=None, ge=0, description="Random seed for reproducibility"
    )
    block_size: int = Field(
        default=10_000, ge=1, description="Trials per random sub-stream"
    )
    n_workers: Optional[int] = Field(
        default=1, ge=1, description="Worker processes (None = physical cores)"
    )
