"""Configuration of domain sampling."""
from multiprocessing import cpu_count

from pydantic import BaseModel, ConfigDict, Field


class SamplerConfig(BaseModel):
    """
    How a domain is split between worker processes.

    One worker means sequential evaluation in the calling process.
    """

    model_config = ConfigDict(frozen=True)

    max_workers: int = Field(default_factory=cpu_count, ge=1, description="Maximum number of worker processes")
    min_chunk_size: int = Field(default=256, ge=1, description="Minimum number of points given to one worker")
