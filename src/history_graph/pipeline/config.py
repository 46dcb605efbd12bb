"""Pipeline configuration with defaults.

All parameters can be overridden via ``config/pipeline.yaml``.
If the file does not exist, defaults are used.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator


class FetchConfig(BaseModel):
    """Paging parameters for history retrieval."""

    max_results_per_search: int = Field(default=1000, ge=1)


class ClusterConfig(BaseModel):
    """Bounds for label propagation."""

    max_passes: int = Field(default=100, ge=1)


class HorizonConfig(BaseModel):
    """Horizon choices offered to the user, in days."""

    choices: list[int] = [1, 3, 7, 30, 90]
    default: int = 7

    @model_validator(mode="after")
    def default_is_a_choice(self) -> "HorizonConfig":
        if any(days < 1 for days in self.choices):
            raise ValueError("horizon choices must be positive")
        if self.default not in self.choices:
            raise ValueError(
                f"default horizon {self.default} is not one of {self.choices}"
            )
        return self


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration combining all sub-configs."""

    fetch: FetchConfig = FetchConfig()
    clustering: ClusterConfig = ClusterConfig()
    horizons: HorizonConfig = HorizonConfig()


def load_pipeline_config(path: Path) -> PipelineConfig:
    """Load pipeline configuration from a YAML file.

    Partial overrides are supported -- only the keys present in the
    YAML file replace defaults.
    """
    if not path.exists():
        return PipelineConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return PipelineConfig(**data)
