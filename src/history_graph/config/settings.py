from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Shipped pipeline config, relative to the repository root
_REPO_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HISTORY_GRAPH_")

    history_db_path: Path | None = None
    pipeline_config_path: Path = _REPO_CONFIG_DIR / "pipeline.yaml"
    export_dir: Path = Path("./export")
    log_json: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
