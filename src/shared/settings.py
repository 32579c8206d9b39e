"""Engine configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    model_config = {"env_prefix": "WAGER_"}

    # holes down before a Nassau press is suggested
    press_trigger_margin: int = Field(default=2, ge=1)
    log_dir: str | None = Field(default=None, min_length=1)
