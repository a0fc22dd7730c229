# tinypet/core/settings.py
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "TinyPet"
    LOG_LEVEL: str = "INFO"

    # Need decay, per second of wall-clock time
    BASE_DECAY_RATE: float = Field(default=0.05, ge=0)
    DECAY_TICK_INTERVAL_SECONDS: float = Field(default=1.0, gt=0)
    AUTOSAVE_INTERVAL_SECONDS: float = Field(default=30.0, gt=0)

    PERSISTENCE_BACKEND: Literal["file", "memory", "mongo"] = "file"
    SAVE_SLOT: str = "MyTinyPet_GameState"
    SAVE_FILE_PATH: str = ".userdata/save.json"

    MONGO_CONNECTION_URI: Optional[str] = None
    MONGO_DATABASE_NAME: str = "tinypet"
    MONGO_COLLECTION_NAME: str = "game_states"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore",
                                      case_sensitive=False)  # case_sensitive=False for env vars


settings = Settings()
