# cartography/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATASET_PATH: str = "graph.json"
    ROOT_LABEL: str = "HIMO"

    VIEWPORT_WIDTH: float = 1280
    VIEWPORT_HEIGHT: float = 800

    TEXT_MAX_WIDTH: float = 80
    FONT_SIZE: int = 12
    FONT_PATH: str = ""
    BASE_PADDING: float = 10
    MIN_RADIUS: float = 48
    EXPANDABLE_RING_OFFSET: float = 6
    LINK_ICON_INSET: float = 13

    JITTER_MAGNITUDE: float = 50
    JITTER_SEED: int | None = None
    PIN_RELEASE_DELAY: float = 0.3

    MAX_SESSIONS: int = 1000

    LIMITER_STORAGE_URI: str = "memory://"
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:8000",
        "http://localhost:8080",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
