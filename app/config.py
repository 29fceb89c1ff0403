from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    metrics_path: str = Field(default="/metrics", alias="METRICS_PATH")
    metrics_project_label: str = Field(default="custom-server", alias="METRICS_PROJECT_LABEL")
    metrics_route_label: Literal["path", "template"] = Field(default="path", alias="METRICS_ROUTE_LABEL")
    metrics_default_collectors: bool = Field(default=True, alias="METRICS_DEFAULT_COLLECTORS")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
