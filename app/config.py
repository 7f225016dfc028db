from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.relay.policy import FORWARD_TIMEOUT_S, MAX_ATTEMPTS, RETRY_BACKOFF_S


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    google_script_url: str = Field(
        default=(
            "https://script.google.com/macros/s/"
            "AKfycbwn6wyJbOELMCoMzBT8S-OCAgJbdS_J9qurkuOGLhY06WjVV7U_ch-qFfF_MdjuA7Dx2Q/exec"
        ),
        alias="GOOGLE_SCRIPT_URL",
    )
    pif_apps_script: str = Field(
        default=(
            "https://script.google.com/macros/s/"
            "AKfycbyN4OWJhC7Hfg4pwkOMUsmjgJ309B0MgaJ69A776x7KxcmVAVZovcRxJQLb-oIOV7gGNQ/exec"
        ),
        alias="PIF_APPS_SCRIPT",
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=10000, alias="PORT")

    forward_timeout_s: float = Field(default=FORWARD_TIMEOUT_S, alias="FORWARD_TIMEOUT_S")
    forward_max_attempts: int = Field(default=MAX_ATTEMPTS, alias="FORWARD_MAX_ATTEMPTS")
    forward_retry_backoff_ms: int = Field(default=int(RETRY_BACKOFF_S * 1000), alias="FORWARD_RETRY_BACKOFF_MS")
    follow_redirects: bool = Field(default=True, alias="FOLLOW_REDIRECTS")

    cors_allow_origins: list[str] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")

    @property
    def forward_retry_backoff_s(self) -> float:
        return self.forward_retry_backoff_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
