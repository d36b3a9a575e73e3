from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Backend identity service
    api_base_url: str = "http://localhost:5000/api"
    http_timeout_seconds: float = 10.0
    register_init_path: str = "/auth/register"
    register_verify_path: str = "/auth/register/verify"
    register_finalize_path: str = "/auth/register/finalize"
    username_check_path: str = "/auth/username/check"

    # Username availability
    username_debounce_ms: int = 600
    username_min_length: int = 3

    # Input policies
    phone_digits: int = 10
    totp_code_length: int = 6
    min_password_length: int = 6
    generated_password_length: int = 16

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
