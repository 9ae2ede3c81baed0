from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    wh_secret: str = Field(min_length=1)
    gh_token: str = Field(min_length=1)
    github_api_url: str = "https://api.github.com"
    request_timeout: float = 5.0
    debug: bool = False
    sentry_dsn: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
