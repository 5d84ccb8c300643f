"""Environment settings for schema-typegen."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_ENV_FILE = ".env"


class Settings(BaseSettings):
    """Settings loaded from environment variables and the env file."""

    database_url: Optional[str] = Field(
        default=None,
        description="Connection URL used when no url is configured"
    )

    class Config:
        env_file = DEFAULT_ENV_FILE
        env_file_encoding = "utf-8"
        extra = "ignore"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load settings, reading ``env_file`` instead of the default ``.env``.

    A missing env file is not an error; the process environment still
    applies.
    """
    if env_file is None:
        return Settings()
    return Settings(_env_file=env_file)
