"""Settings for querysieve processors."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class SieveSettings(BaseSettings):
    """querysieve configuration settings.

    Values are read from the environment (prefixed with ``SIEVE_``) or a
    ``.env`` file and act as defaults for `SieveOptions`.
    """

    # Property name matching
    CASE_SENSITIVE: bool = False

    # Pagination
    DEFAULT_PAGE_SIZE: int = 0
    MAX_PAGE_SIZE: int = 0

    # Error handling
    THROW_EXCEPTIONS: bool = False

    # Null handling
    IGNORE_NULLS_ON_NOT_EQUAL: bool = True
    DISABLE_NULLABLE_TYPE_EXPRESSION_FOR_SORTING: bool = False

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SIEVE_", env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = SieveSettings()
