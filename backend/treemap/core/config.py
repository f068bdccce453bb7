"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the URLs of the three remote GeoJSON resources, download tuning, the size
of the top-species lists, CORS origins, and the log level.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from treemap.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.trees_url)

    Environment variables can override defaults:
        >>> TREES_URL=https://example.org/trees.geojson
        >>> REQUEST_TIMEOUT_SECONDS=30
        >>> TOP_N=5
"""

import functools

import pydantic
import pydantic_settings

_DATA_HOST = "https://pub-853864c73d334eac8a44f5923b069c11.r2.dev"


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        trees_url: GeoJSON document with the living tree inventory.
        fellings_url: GeoJSON document with the tree-removal records.
        neighborhoods_url: GeoJSON document with neighborhood statistics.
        request_timeout_seconds: Total timeout for one resource download.
            A timed out download counts as a failed load.
        chunk_size_bytes: Size of the chunks read from a response body.
        top_n: Number of entries in the top-species lists.
        allow_origins: List of allowed CORS origins (["*"] allows all).
        log_level: Root log level name.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     trees_url="http://localhost:9000/trees.geojson",
            ...     top_n=5,
            ... )
    """

    trees_url: pydantic.AnyHttpUrl | str = f"{_DATA_HOST}/trees.geojson"
    fellings_url: pydantic.AnyHttpUrl | str = f"{_DATA_HOST}/fellings.geojson"
    neighborhoods_url: pydantic.AnyHttpUrl | str = (
        f"{_DATA_HOST}/nbhd_stats.geojson"
    )
    request_timeout_seconds: float = 120.0
    chunk_size_bytes: int = 64 * 1024
    top_n: int = 10
    allow_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def resources(self) -> dict[str, str]:
        """Map each resource id to the URL it is fetched from.

        The order is the order in which loads are started; the ids double
        as the labels shown by the progress display.

        Returns:
            Dictionary of resource id to URL string.
        """
        return {
            "trees": str(self.trees_url),
            "fellings": str(self.fellings_url),
            "nbhd": str(self.neighborhoods_url),
        }


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.
    """
    return Settings()
