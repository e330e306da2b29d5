"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration — reads from environment / .env file."""

    # Snapshot files
    cache_dir: str = "cache"
    news_cache_file: str = "hpa-news-cache.json"
    restaurant_cache_file: str = "restaurant-cache.json"

    # Cache TTLs (seconds)
    news_cache_ttl_seconds: int = 172800        # 48 hours
    restaurant_cache_ttl_seconds: int = 86400   # 24 hours

    # Cache policy
    news_fallback_on_error: bool = False
    restaurant_fallback_on_error: bool = True
    cache_single_flight: bool = True

    # Upstream APIs
    upstream_timeout_seconds: float = 15.0
    hpa_base_url: str = "https://www.hpa.gov.tw/wf"
    hpa_news_path: str = "/newsapi.ashx"
    moenv_base_url: str = "https://data.moenv.gov.tw/api/v2"
    moenv_restaurant_path: str = "/gis_p_11"
    moenv_api_key: str = ""
    restaurant_fetch_limit: int = 2000
    restaurant_sort: str = "ImportDate desc"

    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    allowed_origins: str = "*"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def has_moenv_key(self) -> bool:
        return bool(self.moenv_api_key)

    @property
    def news_snapshot_path(self) -> Path:
        return Path(self.cache_dir) / self.news_cache_file

    @property
    def restaurant_snapshot_path(self) -> Path:
        return Path(self.cache_dir) / self.restaurant_cache_file

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",")]


settings = Settings()
