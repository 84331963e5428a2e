"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MAOYAN_",
        case_sensitive=False,
        extra="ignore",
    )

    # Maoyan content API
    base_url: str = "https://apis.netstart.cn/maoyan"
    request_timeout: float = 30.0

    # Browser-like header profile sent with every request
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
    )
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
    accept_language: str = "zh-CN,zh;q=0.9"

    # Query settings
    cinema_list_limit: int = 5
    precise_coordinates: bool = False

    # MCP server settings
    server_name: str = "maoyan-movie"
    transport: str = "sse"
    host: str = "127.0.0.1"
    port: int = 9000

    log_level: str = "INFO"


# Global settings instance
settings = Settings()
