"""Configuration management using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REGDOMAIN_",
        case_sensitive=False
    )
    
    # Public Suffix List source
    psl_url: str = "https://publicsuffix.org/list/public_suffix_list.dat"
    include_private_domains: bool = True
    download_timeout_seconds: int = 30
    
    # Persisted index
    index_path: str = "./data/psl-index.bin"
    
    # Refresh (seconds, weekly by default)
    refresh_enabled: bool = False
    refresh_interval_seconds: int = 604800
    build_on_startup: bool = False
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    
    # Logging
    log_level: str = "INFO"
    
    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        Path(self.index_path).parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
