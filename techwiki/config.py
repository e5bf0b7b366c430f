"""
Configuration management for the TechWiki backend.

Loads configuration from the project-level config.yaml and provides settings.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # API Settings
    api_title: str = "TechWiki API"
    api_version: str = "1.0.0"
    api_description: str = "Full-text search and knowledge graph for the TechWiki encyclopedia"

    # Server Settings
    host: str = "127.0.0.1"
    port: int = 8000

    # CORS Settings
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Database Settings
    database_path: str = ""

    # Search Settings
    search_max_results: int = 25
    snippet_tokens: int = 18

    # Graph Settings
    graph_max_cross_edges: int = 1500
    graph_cache_ms: int = 5 * 60 * 1000

    log_level: str = "INFO"

    model_config = {"env_prefix": "TECHWIKI_"}


def load_config() -> dict[str, Any]:
    """
    Load configuration from the project config.yaml.

    Returns:
        Configuration dictionary
    """
    # config.yaml lives in the project root, one level above techwiki/
    package_dir = Path(__file__).parent
    config_path = package_dir.parent / "config.yaml"

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f)

    return config or {}


def get_settings() -> Settings:
    """
    Get application settings.

    Returns:
        Settings instance with database path and tuning values from config.yaml
    """
    # Check if database path is overridden by environment variable
    env_db_path = os.environ.get("TECHWIKI_DATABASE_PATH")

    if env_db_path:
        settings = Settings()
        settings.database_path = env_db_path
        return settings

    config = load_config()

    db_path = config.get("database", {}).get("path", "data/techwiki.db")

    # Resolve relative to project root
    project_root = Path(__file__).parent.parent
    absolute_db_path = project_root / db_path

    search_cfg = config.get("search", {})
    graph_cfg = config.get("graph", {})

    overrides: dict[str, Any] = {"database_path": str(absolute_db_path)}
    if "max_results" in search_cfg:
        overrides["search_max_results"] = search_cfg["max_results"]
    if "snippet_tokens" in search_cfg:
        overrides["snippet_tokens"] = search_cfg["snippet_tokens"]
    if "max_cross_edges" in graph_cfg:
        overrides["graph_max_cross_edges"] = graph_cfg["max_cross_edges"]
    if "cache_ms" in graph_cfg:
        overrides["graph_cache_ms"] = graph_cfg["cache_ms"]
    if "level" in config.get("logging", {}):
        overrides["log_level"] = config["logging"]["level"]

    return Settings(**overrides)


# Global settings instance
settings = get_settings()
