"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

    1. config/config.yaml  -- static defaults checked into the repo
    2. .env file           -- local developer overrides (not committed)
    3. Environment vars    -- set at deploy time

``load_config`` reads the YAML file first, then deep-merges the values
derived from :class:`Settings` on top.
"""

from pathlib import Path

import yaml

from collabgraph.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
        },
        "musicbrainz": {
            "app_name": settings.musicbrainz_app_name,
            "app_version": settings.musicbrainz_app_version,
            "request_interval": settings.musicbrainz_request_interval,
        },
        "synthesis": {
            "enrichment_concurrency": settings.enrichment_concurrency,
            "branch_limit": settings.branch_limit,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
