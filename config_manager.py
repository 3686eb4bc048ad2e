"""
Configuration management for the class wiki access engine.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    secret_key: str
    admin_user_ids: list[str]


@dataclass
class AccessConfig:
    """Tiered access and daily quota settings."""
    daily_view_limit: int
    guest_daily_limit: int
    origin_headers: list[str]
    tz_offset_cookie: str


@dataclass
class PathsConfig:
    """Path configuration settings."""
    data_dir: str


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigManager:
    """Manages application configuration loading and access."""
    
    def __init__(self, config_file: str = "web_app_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()
    
    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        # Start with default config
        self._config = self._get_default_config()
        
        # Load base config from file
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    # Merge file config with defaults
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass
        
        # Override with environment variables
        self._override_with_env()
    
    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 22581,
                "debug": False,
                "secret_key": "dev-secret-change-me",
                "admin_user_ids": []
            },
            "access": {
                "daily_view_limit": 5,
                "guest_daily_limit": 5,
                "origin_headers": [
                    "X-Forwarded-For",
                    "CF-Connecting-IP",
                    "X-Real-IP",
                    "True-Client-IP"
                ],
                "tz_offset_cookie": "tz_offset_min"
            },
            "paths": {
                "data_dir": "data"
            }
        }
    
    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values
    
    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")
        
        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))
        
        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"
        
        if os.getenv("APP_SECRET_KEY"):
            self._config["app"]["secret_key"] = os.getenv("APP_SECRET_KEY")
        
        if os.getenv("ADMIN_USER_IDS"):
            self._config["app"]["admin_user_ids"] = _split_csv(os.getenv("ADMIN_USER_IDS"))
        
        # Access settings
        if os.getenv("DAILY_VIEW_LIMIT"):
            self._config["access"]["daily_view_limit"] = int(os.getenv("DAILY_VIEW_LIMIT"))
        
        if os.getenv("GUEST_DAILY_LIMIT"):
            self._config["access"]["guest_daily_limit"] = int(os.getenv("GUEST_DAILY_LIMIT"))
        
        if os.getenv("ORIGIN_HEADERS"):
            self._config["access"]["origin_headers"] = _split_csv(os.getenv("ORIGIN_HEADERS"))
        
        # Paths
        if os.getenv("DATA_DIR"):
            self._config["paths"]["data_dir"] = os.getenv("DATA_DIR")
    
    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            secret_key=app_config["secret_key"],
            admin_user_ids=app_config["admin_user_ids"]
        )
    
    def get_access_config(self) -> AccessConfig:
        """Get access and quota configuration."""
        access_config = self._config["access"]
        return AccessConfig(
            daily_view_limit=access_config["daily_view_limit"],
            guest_daily_limit=access_config["guest_daily_limit"],
            origin_headers=list(access_config["origin_headers"]),
            tz_offset_cookie=access_config["tz_offset_cookie"]
        )
    
    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(
            data_dir=paths_config["data_dir"]
        )
    
    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()
    
    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
    
    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_access_config() -> AccessConfig:
    """Get access and quota configuration."""
    return config_manager.get_access_config()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
