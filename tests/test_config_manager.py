"""
Test cases for the configuration management system.
Tests config loading, environment overrides, and typed accessors.
"""

import os
import json
from unittest.mock import patch, mock_open
import pytest

from config_manager import (
    ConfigManager,
    AppConfig,
    AccessConfig,
    PathsConfig,
    get_app_config,
    get_access_config,
    get_paths_config,
    reload_config,
)


class TestConfigManager:
    """Test the ConfigManager class functionality."""
    
    def test_init_with_default_config_file(self):
        """Test ConfigManager initialization with default config file."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            manager = ConfigManager()
            
            assert manager._config is not None
            assert "app" in manager._config
            assert "access" in manager._config
            assert "paths" in manager._config
    
    def test_defaults(self):
        """Default quota limits and origin headers."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager()
        
        access = manager.get_access_config()
        assert access.daily_view_limit == 5
        assert access.guest_daily_limit == 5
        assert access.origin_headers[0] == "X-Forwarded-For"
        assert access.tz_offset_cookie == "tz_offset_min"
        assert manager.get_app_config().admin_user_ids == []
    
    def test_load_config_from_file(self):
        """Test loading configuration from existing file."""
        test_config = {
            "app": {
                "host": "localhost",
                "port": 8080,
                "debug": True,
                "admin_user_ids": ["admin1", "admin2"]
            },
            "access": {
                "daily_view_limit": 3
            }
        }
        
        with patch('builtins.open', mock_open(read_data=json.dumps(test_config))):
            with patch('config_manager.Path') as mock_path:
                mock_path.return_value.exists.return_value = True
                with patch.dict(os.environ, {}, clear=True):
                    manager = ConfigManager()
                    
                    assert manager._config["app"]["host"] == "localhost"
                    assert manager._config["app"]["admin_user_ids"] == ["admin1", "admin2"]
                    assert manager._config["access"]["daily_view_limit"] == 3
                    # Keys missing from the file keep their defaults
                    assert manager._config["access"]["guest_daily_limit"] == 5
                    assert manager._config["app"]["secret_key"]
    
    def test_invalid_file_keeps_defaults(self):
        """A broken config file is ignored."""
        with patch('builtins.open', mock_open(read_data="{not json")):
            with patch('config_manager.Path') as mock_path:
                mock_path.return_value.exists.return_value = True
                with patch.dict(os.environ, {}, clear=True):
                    manager = ConfigManager()
        
        assert manager.get_access_config().daily_view_limit == 5
    
    def test_override_with_env_variables(self):
        """Test that environment variables override config file values."""
        env_vars = {
            "APP_HOST": "127.0.0.1",
            "APP_PORT": "9000",
            "APP_DEBUG": "true",
            "APP_SECRET_KEY": "s3cret",
            "ADMIN_USER_IDS": "alice, bob,,",
            "DAILY_VIEW_LIMIT": "7",
            "GUEST_DAILY_LIMIT": "2",
            "ORIGIN_HEADERS": "CF-Connecting-IP,X-Real-IP",
            "DATA_DIR": "/tmp/wiki-data",
        }
        
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, env_vars, clear=True):
                manager = ConfigManager()
        
        app_config = manager.get_app_config()
        assert app_config.host == "127.0.0.1"
        assert app_config.port == 9000
        assert app_config.debug is True
        assert app_config.secret_key == "s3cret"
        assert app_config.admin_user_ids == ["alice", "bob"]
        
        access = manager.get_access_config()
        assert access.daily_view_limit == 7
        assert access.guest_daily_limit == 2
        assert access.origin_headers == ["CF-Connecting-IP", "X-Real-IP"]
        
        assert manager.get_paths_config().data_dir == "/tmp/wiki-data"
    
    def test_get_config(self):
        """Test getting raw configuration dictionary."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            manager = ConfigManager()
            
            test_config = {"test": "value"}
            manager._config = test_config
            
            config = manager.get_config()
            
            assert config == test_config
            assert config is not manager._config  # Should be a copy
    
    def test_reload_config(self):
        """Test reloading configuration."""
        with patch('config_manager.Path') as mock_path:
            mock_path.return_value.exists.return_value = False
            with patch.dict(os.environ, {}, clear=True):
                manager = ConfigManager()
                
                original_config = json.loads(json.dumps(manager._config))
                manager._config["test"] = "modified"
                manager.reload()
            
            assert "test" not in manager._config
            assert manager._config == original_config


class TestConfigIntegration:
    """Test configuration with real files."""
    
    def test_config_with_real_file(self, tmp_path):
        """Test configuration with a real temporary file."""
        config_file = tmp_path / "test_config.json"
        config_file.write_text(json.dumps({
            "app": {"port": 9999, "admin_user_ids": ["test-admin"]},
            "access": {"guest_daily_limit": 1},
            "paths": {"data_dir": "wiki_data"}
        }), encoding="utf-8")
        
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))
        
        assert manager.get_app_config().port == 9999
        assert manager.get_app_config().admin_user_ids == ["test-admin"]
        assert manager.get_access_config().guest_daily_limit == 1
        assert manager.get_paths_config().data_dir == "wiki_data"
    
    def test_save_and_reload(self, tmp_path):
        """Saved configuration is read back unchanged."""
        config_file = tmp_path / "saved.json"
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))
            manager._config["access"]["daily_view_limit"] = 11
            manager.save_config()
            
            reloaded = ConfigManager(str(config_file))
        
        assert reloaded.get_access_config().daily_view_limit == 11


class TestGlobalFunctions:
    """Test the global configuration functions."""
    
    def test_get_app_config_global(self):
        config = get_app_config()
        
        assert isinstance(config, AppConfig)
        assert hasattr(config, 'secret_key')
        assert hasattr(config, 'admin_user_ids')
    
    def test_get_access_config_global(self):
        config = get_access_config()
        
        assert isinstance(config, AccessConfig)
        assert config.daily_view_limit > 0
        assert config.guest_daily_limit > 0
    
    def test_get_paths_config_global(self):
        config = get_paths_config()
        
        assert isinstance(config, PathsConfig)
        assert config.data_dir
    
    def test_reload_config_global(self):
        """Test global reload_config function."""
        # Should not raise any exceptions
        reload_config()
