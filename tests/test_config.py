# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for environment configuration and logging setup."""

import logging
import os
from pathlib import Path

import pytest

from appmenu.config import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_SCAN_ROOTS,
    AppMenuConfig,
    get_bool,
    get_int,
    get_paths,
)
from appmenu.exceptions import ConfigError
from appmenu.log import LOGGER_NAME, setup_logging

ENV_KEYS = ('APPMENU_SUPPORT_DIR', 'APPMENU_DEBOUNCE_MS', 'APPMENU_SCAN_ROOTS', 'APPMENU_LOG_LEVEL')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # keep find_dotenv() away from any .env above the test directory
    monkeypatch.chdir(tmp_path)


class TestGetters:
    """Tests for typed environment getters."""

    def test_get_bool(self, monkeypatch):
        """Test truthy spellings."""
        for value in ('true', '1', 'YES', 'y'):
            monkeypatch.setenv('APPMENU_FLAG', value)
            assert get_bool('APPMENU_FLAG') is True
        monkeypatch.setenv('APPMENU_FLAG', 'off')
        assert get_bool('APPMENU_FLAG') is False

    def test_get_int(self, monkeypatch):
        """Test integer parsing and errors."""
        assert get_int('APPMENU_MISSING', 7) == 7
        monkeypatch.setenv('APPMENU_N', '42')
        assert get_int('APPMENU_N') == 42
        monkeypatch.setenv('APPMENU_N', 'many')
        with pytest.raises(ConfigError):
            get_int('APPMENU_N')

    def test_get_paths(self, monkeypatch):
        """Test path list splitting."""
        assert get_paths('APPMENU_SCAN_ROOTS', ('/x',)) == ('/x',)
        monkeypatch.setenv('APPMENU_SCAN_ROOTS', os.pathsep.join(['/a', '', '/b']))
        assert get_paths('APPMENU_SCAN_ROOTS') == ('/a', '/b')


class TestAppMenuConfig:
    """Tests for AppMenuConfig.from_env()."""

    def test_defaults(self):
        """Test values when nothing is set."""
        config = AppMenuConfig.from_env()
        assert config.debounce_ms == DEFAULT_DEBOUNCE_MS
        assert config.debounce == pytest.approx(0.15)
        assert config.scan_roots == DEFAULT_SCAN_ROOTS
        assert config.log_level == 'WARNING'
        assert config.items_path.name == 'items.json'
        assert config.settings_path.parent == config.support_dir

    def test_from_environment(self, monkeypatch, tmp_path):
        """Test explicit environment values."""
        monkeypatch.setenv('APPMENU_SUPPORT_DIR', str(tmp_path / 'support'))
        monkeypatch.setenv('APPMENU_DEBOUNCE_MS', '10')
        monkeypatch.setenv('APPMENU_SCAN_ROOTS', '/Apps')
        monkeypatch.setenv('APPMENU_LOG_LEVEL', 'debug')
        config = AppMenuConfig.from_env()
        assert config.support_dir == tmp_path / 'support'
        assert config.items_path == tmp_path / 'support' / 'items.json'
        assert config.debounce == pytest.approx(0.01)
        assert config.scan_roots == ('/Apps',)
        assert config.log_level == 'DEBUG'

    def test_dotenv_file(self, tmp_path):
        """Test values loaded from a .env file."""
        env_file = tmp_path / 'custom.env'
        env_file.write_text(f"APPMENU_SUPPORT_DIR={tmp_path / 'fromenv'}\nAPPMENU_DEBOUNCE_MS=25\n")
        try:
            config = AppMenuConfig.from_env(str(env_file))
            assert config.support_dir == Path(tmp_path / 'fromenv')
            assert config.debounce_ms == 25
        finally:
            for key in ENV_KEYS:
                os.environ.pop(key, None)

    def test_negative_debounce_rejected(self, monkeypatch):
        """Test validation of the debounce delay."""
        monkeypatch.setenv('APPMENU_DEBOUNCE_MS', '-1')
        with pytest.raises(ConfigError):
            AppMenuConfig.from_env()


class TestLogging:
    """Tests for setup_logging()."""

    def test_single_handler(self):
        """Test that repeated setup does not duplicate handlers."""
        setup_logging('INFO')
        logger = setup_logging('DEBUG')
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back(self):
        """Test an invalid level name."""
        logger = setup_logging('LOUD')
        assert logger.level == logging.WARNING
