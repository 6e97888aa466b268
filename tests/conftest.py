"""
Pytest configuration for the Shell Gateway tests.
Every test runs against a private home, data root and config file.
"""

import os

import pytest

from shellgate.config import Config
from shellgate.gateway import ShellGateway
from shellgate.session import create_session
from shellgate.utils.logger import reset_security_rate_limits, set_global_config


def pytest_configure(config):
    """Configure pytest - set up test environment variables."""
    os.environ['SHELLGATE_TEST_MODE'] = '1'


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point HOME, SHELLGATE_ROOT and SHELLGATE_CONFIG into tmp_path."""
    home = tmp_path / "user"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("SHELLGATE_ROOT", str(tmp_path / "root"))
    monkeypatch.setenv("SHELLGATE_CONFIG", str(tmp_path / "config.json"))

    # Fresh logging state; security events are rate limited per type
    set_global_config({})
    reset_security_rate_limits()
    yield
    set_global_config({})
    reset_security_rate_limits()


@pytest.fixture
def root_dir(tmp_path):
    """App-private data directory."""
    return tmp_path / "root"


@pytest.fixture
def session(root_dir):
    """Session positioned in a freshly created home directory."""
    return create_session(root_dir)


@pytest.fixture
def config(tmp_path):
    """Config backed by a file under tmp_path."""
    return Config(str(tmp_path / "config.json"))


@pytest.fixture
def gateway(config):
    """Gateway built from the test config."""
    return ShellGateway(config)
