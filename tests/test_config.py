import importlib
import os
import sys

import pytest

from ffmpeg_installer.core import registry as registry_module
from ffmpeg_installer.utils import config

ENV_VARS = (
    'FFMPEG_INSTALLER_HOME',
    'FFMPEG_INSTALLER_STORAGE',
    'FFMPEG_INSTALLER_TIMEOUT',
    'XDG_DATA_HOME',
)


@pytest.fixture
def reload_config(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    def _reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)

    yield _reload

    monkeypatch.undo()
    importlib.reload(config)


def test_home_variable_wins(reload_config, tmp_path):
    cfg = reload_config(FFMPEG_INSTALLER_HOME=str(tmp_path), FFMPEG_INSTALLER_STORAGE="package")

    assert cfg.DATA_DIR == str(tmp_path)
    assert cfg.BIN_DIR == os.path.join(str(tmp_path), "binaries")
    assert cfg.CONFIG_FILE == os.path.join(str(tmp_path), "config.json")


def test_package_storage(reload_config):
    cfg = reload_config(FFMPEG_INSTALLER_STORAGE="package")

    assert cfg.DATA_DIR == cfg.PACKAGE_DIR
    assert cfg.BIN_DIR == os.path.join(cfg.PACKAGE_DIR, "binaries")
    assert cfg.CONFIG_FILE == os.path.join(cfg.PACKAGE_DIR, "config.json")


@pytest.mark.skipif(os.name == 'nt' or sys.platform == 'darwin', reason="XDG layout")
def test_user_storage_follows_xdg(reload_config, tmp_path):
    cfg = reload_config(XDG_DATA_HOME=str(tmp_path))

    assert cfg.DATA_DIR == os.path.join(str(tmp_path), "ffmpeg-installer")
    assert cfg.CONFIG_FILE == os.path.join(str(tmp_path), "ffmpeg-installer", "config.json")


@pytest.mark.skipif(os.name == 'nt' or sys.platform == 'darwin', reason="XDG layout")
def test_user_storage_defaults_to_local_share(reload_config):
    cfg = reload_config()
    assert cfg.DATA_DIR == os.path.join(os.path.expanduser("~"), ".local", "share", "ffmpeg-installer")


def test_read_timeout_from_environment(reload_config):
    assert reload_config().REQUEST_TIMEOUT == (10, 60.0)
    assert reload_config(FFMPEG_INSTALLER_TIMEOUT="2.5").REQUEST_TIMEOUT == (10, 2.5)


def test_default_registry_uses_mirror_when_configured(monkeypatch):
    base = "https://example.com/releases/download/v2.0.0"
    monkeypatch.setattr(registry_module, "MIRROR_URL", base)
    monkeypatch.setattr(registry_module, "MIRROR_VERSION", "v2.0.0")

    registry = registry_module.default_registry()

    source = registry.source_for('linux-x64')
    assert source.format == 'binary'
    assert source.url == f"{base}/linux-x64-ffmpeg"
    assert source.version == 'v2.0.0'
    assert registry.identifiers() == registry_module.DEFAULT_REGISTRY.identifiers()


def test_default_registry_without_mirror(monkeypatch):
    monkeypatch.setattr(registry_module, "MIRROR_URL", None)
    assert registry_module.default_registry() is registry_module.DEFAULT_REGISTRY
