import pytest

from ffmpeg_installer.core import registry as registry_module
from ffmpeg_installer.core.errors import NoDownloadSourceError
from ffmpeg_installer.core.registry import (
    DEFAULT_REGISTRY,
    DOWNLOAD_SOURCES,
    SUPPORTED_PLATFORMS,
    DownloadSource,
    PlatformRegistry,
    mirror_registry,
)


def test_identifiers_are_unique():
    identifiers = DEFAULT_REGISTRY.identifiers()
    assert len(identifiers) == len(set(identifiers)) == 8


def test_every_supported_platform_has_a_source():
    for info in SUPPORTED_PLATFORMS:
        assert DEFAULT_REGISTRY.source_for(info.identifier) is DOWNLOAD_SOURCES[info.identifier]


def test_duplicate_identifier_is_rejected():
    with pytest.raises(ValueError):
        PlatformRegistry(SUPPORTED_PLATFORMS + SUPPORTED_PLATFORMS[:1], {})


def test_lookup_by_platform_and_arch():
    info = DEFAULT_REGISTRY.lookup('linux', 'arm64')
    assert info.identifier == 'linux-arm64'
    assert info.binary_name == {'ffmpeg': 'ffmpeg', 'ffprobe': 'ffprobe'}
    assert DEFAULT_REGISTRY.lookup('freebsd', 'x64') is None


def test_lookup_by_identifier():
    info = DEFAULT_REGISTRY.lookup_identifier('win32-ia32')
    assert info.is_windows
    assert info.binary_name['ffprobe'] == 'ffprobe.exe'
    assert DEFAULT_REGISTRY.lookup_identifier('freebsd-x64') is None


def test_missing_source_raises():
    reg = PlatformRegistry(SUPPORTED_PLATFORMS, {})
    with pytest.raises(NoDownloadSourceError, match="linux-x64"):
        reg.source_for('linux-x64')


@pytest.mark.parametrize("system, machine, expected", [
    ("Linux", "x86_64", "linux-x64"),
    ("Linux", "aarch64", "linux-arm64"),
    ("Linux", "armv7l", "linux-arm"),
    ("Windows", "AMD64", "win32-x64"),
    ("Darwin", "arm64", "darwin-arm64"),
])
def test_current_platform_detection(monkeypatch, system, machine, expected):
    monkeypatch.setattr(registry_module.platform, "system", lambda: system)
    monkeypatch.setattr(registry_module.platform, "machine", lambda: machine)
    assert DEFAULT_REGISTRY.current().identifier == expected


def test_current_platform_unsupported(monkeypatch):
    monkeypatch.setattr(registry_module.platform, "system", lambda: "FreeBSD")
    monkeypatch.setattr(registry_module.platform, "machine", lambda: "amd64")
    assert DEFAULT_REGISTRY.current() is None


def test_darwin_ships_ffprobe_separately():
    source = DEFAULT_REGISTRY.source_for('darwin-arm64')
    assert source.path_for('ffprobe') is None
    assert source.secondary_download.path == 'ffprobe'


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        DownloadSource(url='https://example.com/x.rar', format='rar',
                       ffmpeg_path='ffmpeg', ffprobe_path=None, version='1')


def test_mirror_registry_points_at_release_assets():
    reg = mirror_registry('https://example.com/releases/v1.0.0/', 'v1.0.0')
    source = reg.source_for('win32-x64')
    assert source.format == 'binary'
    assert source.url == 'https://example.com/releases/v1.0.0/win32-x64-ffmpeg.exe'
    assert source.secondary_download.url == 'https://example.com/releases/v1.0.0/win32-x64-ffprobe.exe'
    assert source.version == 'v1.0.0'
