import json
import os

from conftest import FakeSession, make_tar
from ffmpeg_installer.core.registry import SUPPORTED_PLATFORMS, DownloadSource, PlatformRegistry, mirror_registry
from ffmpeg_installer.core.release import collect_assets, prepare_release, release_asset_name

X64_URL = "https://example.com/amd64.tar.xz"
ARM_URL = "https://example.com/arm64.tar.xz"

REGISTRY = PlatformRegistry(SUPPORTED_PLATFORMS, {
    'linux-x64': DownloadSource(url=X64_URL, format='tar.xz', ffmpeg_path='ffmpeg',
                                ffprobe_path='ffprobe', version='release'),
    'linux-arm64': DownloadSource(url=ARM_URL, format='tar.xz', ffmpeg_path='ffmpeg',
                                  ffprobe_path='ffprobe', version='release'),
})


def test_prepare_release_continues_past_failures(tmp_path):
    out = tmp_path / "binaries"
    session = FakeSession({X64_URL: make_tar({"static/ffmpeg": b"a", "static/ffprobe": b"b"}), ARM_URL: 502})

    results = prepare_release(str(out), registry=REGISTRY, identifiers=['linux-x64', 'linux-arm64', 'linux-arm'],
                              session=session)

    assert results['linux-x64'].ok
    assert set(results['linux-arm64'].failed) == {'ffmpeg', 'ffprobe'}
    assert "linux-arm" in results['linux-arm']
    manifest = json.loads((out / "config.json").read_text(encoding="utf-8"))
    assert list(manifest["platforms"]) == ['linux-x64']


def test_clean_empties_output(tmp_path):
    out = tmp_path / "binaries"
    (out / "stale").mkdir(parents=True)

    prepare_release(str(out), registry=REGISTRY, identifiers=[], clean=True, session=FakeSession())
    assert list(out.iterdir()) == []


def test_asset_names_match_the_mirror_registry(tmp_path):
    out = tmp_path / "binaries"
    for identifier, name in [('linux-x64', 'ffmpeg'), ('win32-x64', 'ffprobe.exe')]:
        os.makedirs(out / identifier, exist_ok=True)
        (out / identifier / name).write_bytes(b"x")
    (out / "config.json").write_text("{}", encoding="utf-8")

    assets = collect_assets(str(out))

    assert [name for _, name in assets] == ['linux-x64-ffmpeg', 'win32-x64-ffprobe.exe']
    mirror = mirror_registry("https://example.com/dl", "v1")
    assert mirror.source_for('linux-x64').url.endswith("/" + release_asset_name('linux-x64', 'ffmpeg'))
    assert mirror.source_for('win32-x64').secondary_download.url.endswith("/win32-x64-ffprobe.exe")
