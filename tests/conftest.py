import io
import os
import tarfile
import zipfile

import pytest
import requests

from ffmpeg_installer.core.config_store import ConfigStore
from ffmpeg_installer.core.downloader import BinaryInstaller
from ffmpeg_installer.core.paths import PathResolver
from ffmpeg_installer.core.registry import SUPPORTED_PLATFORMS, PlatformRegistry


class FakeResponse:
    def __init__(self, url, status_code=200, body=b"", headers=None):
        self.url = url
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]


class FakeSession:
    """
    Stands in for requests.Session. Routes map a URL to bytes (200 with a
    content-length), an int status code, or an exception to raise.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, stream=False, headers=None, timeout=None):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return FakeResponse(url, status_code=route)
        return FakeResponse(url, body=route, headers={'content-length': str(len(route))})


def make_zip(files):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w') as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


def make_tar(files, mode='w:xz'):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def is_executable(path):
    return os.stat(path).st_mode & 0o111 == 0o111


@pytest.fixture
def make_env(tmp_path):
    """Builds (installer, session, resolver, store) around a custom source table."""

    def _make(sources, routes=None, platforms=SUPPORTED_PLATFORMS):
        registry = PlatformRegistry(platforms, sources)
        resolver = PathResolver(
            binaries_root=str(tmp_path / "binaries"),
            config_file=str(tmp_path / "config.json"),
            registry=registry,
        )
        store = ConfigStore(resolver.config_path())
        session = FakeSession(routes)
        installer = BinaryInstaller(registry, resolver, store, session=session)
        return installer, session, resolver, store

    return _make
