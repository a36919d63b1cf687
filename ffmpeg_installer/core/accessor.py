import os
from dataclasses import dataclass
from typing import Optional

from ffmpeg_installer.core.config_store import ConfigStore
from ffmpeg_installer.core.errors import InstallerError, UnsupportedPlatformError
from ffmpeg_installer.core.paths import PathResolver
from ffmpeg_installer.core.registry import BINARY_KINDS, default_registry, detect_host
from ffmpeg_installer.utils.logger import log


@dataclass(frozen=True)
class BinaryInfo:
    path: str
    version: str
    url: str


@dataclass(frozen=True)
class FFmpegInstallation:
    platform: str
    arch: str
    ffmpeg: Optional[BinaryInfo] = None
    ffprobe: Optional[BinaryInfo] = None


def get_installed_binaries(registry=None, resolver=None, store=None, platform_info=None) -> FFmpegInstallation:
    """
    Looks up the binaries installed for the running platform.

    Raises InstallerError when the platform is unsupported or nothing was
    installed for it. A recorded binary whose file has since disappeared is
    reported as None rather than raising.
    """
    registry = registry or default_registry()
    resolver = resolver or PathResolver(registry=registry)
    store = store or ConfigStore(resolver.config_path())

    current = platform_info or registry.current()
    if current is None:
        raise UnsupportedPlatformError("-".join(detect_host()))

    if not os.path.exists(store.path):
        raise InstallerError("FFmpeg binaries are not installed. Please run the installation script.")

    entry = store.read().platforms.get(current.identifier)
    if entry is None or (entry.ffmpeg is None and entry.ffprobe is None):
        raise InstallerError(
            f"FFmpeg binaries for {current.identifier} are not installed. Please run the installation script."
        )

    found = {}
    for kind in BINARY_KINDS:
        recorded = entry.get(kind)
        if recorded is None:
            continue
        path = resolver.resolve_relative(current.identifier, recorded.relative_path)
        if not os.path.isfile(path):
            log.warning(f"{kind} binary not found at {path}. Please reinstall.")
            continue
        found[kind] = BinaryInfo(path=path, version=recorded.version, url=recorded.url)

    return FFmpegInstallation(platform=current.platform, arch=current.arch, **found)
