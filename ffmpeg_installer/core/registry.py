import platform
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ffmpeg_installer.core.errors import NoDownloadSourceError
from ffmpeg_installer.utils.config import MIRROR_URL, MIRROR_VERSION

BINARY_KINDS = ("ffmpeg", "ffprobe")

ARCHIVE_FORMATS = ("zip", "tar.gz", "tar.xz")
FORMATS = ARCHIVE_FORMATS + ("binary", "aar", "pkg")

# platform.system() -> platform tag used in identifiers
_SYSTEMS = {
    'windows': 'win32',
    'darwin': 'darwin',
    'linux': 'linux',
}

# platform.machine() -> architecture tag used in identifiers
_MACHINES = {
    'x86_64': 'x64',
    'amd64': 'x64',
    'x64': 'x64',
    'i386': 'ia32',
    'i686': 'ia32',
    'x86': 'ia32',
    'aarch64': 'arm64',
    'arm64': 'arm64',
    'armv6l': 'arm',
    'armv7l': 'arm',
    'arm': 'arm',
}


@dataclass(frozen=True)
class PlatformInfo:
    platform: str
    arch: str
    identifier: str
    binary_name: Dict[str, str]

    @property
    def is_windows(self) -> bool:
        return self.identifier.startswith('win32')


@dataclass(frozen=True)
class SecondaryDownload:
    """Second archive for platforms that ship ffmpeg and ffprobe separately."""
    url: str
    format: str
    path: str


@dataclass(frozen=True)
class DownloadSource:
    url: str
    format: str
    ffmpeg_path: Optional[str]
    ffprobe_path: Optional[str]
    version: str
    secondary_download: Optional[SecondaryDownload] = None
    # e.g. {"headers": {...}} or {"arch": "arm64"}
    options: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self):
        if self.format not in FORMATS:
            raise ValueError(f"Unknown download format: {self.format}")
        if self.secondary_download and self.secondary_download.format not in FORMATS:
            raise ValueError(f"Unknown download format: {self.secondary_download.format}")

    def path_for(self, kind) -> Optional[str]:
        return self.ffmpeg_path if kind == 'ffmpeg' else self.ffprobe_path

    @property
    def headers(self):
        return dict(self.options.get('headers') or {})


def _platform(system, arch):
    ext = '.exe' if system == 'win32' else ''
    return PlatformInfo(
        platform=system,
        arch=arch,
        identifier=f"{system}-{arch}",
        binary_name={'ffmpeg': f"ffmpeg{ext}", 'ffprobe': f"ffprobe{ext}"},
    )


def detect_host() -> Tuple[str, str]:
    """Returns the (platform, arch) tags of the running interpreter."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return _SYSTEMS.get(system, system), _MACHINES.get(machine, machine)


class PlatformRegistry:
    """
    Immutable lookup table: supported (platform, arch) pairs and the download
    source for each platform identifier.
    """

    def __init__(self, platforms, sources):
        self._platforms = tuple(platforms)
        self._sources = dict(sources)

        seen = set()
        for info in self._platforms:
            if info.identifier in seen:
                raise ValueError(f"Duplicate platform identifier: {info.identifier}")
            seen.add(info.identifier)

    @property
    def platforms(self):
        return self._platforms

    def identifiers(self):
        return [p.identifier for p in self._platforms]

    def lookup(self, system, arch) -> Optional[PlatformInfo]:
        for info in self._platforms:
            if info.platform == system and info.arch == arch:
                return info
        return None

    def lookup_identifier(self, identifier) -> Optional[PlatformInfo]:
        for info in self._platforms:
            if info.identifier == identifier:
                return info
        return None

    def current(self) -> Optional[PlatformInfo]:
        return self.lookup(*detect_host())

    def has_source(self, identifier) -> bool:
        return identifier in self._sources

    def source_for(self, identifier) -> DownloadSource:
        source = self._sources.get(identifier)
        if source is None:
            raise NoDownloadSourceError(identifier)
        return source


SUPPORTED_PLATFORMS = (
    _platform('win32', 'x64'),
    _platform('win32', 'ia32'),
    _platform('darwin', 'x64'),
    _platform('darwin', 'arm64'),
    _platform('linux', 'x64'),
    _platform('linux', 'ia32'),
    _platform('linux', 'arm'),
    _platform('linux', 'arm64'),
)

# Third-party builds. These hosts move their files around now and then, so
# treat the table as data and override it with a mirror when needed.
_EVERMEET_FFPROBE = SecondaryDownload(
    url='https://evermeet.cx/ffmpeg/ffprobe-7.0.2.zip',
    format='zip',
    path='ffprobe',
)

DOWNLOAD_SOURCES = {
    'win32-x64': DownloadSource(
        url='https://github.com/BtbN/FFmpeg-Builds/releases/download/latest/ffmpeg-master-latest-win64-gpl.zip',
        format='zip',
        ffmpeg_path='bin/ffmpeg.exe',
        ffprobe_path='bin/ffprobe.exe',
        version='latest',
    ),
    'win32-ia32': DownloadSource(
        url='https://github.com/GyanD/codexffmpeg/releases/download/6.1.1/ffmpeg-6.1.1-essentials_build.zip',
        format='zip',
        ffmpeg_path='bin/ffmpeg.exe',
        ffprobe_path='bin/ffprobe.exe',
        version='6.1.1',
    ),
    # evermeet ships ffprobe in its own archive
    'darwin-x64': DownloadSource(
        url='https://evermeet.cx/ffmpeg/ffmpeg-7.0.2.zip',
        format='zip',
        ffmpeg_path='ffmpeg',
        ffprobe_path=None,
        version='7.0.2',
        secondary_download=_EVERMEET_FFPROBE,
    ),
    'darwin-arm64': DownloadSource(
        url='https://evermeet.cx/ffmpeg/ffmpeg-7.0.2.zip',
        format='zip',
        ffmpeg_path='ffmpeg',
        ffprobe_path=None,
        version='7.0.2',
        secondary_download=_EVERMEET_FFPROBE,
        options={'arch': 'arm64'},
    ),
    'linux-x64': DownloadSource(
        url='https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-amd64-static.tar.xz',
        format='tar.xz',
        ffmpeg_path='ffmpeg',
        ffprobe_path='ffprobe',
        version='release',
    ),
    'linux-ia32': DownloadSource(
        url='https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-i686-static.tar.xz',
        format='tar.xz',
        ffmpeg_path='ffmpeg',
        ffprobe_path='ffprobe',
        version='release',
    ),
    'linux-arm': DownloadSource(
        url='https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-armhf-static.tar.xz',
        format='tar.xz',
        ffmpeg_path='ffmpeg',
        ffprobe_path='ffprobe',
        version='release',
    ),
    'linux-arm64': DownloadSource(
        url='https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-arm64-static.tar.xz',
        format='tar.xz',
        ffmpeg_path='ffmpeg',
        ffprobe_path='ffprobe',
        version='release',
    ),
}

DEFAULT_REGISTRY = PlatformRegistry(SUPPORTED_PLATFORMS, DOWNLOAD_SOURCES)


def mirror_registry(base_url, version, platforms=SUPPORTED_PLATFORMS):
    """
    Registry that downloads single pre-processed binaries from our own
    release host. Assets are named "<identifier>-<binary name>", the layout
    produced by `ffmpeg-installer-release`.
    """
    base_url = base_url.rstrip('/')
    sources = {}
    for info in platforms:
        ffmpeg_name = info.binary_name['ffmpeg']
        ffprobe_name = info.binary_name['ffprobe']
        sources[info.identifier] = DownloadSource(
            url=f"{base_url}/{info.identifier}-{ffmpeg_name}",
            format='binary',
            ffmpeg_path=ffmpeg_name,
            ffprobe_path=None,
            version=version,
            secondary_download=SecondaryDownload(
                url=f"{base_url}/{info.identifier}-{ffprobe_name}",
                format='binary',
                path=ffprobe_name,
            ),
        )
    return PlatformRegistry(platforms, sources)


def default_registry():
    if MIRROR_URL:
        return mirror_registry(MIRROR_URL, MIRROR_VERSION)
    return DEFAULT_REGISTRY
