import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from typing import Dict, List

import requests

from ffmpeg_installer.core.archive import extract_archive, find_binary, make_executable
from ffmpeg_installer.core.config_store import ConfigBinaryInfo, ConfigStore
from ffmpeg_installer.core.errors import (
    BinaryNotFoundError,
    DownloadError,
    InstallerError,
    ManualInstallationRequired,
    PlacementError,
    UnsupportedPlatformError,
)
from ffmpeg_installer.core.paths import PathResolver
from ffmpeg_installer.core.registry import BINARY_KINDS, default_registry
from ffmpeg_installer.utils.config import CHUNK_SIZE, PROGRESS_INTERVAL, REQUEST_TIMEOUT
from ffmpeg_installer.utils.logger import log


@dataclass
class InstallReport:
    """Outcome of one install run. Each requested kind ends up in exactly one bucket."""
    identifier: str
    installed: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def fetch(url, dest, session=None, headers=None, progress_callback=None, timeout=REQUEST_TIMEOUT):
    """
    Streams url into dest.

    The body goes to "<dest>.part" first and is only renamed once complete, so
    a failed transfer never leaves a truncated file at dest.

    Args:
        progress_callback (function): Optional callback(url, downloaded_bytes, total_bytes_or_None),
            called at most every PROGRESS_INTERVAL seconds plus once at the end.
    """
    session = session or requests
    part_path = dest + ".part"
    log.info(f"Downloading {url}...")

    try:
        with session.get(url, stream=True, headers=headers or None, timeout=timeout) as r:
            r.raise_for_status()
            total = r.headers.get('content-length')
            total = int(total) if total and str(total).isdigit() else None

            downloaded = 0
            last_update = 0.0
            with open(part_path, 'wb') as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    downloaded += len(chunk)
                    if progress_callback:
                        now = time.monotonic()
                        if now - last_update >= PROGRESS_INTERVAL:
                            progress_callback = _notify(progress_callback, url, downloaded, total)
                            last_update = now

        if progress_callback:
            _notify(progress_callback, url, downloaded, total)
        os.replace(part_path, dest)
    except requests.RequestException as e:
        _remove_partial(part_path)
        raise DownloadError(url, e) from e
    except OSError as e:
        _remove_partial(part_path)
        raise PlacementError(dest, f"Failed to write download ({e})") from e

    log.info(f"Download complete ({downloaded} bytes).")
    return dest


def _notify(progress_callback, url, downloaded, total):
    """Calls the progress callback. Returns None if it raised, so the caller stops reporting."""
    try:
        progress_callback(url, downloaded, total)
    except Exception as e:
        log.warning(f"Progress callback failed, no further progress for {url}: {e}")
        return None
    return progress_callback


def _remove_partial(path):
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError as e:
        log.warning(f"Could not remove partial download {path}: {e}")


def kind_of(filename):
    """Which binary a file name belongs to, by substring, or None."""
    name = os.path.basename(filename).lower()
    if 'ffprobe' in name:
        return 'ffprobe'
    if 'ffmpeg' in name:
        return 'ffmpeg'
    return None


class BinaryInstaller:
    """
    Downloads, extracts and places ffmpeg/ffprobe for one platform, then
    records each placed binary in the config store.

    Kinds are handled independently: a failure for one kind is recorded in
    the report and does not undo or stop the other.
    """

    def __init__(self, registry=None, resolver=None, store=None, session=None, progress_callback=None):
        self.registry = registry or default_registry()
        self.resolver = resolver or PathResolver(registry=self.registry)
        self.store = store or ConfigStore(self.resolver.config_path())
        self.session = session or requests.Session()
        self.progress_callback = progress_callback

    def install(self, identifier, kinds=BINARY_KINDS) -> InstallReport:
        for kind in kinds:
            if kind not in BINARY_KINDS:
                raise ValueError(f"Unknown binary kind: {kind}")

        info = self.registry.lookup_identifier(identifier)
        if info is None:
            raise UnsupportedPlatformError(identifier)
        source = self.registry.source_for(identifier)

        report = InstallReport(identifier)
        primary, secondary = self._plan(source, [k for k in BINARY_KINDS if k in kinds], report)
        if not primary and not secondary:
            return report

        platform_dir = self.resolver.platform_dir(identifier)
        try:
            os.makedirs(platform_dir, exist_ok=True)
        except OSError as e:
            raise PlacementError(platform_dir, f"Failed to create directory ({e})") from e

        work_dir = tempfile.mkdtemp(prefix=".staging-", dir=platform_dir)
        log.info(f"Installing {', '.join(primary + secondary)} for {identifier}...")
        try:
            if primary:
                self._install_from(
                    info, source, source.url, source.format,
                    os.path.join(work_dir, "primary"),
                    {kind: source.path_for(kind) for kind in primary},
                    report,
                )
            if secondary:
                extra = source.secondary_download
                log.info("Processing secondary download...")
                self._install_from(
                    info, source, extra.url, extra.format,
                    os.path.join(work_dir, "secondary"),
                    {kind: extra.path for kind in secondary},
                    report,
                )
        finally:
            self._cleanup(work_dir)

        if report.installed:
            log.info(f"Installed {', '.join(report.installed)} for {identifier}")
        return report

    def _plan(self, source, kinds, report):
        """Splits the requested kinds by which download provides them."""
        primary, secondary = [], []
        extra = source.secondary_download
        for kind in kinds:
            if source.path_for(kind):
                primary.append(kind)
            elif extra and kind_of(extra.path) == kind:
                secondary.append(kind)
            else:
                log.warning(f"No {kind} build is published for {report.identifier}, skipping it")
                report.skipped.append(kind)
        return primary, secondary

    def _install_from(self, info, source, url, fmt, stage_dir, wanted, report):
        # Raw binary downloads are saved under their declared name so the
        # locate step below treats them like a one-file archive.
        raw_name = next((p for p in wanted.values() if p), None)
        try:
            payload_dir = self._acquire(url, fmt, stage_dir, source.headers, raw_name)
        except InstallerError as e:
            for kind in wanted:
                log.error(f"Failed to install {kind} for {info.identifier}: {e}")
                report.failed[kind] = str(e)
            return

        for kind, declared in wanted.items():
            try:
                located = self._locate(info, payload_dir, kind, declared)
                dest = self._place(info, kind, located)
                self.store.upsert(info.identifier, kind, ConfigBinaryInfo(
                    version=source.version,
                    url=url,
                    relative_path=os.path.basename(dest),
                ))
                report.installed[kind] = dest
            except OSError as e:
                log.error(f"Failed to record {kind} for {info.identifier}: {e}")
                report.failed[kind] = f"Failed to update config file: {e}"
            except InstallerError as e:
                log.error(f"Failed to install {kind} for {info.identifier}: {e}")
                report.failed[kind] = str(e)

    def _acquire(self, url, fmt, stage_dir, headers, raw_name):
        if fmt in ('aar', 'pkg'):
            raise ManualInstallationRequired(fmt)

        try:
            os.makedirs(stage_dir, exist_ok=True)
        except OSError as e:
            raise PlacementError(stage_dir, f"Failed to create directory ({e})") from e

        if fmt == 'binary':
            fetch(url, os.path.join(stage_dir, os.path.basename(raw_name or url)),
                  session=self.session, headers=headers, progress_callback=self.progress_callback)
            return stage_dir

        archive_path = f"{stage_dir}.{fmt}"
        fetch(url, archive_path, session=self.session, headers=headers,
              progress_callback=self.progress_callback)
        extract_archive(archive_path, stage_dir, fmt)
        return stage_dir

    def _locate(self, info, payload_dir, kind, declared):
        if declared:
            exact = os.path.normpath(os.path.join(payload_dir, declared))
            if os.path.isfile(exact):
                return exact

        name = os.path.basename(declared) if declared else info.binary_name[kind]
        if info.is_windows and not name.lower().endswith('.exe'):
            name = f"{name}.exe"

        log.info(f"Searching for {name} in extracted files...")
        found = find_binary(payload_dir, name)
        if not found:
            raise BinaryNotFoundError(name, payload_dir)
        return found

    def _place(self, info, kind, located):
        dest = self.resolver.binary_path(info.identifier, kind)
        part_path = dest + ".part"
        log.info(f"Copying {kind} binary to {dest}")
        try:
            shutil.copy(located, part_path)
        except OSError as e:
            _remove_partial(part_path)
            raise PlacementError(dest, f"Failed to copy binary ({e})") from e

        try:
            if not info.is_windows:
                make_executable(part_path)
            os.replace(part_path, dest)
        except PlacementError:
            _remove_partial(part_path)
            raise
        except OSError as e:
            _remove_partial(part_path)
            raise PlacementError(dest, f"Failed to move binary into place ({e})") from e
        return dest

    def _cleanup(self, work_dir):
        try:
            shutil.rmtree(work_dir)
        except OSError as e:
            log.warning(f"Failed to clean up temporary directory {work_dir}: {e}")
