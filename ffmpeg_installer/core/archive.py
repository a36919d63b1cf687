import lzma
import os
import stat
import tarfile
import zipfile
import zlib
from collections import deque

from ffmpeg_installer.core.errors import ExtractionError, ManualInstallationRequired, PlacementError
from ffmpeg_installer.utils.config import CHUNK_SIZE
from ffmpeg_installer.utils.logger import log

_TAR_MODES = {
    'tar.gz': 'r:gz',
    'tar.xz': 'r:xz',
}


def extract_archive(archive_path, dest_dir, fmt):
    """Unpacks a downloaded archive into dest_dir according to its declared format."""
    if fmt in ('aar', 'pkg'):
        raise ManualInstallationRequired(fmt)

    log.info(f"Extracting {os.path.basename(archive_path)} ({fmt})...")
    os.makedirs(dest_dir, exist_ok=True)

    if fmt == 'zip':
        _extract_zip(archive_path, dest_dir)
    elif fmt in _TAR_MODES:
        _extract_tar(archive_path, dest_dir, _TAR_MODES[fmt])
    else:
        raise ExtractionError(f"Unsupported archive format: {fmt}")

    log.info("Extraction complete.")


def _extract_zip(archive_path, dest_dir):
    try:
        with zipfile.ZipFile(archive_path, 'r') as zf:
            zf.extractall(dest_dir)
    except (zipfile.BadZipFile, OSError, EOFError, zlib.error) as e:
        raise ExtractionError(f"Failed to extract zip file: {e}") from e


def _extract_tar(archive_path, dest_dir, mode):
    try:
        with tarfile.open(archive_path, mode) as tf:
            if hasattr(tarfile, 'data_filter'):
                tf.extractall(dest_dir, filter='data')
            else:
                tf.extractall(dest_dir)
            # tarfile stops at the end-of-archive marker; read the rest of the
            # stream so the gzip CRC / xz block check is verified.
            while tf.fileobj.read(CHUNK_SIZE):
                pass
    except (tarfile.TarError, OSError, EOFError, lzma.LZMAError, zlib.error) as e:
        raise ExtractionError(f"Failed to extract tar file: {e}") from e


def find_binary(root, name):
    """
    Breadth-first search under root for a file named `name`, ignoring case.
    Returns the first match (shallowest first) or None.
    """
    wanted = name.lower()
    queue = deque([root])

    while queue:
        current = queue.popleft()
        try:
            entries = sorted(os.scandir(current), key=lambda e: e.name)
        except OSError as e:
            log.warning(f"Error reading directory {current}: {e}")
            continue

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                queue.append(entry.path)
            elif entry.is_file() and entry.name.lower() == wanted:
                log.debug(f"Found {name} at {entry.path}")
                return entry.path

    return None


def make_executable(path):
    """Adds rwx for owner and r-x for group/other on top of the current mode."""
    try:
        mode = os.stat(path).st_mode
        os.chmod(path, stat.S_IMODE(mode) | 0o755)
    except OSError as e:
        raise PlacementError(path, f"Failed to make file executable ({e})") from e
