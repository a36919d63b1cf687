import os
import sys

# Application Metadata
APP_NAME = "ffmpeg-installer"
VERSION = "2.2.1"

PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _user_data_dir():
    """Per-user application data directory for this OS."""
    if os.name == 'nt':
        base = os.environ.get('LOCALAPPDATA', os.path.expanduser('~'))
    elif sys.platform == 'darwin':
        base = os.path.join(os.path.expanduser("~"), "Library", "Application Support")
    else:
        base = os.environ.get('XDG_DATA_HOME') or os.path.join(os.path.expanduser("~"), ".local", "share")
    return os.path.join(base, APP_NAME)


# Main Data Directory
# Chosen once per process. FFMPEG_INSTALLER_HOME wins, "package" storage keeps
# everything beside the installed code, otherwise the user's app data folder.
STORAGE_MODE = os.environ.get('FFMPEG_INSTALLER_STORAGE', 'user').lower()

if os.environ.get('FFMPEG_INSTALLER_HOME'):
    DATA_DIR = os.path.abspath(os.environ['FFMPEG_INSTALLER_HOME'])
elif STORAGE_MODE == 'package':
    DATA_DIR = PACKAGE_DIR
else:
    DATA_DIR = _user_data_dir()

BIN_DIR = os.path.join(DATA_DIR, "binaries")
CONFIG_FILE = os.path.join(DATA_DIR, "config.json")

# Network
REQUEST_TIMEOUT = (10, float(os.environ.get('FFMPEG_INSTALLER_TIMEOUT', '60')))
CHUNK_SIZE = 64 * 1024
# Seconds between progress updates (about 10 per second)
PROGRESS_INTERVAL = 0.1

# Base URL of the project's own release host, e.g.
# https://github.com/<owner>/ffmpeg-installer/releases/download/v1.0.0
MIRROR_URL = os.environ.get('FFMPEG_INSTALLER_MIRROR')
MIRROR_VERSION = os.environ.get('FFMPEG_INSTALLER_MIRROR_VERSION', 'v1.0.0')

LOG_LEVEL = os.environ.get('FFMPEG_INSTALLER_LOG_LEVEL', 'INFO').upper()
