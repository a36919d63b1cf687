import os

from ffmpeg_installer.core.registry import default_registry
from ffmpeg_installer.utils.config import BIN_DIR, CONFIG_FILE


class PathResolver:
    """
    Derives on-disk locations. Never touches the filesystem.

    Layout: <binaries_root>/<platform identifier>/<ffmpeg|ffprobe>[.exe]
    """

    def __init__(self, binaries_root=None, config_file=None, registry=None):
        self._root = os.path.normpath(binaries_root or BIN_DIR)
        self._config_file = os.path.normpath(config_file or CONFIG_FILE)
        self._registry = registry or default_registry()

    def binaries_root(self):
        return self._root

    def config_path(self):
        return self._config_file

    def platform_dir(self, identifier):
        return os.path.normpath(os.path.join(self._root, identifier))

    def binary_name(self, identifier, kind):
        info = self._registry.lookup_identifier(identifier)
        if info and info.binary_name.get(kind):
            return info.binary_name[kind]
        return f"{kind}.exe" if identifier.startswith('win32') else kind

    def binary_path(self, identifier, kind):
        return os.path.normpath(os.path.join(self.platform_dir(identifier), self.binary_name(identifier, kind)))

    def resolve_relative(self, identifier, relative_path):
        """Absolute path of a file recorded relative to the platform directory."""
        return os.path.normpath(os.path.join(self.platform_dir(identifier), relative_path))
