import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ffmpeg_installer.utils.logger import log


def _now():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class ConfigBinaryInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str
    url: str
    relative_path: str = Field(alias="relativePath")


class PlatformEntry(BaseModel):
    ffmpeg: Optional[ConfigBinaryInfo] = None
    ffprobe: Optional[ConfigBinaryInfo] = None

    def get(self, kind) -> Optional[ConfigBinaryInfo]:
        return getattr(self, kind)


class ConfigFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    platforms: Dict[str, PlatformEntry] = Field(default_factory=dict)
    last_updated: str = Field(default_factory=_now, alias="lastUpdated")

    def to_json(self):
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class ConfigStore:
    """
    The JSON record of which binaries are installed for which platform.

    A missing or damaged file reads as an empty config; it is rebuilt on the
    next write.
    """

    def __init__(self, path):
        self.path = path
        self._lock = threading.Lock()

    def read(self) -> ConfigFile:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return ConfigFile.model_validate_json(f.read())
        except FileNotFoundError:
            return ConfigFile()
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            log.warning(f"Config file {self.path} is unreadable, starting fresh: {e}")
            return ConfigFile()

    def validate(self) -> bool:
        """Cheap check: the file exists and parses as JSON."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                json.load(f)
            return True
        except (OSError, ValueError):
            return False

    def initialize(self):
        log.info(f"Creating config file at {self.path}")
        with self._lock:
            self._write(ConfigFile())

    def upsert(self, identifier, kind, info: ConfigBinaryInfo) -> ConfigFile:
        with self._lock:
            config = self.read()
            entry = config.platforms.setdefault(identifier, PlatformEntry())
            setattr(entry, kind, info)
            config.last_updated = _now()
            self._write(config)
            return config

    def _write(self, config):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        # Write next to the target and swap it in so readers never see half a file
        fd, tmp_path = tempfile.mkstemp(prefix=".config-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(config.to_json())
                f.write('\n')
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
