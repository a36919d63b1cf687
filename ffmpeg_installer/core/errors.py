class InstallerError(Exception):
    """Base class for every failure the installer reports to the user."""


class UnsupportedPlatformError(InstallerError):
    def __init__(self, identifier):
        super().__init__(
            f"Unsupported platform/architecture: {identifier}. "
            "Please install FFmpeg manually and set the path in your application."
        )
        self.identifier = identifier


class NoDownloadSourceError(InstallerError):
    def __init__(self, identifier):
        super().__init__(f"No download source available for platform: {identifier}")
        self.identifier = identifier


class DownloadError(InstallerError):
    def __init__(self, url, reason):
        super().__init__(f"Failed to download from {url}: {reason}")
        self.url = url


class ExtractionError(InstallerError):
    pass


class ManualInstallationRequired(ExtractionError):
    def __init__(self, fmt):
        super().__init__(f"Format {fmt} requires manual installation steps")
        self.format = fmt


class BinaryNotFoundError(InstallerError):
    def __init__(self, name, root):
        super().__init__(f"Could not find {name} binary in extracted files ({root})")
        self.name = name


class PlacementError(InstallerError):
    def __init__(self, path, reason):
        super().__init__(f"{reason}: {path}")
        self.path = path
