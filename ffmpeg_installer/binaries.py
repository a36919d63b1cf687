"""
Installed FFmpeg binaries for the running platform, resolved at import time.

    from ffmpeg_installer.binaries import ffmpeg
    subprocess.run([ffmpeg.path, "-version"])

Importing fails with InstallerError if the platform is unsupported or the
installer has not been run yet.
"""
from ffmpeg_installer.core.accessor import get_installed_binaries

installation = get_installed_binaries()

ffmpeg = installation.ffmpeg
"""BinaryInfo for ffmpeg, or None if it is not installed."""

ffprobe = installation.ffprobe
"""BinaryInfo for ffprobe, or None if it is not installed."""

platform = installation.platform
arch = installation.arch
