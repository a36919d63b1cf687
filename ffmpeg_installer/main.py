import argparse
import os
import sys
from urllib.parse import urlparse

from tqdm import tqdm

from ffmpeg_installer.core.config_store import ConfigStore
from ffmpeg_installer.core.downloader import BinaryInstaller
from ffmpeg_installer.core.errors import InstallerError, UnsupportedPlatformError
from ffmpeg_installer.core.paths import PathResolver
from ffmpeg_installer.core.registry import default_registry, detect_host
from ffmpeg_installer.utils.config import VERSION
from ffmpeg_installer.utils.logger import log, set_verbose

CHOICES = {
    '1': ('ffmpeg', 'ffprobe'),
    '2': ('ffmpeg',),
    '3': ('ffprobe',),
}


class TqdmProgress:
    """Download progress bar for the terminal, one bar per URL."""

    def __init__(self):
        self._bar = None
        self._url = None

    def __call__(self, url, downloaded, total):
        if url != self._url:
            self.close()
            self._url = url
            name = os.path.basename(urlparse(url).path) or url
            self._bar = tqdm(total=total, desc=name, unit='B', unit_scale=True, unit_divisor=1024)
        self._bar.update(downloaded - self._bar.n)

    def close(self):
        if self._bar is not None:
            self._bar.close()
        self._bar = None
        self._url = None


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ffmpeg-installer",
        description="Download pre-built FFmpeg/FFprobe binaries for this platform.",
    )
    parser.add_argument("--platform", metavar="ID",
                        help="platform identifier to install for, e.g. linux-x64 (default: detected)")
    parser.add_argument("--ffmpeg-only", action="store_true", help="install only ffmpeg")
    parser.add_argument("--ffprobe-only", action="store_true", help="install only ffprobe")
    parser.add_argument("--non-interactive", action="store_true",
                        help="never prompt; install both binaries unless an --*-only flag is given")
    parser.add_argument("--gui", action="store_true", help="open the graphical installer")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def prompt_for_installation(input_func=input):
    """Asks which components to install. Anything but 2 or 3 means both."""
    print("\nSelect components to install:")
    print("1. FFmpeg and FFprobe (default)")
    print("2. FFmpeg only")
    print("3. FFprobe only")
    try:
        answer = input_func("Enter your choice (1-3) or press Enter for default: ").strip()
    except EOFError:
        answer = ''
    return CHOICES.get(answer, CHOICES['1'])


def choose_kinds(args, input_func=input, interactive=None):
    if args.ffmpeg_only or args.ffprobe_only:
        kinds = []
        if args.ffmpeg_only:
            kinds.append('ffmpeg')
        if args.ffprobe_only:
            kinds.append('ffprobe')
        return tuple(kinds)

    if interactive is None:
        interactive = not args.non_interactive and sys.stdin.isatty()
    if not interactive:
        return CHOICES['1']
    return prompt_for_installation(input_func)


def resolve_identifier(args, registry):
    if args.platform:
        if registry.lookup_identifier(args.platform) is None:
            raise UnsupportedPlatformError(args.platform)
        return args.platform

    current = registry.current()
    if current is None:
        raise UnsupportedPlatformError("-".join(detect_host()))
    return current.identifier


def describe(kinds, identifier):
    if kinds == ('ffmpeg',):
        return f"Installing FFmpeg binary only for {identifier}..."
    if kinds == ('ffprobe',):
        return f"Installing FFprobe binary only for {identifier}..."
    return f"Installing FFmpeg and FFprobe binaries for {identifier}..."


def run(args, registry=None, resolver=None, store=None, session=None,
        input_func=input, interactive=None, progress_callback=None):
    """Runs one installation. Returns the process exit code."""
    registry = registry or default_registry()
    resolver = resolver or PathResolver(registry=registry)
    store = store or ConfigStore(resolver.config_path())

    try:
        identifier = resolve_identifier(args, registry)
        registry.source_for(identifier)

        if not store.validate():
            store.initialize()

        kinds = choose_kinds(args, input_func=input_func, interactive=interactive)
        print(describe(kinds, identifier))

        progress = progress_callback
        if progress is None:
            progress = TqdmProgress()
        installer = BinaryInstaller(registry, resolver, store, session=session, progress_callback=progress)
        try:
            report = installer.install(identifier, kinds)
        finally:
            if isinstance(progress, TqdmProgress):
                progress.close()
    except (InstallerError, OSError) as e:
        print(f"Installation failed: {e}", file=sys.stderr)
        return 1

    for kind, path in report.installed.items():
        print(f"Installed {kind}: {path}")
    for kind in report.skipped:
        print(f"Skipped {kind}: no build available for {identifier}")
    for kind, reason in report.failed.items():
        print(f"Failed to install {kind}: {reason}", file=sys.stderr)

    if report.failed or not report.installed:
        return 1
    print(f"Successfully installed requested binaries for {identifier}")
    return 0


def run_gui(args):
    import customtkinter as ctk
    from ffmpeg_installer.gui.app import InstallerApp

    ctk.set_appearance_mode("Dark")
    ctk.set_default_color_theme("blue")

    app = InstallerApp(platform_identifier=args.platform)
    app.mainloop()
    return app.exit_code


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_verbose()

    try:
        if args.gui:
            return run_gui(args)
        return run(args)
    except KeyboardInterrupt:
        log.error("Installation cancelled.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
