"""
Maintainer tooling: fetch the third-party builds for every platform and lay
them out for upload to our own release host.

Output layout is <output>/<identifier>/<binary>, plus a config.json manifest.
Each binary is uploaded as "<identifier>-<binary>", which is what
registry.mirror_registry() downloads.
"""
import argparse
import os
import shutil
import sys

from ffmpeg_installer.core.config_store import ConfigStore
from ffmpeg_installer.core.downloader import BinaryInstaller
from ffmpeg_installer.core.errors import InstallerError
from ffmpeg_installer.core.paths import PathResolver
from ffmpeg_installer.core.registry import DEFAULT_REGISTRY
from ffmpeg_installer.utils.logger import log, set_verbose

DEFAULT_OUTPUT = "binaries"


def release_asset_name(identifier, filename):
    return f"{identifier}-{filename}"


def collect_assets(output_dir):
    """(path, asset name) for every staged binary, sorted by asset name."""
    assets = []
    for identifier in sorted(os.listdir(output_dir)):
        platform_dir = os.path.join(output_dir, identifier)
        if not os.path.isdir(platform_dir):
            continue
        for filename in sorted(os.listdir(platform_dir)):
            path = os.path.join(platform_dir, filename)
            if os.path.isfile(path) and not filename.startswith('.'):
                assets.append((path, release_asset_name(identifier, filename)))
    return assets


def prepare_release(output_dir=DEFAULT_OUTPUT, registry=DEFAULT_REGISTRY, identifiers=None,
                    clean=False, session=None, progress_callback=None):
    """
    Runs the installer for each platform into output_dir. A failing platform
    is logged and reported; the others still run.

    Returns:
        dict: identifier -> InstallReport, or the error message if the
        platform could not be processed at all.
    """
    if clean and os.path.isdir(output_dir):
        log.info(f"Cleaning {output_dir}")
        shutil.rmtree(output_dir)
    os.makedirs(output_dir, exist_ok=True)

    resolver = PathResolver(
        binaries_root=output_dir,
        config_file=os.path.join(output_dir, "config.json"),
        registry=registry,
    )
    installer = BinaryInstaller(
        registry=registry,
        resolver=resolver,
        store=ConfigStore(resolver.config_path()),
        session=session,
        progress_callback=progress_callback,
    )

    results = {}
    if identifiers is None:
        identifiers = registry.identifiers()
    for identifier in identifiers:
        log.info(f"=== Processing platform: {identifier} ===")
        try:
            results[identifier] = installer.install(identifier)
        except InstallerError as e:
            log.error(f"Error processing {identifier}: {e}")
            results[identifier] = str(e)
    return results


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="ffmpeg-installer-release",
        description="Download FFmpeg builds for every platform and stage them for a release upload.",
    )
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="staging directory (default: %(default)s)")
    parser.add_argument("--clean", action="store_true", help="empty the staging directory first")
    parser.add_argument("--platform", action="append", dest="platforms", metavar="ID",
                        help="only process this platform (repeatable)")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        set_verbose()

    results = prepare_release(args.output, identifiers=args.platforms, clean=args.clean)

    failed = False
    for identifier, result in results.items():
        if isinstance(result, str):
            print(f"{identifier}: FAILED ({result})")
            failed = True
        elif not result.ok:
            print(f"{identifier}: incomplete ({'; '.join(result.failed.values())})")
            failed = True
        else:
            print(f"{identifier}: {', '.join(result.installed) or 'nothing installed'}")

    print("\nRelease assets:")
    for path, name in collect_assets(args.output):
        print(f"  {name}  <-  {path}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
