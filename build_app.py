import PyInstaller.__main__
import os
import shutil

# Clean previous builds
if os.path.exists("dist"):
    shutil.rmtree("dist")
if os.path.exists("build"):
    shutil.rmtree("build")

print("Starting Build Process...")

# Standalone installer for machines without a Python environment.
# Binaries and config land in the user data dir (the frozen app has no package dir to write into).
PyInstaller.__main__.run([
    'ffmpeg_installer/main.py',
    '--name=ffmpeg-installer',
    '--onefile',
    '--paths=.',
    '--collect-all=customtkinter',
    '--hidden-import=ffmpeg_installer.gui.app',
    '--clean',
])

print("Build Complete! check '/dist' folder.")
