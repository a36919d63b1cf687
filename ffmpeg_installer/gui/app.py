import os
import threading
import tkinter.messagebox as msgbox
from urllib.parse import urlparse

import customtkinter as ctk

from ffmpeg_installer.core.config_store import ConfigStore
from ffmpeg_installer.core.downloader import BinaryInstaller
from ffmpeg_installer.core.errors import InstallerError
from ffmpeg_installer.core.paths import PathResolver
from ffmpeg_installer.core.registry import default_registry, detect_host
from ffmpeg_installer.gui.frames import ComponentChoiceFrame, InstallProgressFrame
from ffmpeg_installer.utils.config import VERSION
from ffmpeg_installer.utils.logger import log


class InstallerApp(ctk.CTk):
    def __init__(self, platform_identifier=None):
        super().__init__()

        self.title(f"FFmpeg Installer v{VERSION}")
        self.geometry("420x320")

        self.exit_code = 1
        self.registry = default_registry()
        self.resolver = PathResolver(registry=self.registry)
        self.store = ConfigStore(self.resolver.config_path())

        if platform_identifier:
            self.platform_info = self.registry.lookup_identifier(platform_identifier)
            self.platform_text = platform_identifier
        else:
            self.platform_info = self.registry.current()
            self.platform_text = "-".join(detect_host())

        self._setup_ui()
        self.after(100, self._check_platform)

    def _setup_ui(self):
        self.grid_columnconfigure(0, weight=1)

        self.choice_frame = ComponentChoiceFrame(self, platform_text=f"Platform: {self.platform_text}")
        self.choice_frame.grid(row=0, column=0, sticky="ew", padx=20, pady=20)

        self.progress_frame = InstallProgressFrame(self, on_install_callback=self.run_install)
        self.progress_frame.grid(row=1, column=0, sticky="ew", padx=20, pady=5)

    def _check_platform(self):
        if self.platform_info is None or not self.registry.has_source(self.platform_info.identifier):
            self.choice_frame.set_input_state("disabled")
            self.progress_frame.btn_install.configure(state="disabled")
            self.progress_frame.error_progress("Unsupported platform")
            msgbox.showerror("Unsupported Platform",
                             f"No FFmpeg build is available for {self.platform_text}.\n"
                             "Please install FFmpeg manually.")

    def run_install(self):
        kinds = self.choice_frame.get_selected_kinds()
        self.choice_frame.set_input_state("disabled")
        self.progress_frame.start_progress()

        t = threading.Thread(target=self._install_thread, args=(kinds,), daemon=True)
        t.start()

    def _install_thread(self, kinds):
        def update_ui(url, downloaded, total):
            name = os.path.basename(urlparse(url).path)
            if total:
                pct = downloaded / total
                text = f"Downloading {name}... {int(pct * 100)}%"
            else:
                pct = 0
                text = f"Downloading {name}... {downloaded / (1024 * 1024):.1f} MB"
            # Tk widgets must only be touched from the main thread
            self.after(0, self.progress_frame.update_progress, pct, text)

        try:
            if not self.store.validate():
                self.store.initialize()
            installer = BinaryInstaller(self.registry, self.resolver, self.store, progress_callback=update_ui)
            report = installer.install(self.platform_info.identifier, kinds)
        except (InstallerError, OSError) as e:
            log.error(e)
            self.after(0, self._on_failed, str(e))
            return

        self.after(0, self._on_finished, report)

    def _on_finished(self, report):
        self.choice_frame.set_input_state("normal")
        if report.failed or not report.installed:
            reasons = "\n".join(f"{k}: {v}" for k, v in report.failed.items()) or "Nothing was installed."
            self._on_failed(reasons)
            return

        self.exit_code = 0
        self.progress_frame.finish_progress()
        lines = "\n".join(f"{k}: {p}" for k, p in report.installed.items())
        msgbox.showinfo("Success", f"Installed:\n{lines}")

    def _on_failed(self, message):
        self.exit_code = 1
        self.choice_frame.set_input_state("normal")
        self.progress_frame.error_progress("Installation failed.")
        msgbox.showerror("Error", message)
