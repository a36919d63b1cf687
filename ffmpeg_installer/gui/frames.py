import customtkinter as ctk

COMPONENTS = (
    ("FFmpeg and FFprobe", ('ffmpeg', 'ffprobe')),
    ("FFmpeg only", ('ffmpeg',)),
    ("FFprobe only", ('ffprobe',)),
)


class ComponentChoiceFrame(ctk.CTkFrame):
    def __init__(self, master, platform_text, **kwargs):
        super().__init__(master, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self.platform_label = ctk.CTkLabel(self, text=platform_text, font=("Arial", 16, "bold"))
        self.platform_label.grid(row=0, column=0, sticky="w", padx=10, pady=(10, 5))

        self.choice = ctk.IntVar(value=0)
        self.radios = []
        for i, (label, _) in enumerate(COMPONENTS):
            radio = ctk.CTkRadioButton(self, text=label, variable=self.choice, value=i)
            radio.grid(row=i + 1, column=0, sticky="w", padx=20, pady=3)
            self.radios.append(radio)

    def get_selected_kinds(self):
        return COMPONENTS[self.choice.get()][1]

    def set_input_state(self, state):
        for radio in self.radios:
            radio.configure(state=state)


class InstallProgressFrame(ctk.CTkFrame):
    def __init__(self, master, on_install_callback, **kwargs):
        super().__init__(master, **kwargs)
        self.grid_columnconfigure(0, weight=1)
        self.on_install = on_install_callback

        self.btn_install = ctk.CTkButton(self, text="Install", command=self.on_install_click,
                                         fg_color="green", hover_color="darkgreen")
        self.btn_install.grid(row=0, column=0, sticky="ew", padx=10, pady=10)

        self.progress_bar = ctk.CTkProgressBar(self)
        self.progress_bar.set(0)
        self.progress_bar.grid(row=1, column=0, sticky="ew", padx=10, pady=5)
        self.progress_bar.grid_remove()

        self.status_label = ctk.CTkLabel(self, text="Ready")
        self.status_label.grid(row=2, column=0, sticky="w", padx=10, pady=5)

    def on_install_click(self):
        self.on_install()

    def start_progress(self):
        self.btn_install.configure(state="disabled")
        self.progress_bar.grid()
        self.progress_bar.set(0)
        self.status_label.configure(text="Initializing...", text_color=("gray10", "gray90"))

    def update_progress(self, percentage, status_text):
        self.progress_bar.set(percentage)
        self.status_label.configure(text=status_text)

    def finish_progress(self, text="Installation Complete!"):
        self.btn_install.configure(state="normal")
        self.progress_bar.grid_remove()
        self.status_label.configure(text=text)

    def error_progress(self, msg):
        self.btn_install.configure(state="normal")
        self.progress_bar.grid_remove()
        self.status_label.configure(text=f"Error: {msg}", text_color="red")
