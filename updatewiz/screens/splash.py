from textual.screen import Screen
from textual.widgets import Static, Button
from textual.containers import Container
from updatewiz.utils.system import get_host_info

ASCII_LOGO = r"""
 _   _           _       _                     _
| | | |_ __   __| | __ _| |_ ___     __      _(_)____
| | | | '_ \ / _` |/ _` | __/ _ \____\ \ /\ / / |_  /
| |_| | |_) | (_| | (_| | ||  __/_____\ V  V /| |/ /
 \___/| .__/ \__,_|\__,_|\__\___|      \_/\_/ |_/___|
      |_|
"""


class SplashScreen(Screen):
    def __init__(self, script_path=None):
        super().__init__()
        self.script_path = script_path

    def compose(self):
        host = get_host_info()
        script = str(self.script_path) if self.script_path else "[not found]"

        yield Container(
            Static(ASCII_LOGO, classes="logo"),
            Static("update-wiz v0.1.0", classes="meta"),
            Static("---", classes="separator"),
            Static(f"OS:     {host.get('os')} {host.get('os_version')}", classes="info"),
            Static(f"Shell:  {host.get('shell')}", classes="info"),
            Static(f"Script: {script}", classes="info", markup=False),
            Static("---", classes="separator"),
            Static("Update every package manager on this machine in one run.", classes="desc"),
            Button("Press Enter to Continue", variant="primary", id="start_btn"),
            classes="splash_container"
        )

    def on_button_pressed(self, event: Button.Pressed):
        if event.button.id == "start_btn":
            self.app.push_screen("options")
