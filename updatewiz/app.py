from textual.app import App, ComposeResult
from textual.screen import Screen
from textual.widgets import Header, Footer, Static, Button, Checkbox
from textual.containers import Horizontal, VerticalScroll
from updatewiz.catalog.definitions import CATALOGUE, all_options
from updatewiz.config import Settings
from updatewiz.engine.models import RunOptions
from updatewiz.engine.orchestrator import RunOrchestrator
from updatewiz.safety.guardrails import PrivilegeGate, non_interactive
from updatewiz.screens.splash import SplashScreen
from updatewiz.screens.execution import ExecutionScreen
from updatewiz.utils.system import detect_all


class OptionsScreen(Screen):
    """Checkbox grid of every tool, greyed out where the tool is missing."""

    def __init__(self, detection=None):
        super().__init__()
        self.detection = detection or {}

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static("Select what to update", classes="header")
        with VerticalScroll(id="options_grid"):
            for category, options in CATALOGUE.items():
                yield Static(category, classes="category")
                for option in options.values():
                    missing = self.detection.get(option.id) is False
                    yield Checkbox(
                        option.label,
                        value=not missing,
                        disabled=missing,
                        id=option.env_key,
                        classes="undetected" if missing else "option",
                    )
        yield Static("", id="status", classes="status info")
        yield Horizontal(
            Button("Run Updates", variant="success", id="run"),
            Button("Select All", id="select_all"),
            Button("Unselect All", id="unselect_all"),
            Button("Exit", variant="error", id="exit"),
            classes="buttons"
        )
        yield Footer()

    def checkboxes(self):
        return list(self.query(Checkbox))

    def build_options(self) -> RunOptions:
        # Disabled (undetected) boxes are unchecked, so they are skipped too.
        enabled = [box.id for box in self.checkboxes() if box.value and not box.disabled]
        return RunOptions.from_selection([o.env_key for o in all_options()], enabled)

    def set_all(self, value: bool):
        for box in self.checkboxes():
            if not box.disabled:
                box.value = value

    def on_button_pressed(self, event: Button.Pressed):
        status = self.query_one("#status", Static)
        if event.button.id == "exit":
            self.app.exit()
        elif event.button.id == "select_all":
            self.set_all(True)
            status.update("All available package managers selected")
        elif event.button.id == "unselect_all":
            self.set_all(False)
            status.update("All available package managers unselected")
        elif event.button.id == "run":
            self.app.push_screen(ExecutionScreen(self.app.orchestrator, self.build_options()))


class UpdateWizApp(App):
    TITLE = "update-wiz"
    CSS = """
    Screen { align: center middle; }
    .splash_container { width: 80%; height: 80%; border: solid green; align: center middle; }
    .logo { color: green; content-align: center center; }
    .header { text-style: bold; margin: 1 0; }
    .category { text-style: bold; color: $accent; margin-top: 1; }
    .undetected { color: $text-muted; }
    #options_grid { height: 1fr; border: solid blue; margin: 0 1; }
    .code_block { background: $surface; color: $text; padding: 0 1; border: solid white; }
    .status.success { color: green; }
    .status.warning { color: yellow; }
    .status.error { color: red; }
    .buttons { height: auto; align: center middle; margin-top: 1; }
    Button { margin: 0 1; }
    .exec_container { width: 95%; height: 95%; }
    Log { height: 1fr; border: solid white; }
    .warnings { color: yellow; height: auto; }
    """

    def __init__(self, settings: Settings, detection=None):
        super().__init__()
        self.settings = settings
        self.detection = detection
        gate = PrivilegeGate(non_interactive(settings.elevation_command), interactive=False)
        self.orchestrator = RunOrchestrator(settings.script_path, gate, timeout=settings.timeout)

    def on_mount(self):
        detection = self.detection if self.detection is not None else detect_all()
        self.install_screen(SplashScreen(self.settings.script_path), name="splash")
        self.install_screen(OptionsScreen(detection), name="options")
        self.push_screen("splash")
