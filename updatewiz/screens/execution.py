from textual.screen import Screen
from textual.widgets import Static, Button, Log, ProgressBar
from textual.containers import Vertical, Horizontal
from textual import work

from updatewiz.engine.models import Verdict
from updatewiz.engine.orchestrator import RunListener


def failure_report(result) -> str:
    """Text appended to the log when a run fails: the error, then stdout and stderr."""
    parts = []
    if result.error:
        parts.append(f"\n{result.error}\n")
    stdout = result.stream_output("stdout")
    if stdout:
        parts.append("\n--- Error Output ---\n" + stdout)
    stderr = result.stream_output("stderr")
    if stderr:
        parts.append("\n--- Error Details ---\n" + stderr)
    return "".join(parts)


class ExecutionScreen(Screen, RunListener):
    """Runs the script once and mirrors the orchestrator's events."""

    def __init__(self, orchestrator, options):
        super().__init__()
        self.orchestrator = orchestrator
        self.options = options

    def compose(self):
        yield Vertical(
            Static("Running updates...", id="status", classes="status info"),
            Static(f"Script: {self.orchestrator.script}", classes="code_block", markup=False),
            ProgressBar(total=100, show_eta=False, id="progress"),
            Static("Initializing...", id="progress_label", classes="label", markup=False),
            Log(id="output_log"),
            Static("", id="warnings", classes="warnings", markup=False),
            Horizontal(
                Button("Cancel", variant="error", id="cancel"),
                Button("Back to Options", variant="primary", id="back", disabled=True),
                classes="buttons"
            ),
            classes="exec_container"
        )

    def on_mount(self):
        self.orchestrator.add_listener(self)
        self.run_updates()

    def on_unmount(self):
        self.orchestrator.remove_listener(self)

    @work(exclusive=True)
    async def run_updates(self):
        result = await self.orchestrator.start(self.options)
        if result is None:
            self.set_status("Another run is already in progress.", "error")
            self.query_one("#back").disabled = False

    def set_status(self, message: str, kind: str = "info"):
        status = self.query_one("#status", Static)
        status.update(message)
        status.set_classes(f"status {kind}")

    # Orchestrator events

    def on_output_chunk(self, chunk):
        self.query_one("#output_log", Log).write(chunk.text)

    def on_progress(self, percent, label):
        self.query_one("#progress", ProgressBar).update(progress=percent)
        self.query_one("#progress_label", Static).update(label)

    def on_terminal(self, result):
        if result.verdict == Verdict.SUCCESS:
            self.set_status("Updates completed successfully!", "success")
        elif result.verdict == Verdict.SUCCESS_WITH_WARNINGS:
            self.set_status(f"Updates completed with {len(result.warnings)} warning(s).", "warning")
        else:
            reason = f"exit code {result.exit_code}" if result.exit_code is not None else result.error
            self.set_status(f"Updates failed: {reason}", "error")
            self.query_one("#output_log", Log).write(failure_report(result))

        if result.warnings:
            self.query_one("#warnings", Static).update(
                "Warnings:\n" + "\n".join(f"  - {w}" for w in result.warnings)
            )

        self.query_one("#cancel").disabled = True
        self.query_one("#back").disabled = False

    def on_button_pressed(self, event: Button.Pressed):
        if event.button.id == "cancel":
            if self.orchestrator.cancel():
                self.set_status("Cancelling...", "warning")
        elif event.button.id == "back":
            self.app.pop_screen()
