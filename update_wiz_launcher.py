import sys
import os
from updatewiz.config import load_settings
from updatewiz.engine.errors import ConfigError
from updatewiz.observability.logging_config import setup_logging
from updatewiz.safety.guardrails import ensure_sudo
from updatewiz.utils.system import is_supported_platform
from updatewiz.app import UpdateWizApp

def main():
    # 1. Clear terminal for clean start
    os.system('cls' if os.name == 'nt' else 'clear')

    # 2. Check platform
    if not is_supported_platform():
        print("Error: update-wiz runs on macOS and Linux only.")
        sys.exit(1)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)
    setup_logging(settings.log_level, settings.log_file, settings.log_file_level, console=False)

    # 3. Authenticate on the plain terminal; the TUI only refreshes the cached credentials
    if not ensure_sudo(settings.elevation_command):
        print("\n[!] Authentication failed or was cancelled.")
        print("    update-wiz cannot run system updates without permissions.")
        print("    Exiting gracefully.")
        sys.exit(0)

    # 4. Launch TUI
    app = UpdateWizApp(settings)
    app.run()

if __name__ == "__main__":
    main()
