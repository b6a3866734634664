import asyncio
import logging
import subprocess

from updatewiz.engine.errors import AuthDeniedError, AuthLaunchError

logger = logging.getLogger(__name__)

SUDO_VALIDATE = ("sudo", "-v")


def non_interactive(command):
    """
    The refresh-only form of ``command``: ``sudo -v`` becomes ``sudo -n -v``.
    Used while Textual owns the terminal and no prompt can be shown.
    """
    command = tuple(command)
    if command and command[0].rsplit("/", 1)[-1] == "sudo" and "-n" not in command:
        return command[:1] + ("-n",) + command[1:]
    return command


class PrivilegeGate:
    """
    Runs the host's elevation command before every privileged launch.
    The gate never assumes a previous elevation still holds.
    """

    def __init__(self, command=SUDO_VALIDATE, interactive: bool = True):
        self.command = tuple(command)
        self.interactive = interactive

    async def elevate(self) -> None:
        logger.info("Requesting elevation: %s", " ".join(self.command))
        # Interactive mode inherits the terminal so the prompt reaches the user.
        stdio = None if self.interactive else asyncio.subprocess.DEVNULL
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command, stdin=stdio, stdout=stdio, stderr=stdio
            )
        except OSError as e:
            logger.error("Elevation command could not start: %s", e)
            raise AuthLaunchError(self.command, str(e)) from e
        code = await process.wait()
        if code != 0:
            logger.warning("Elevation denied (exit %s)", code)
            raise AuthDeniedError(code)
        logger.info("Elevation granted")


def ensure_sudo(command=SUDO_VALIDATE) -> bool:
    """
    Attempts to cache sudo credentials via `sudo -v`.
    Returns True if successful, False otherwise.
    """
    try:
        subprocess.run(list(command), check=True)
        return True
    except subprocess.CalledProcessError:
        return False
    except FileNotFoundError:
        return False
