import logging
import os
import platform
import shutil

from updatewiz.catalog.definitions import all_options, get_option

logger = logging.getLogger(__name__)

SUPPORTED_SYSTEMS = ("Darwin", "Linux")


def is_supported_platform() -> bool:
    return platform.system() in SUPPORTED_SYSTEMS


def get_host_info() -> dict:
    info = {"os": "Unknown", "os_version": "", "shell": os.environ.get("SHELL", "Unknown")}

    system = platform.system()
    if system == "Darwin":
        info["os"] = "macOS"
        info["os_version"] = platform.mac_ver()[0]
    elif system == "Linux":
        try:
            release = platform.freedesktop_os_release()
            info["os"] = release.get("NAME", "Linux")
            info["os_version"] = release.get("VERSION_ID", "")
        except OSError:
            info["os"] = "Linux"
            info["os_version"] = platform.release()
    elif system:
        info["os"] = system
        info["os_version"] = platform.release()

    return info


def detect(tool_id: str):
    """
    True/False if the tool's binary is/isn't on PATH.
    None when there is nothing to probe or the probe itself failed.
    """
    option = get_option(tool_id)
    binary = option.binary if option else tool_id
    if not binary:
        return None
    try:
        return shutil.which(binary) is not None
    except OSError as e:
        logger.debug("Detection failed for %s: %s", tool_id, e)
        return None


def detect_all(options=None) -> dict:
    results = {option.id: detect(option.id) for option in (options or all_options())}
    missing = sorted(k for k, v in results.items() if v is False)
    logger.info("Detected %d tools, %d missing", sum(1 for v in results.values() if v), len(missing))
    return results
