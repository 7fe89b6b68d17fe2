"""
Privilege check — root, or a working sudo.

Installing packages, running ``ninja install`` and deleting files
under /usr/local need root. This is checked once before any of that
starts, so individual commands can simply be prefixed with ``sudo``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from relinker.adapters.shell.runner import is_root

logger = logging.getLogger(__name__)


class PrivilegeError(Exception):
    """Raised when elevated privileges are required but unavailable."""


def check_privileges() -> str:
    """Verify the process can act as root.

    Returns:
        ``"root"`` when already root, ``"sudo"`` when sudo credentials
        were validated.

    Raises:
        PrivilegeError: If neither root nor sudo is usable.
    """
    logger.info("Checking for superuser privileges...")
    if is_root():
        return "root"

    if shutil.which("sudo") is None:
        raise PrivilegeError("Not running as root and sudo is not available.")

    # Interactive on purpose: sudo prompts on the user's terminal
    try:
        result = subprocess.run(["sudo", "-v"], check=False)
    except OSError as e:
        raise PrivilegeError(f"Failed to run sudo: {e}") from e

    if result.returncode != 0:
        raise PrivilegeError("Failed to acquire superuser privileges.")
    return "sudo"
