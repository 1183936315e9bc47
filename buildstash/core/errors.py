"""Error hierarchy shared by every buildstash component.

Each class maps to one failure kind the orchestrators make policy
decisions on:

- ``ConfigInvalidError``  fatal before any work starts
- ``NotFoundError``       unknown name, missing directory, missing entry
- ``ExternalToolError``   git or build tooling exited non-zero
- ``ArchiveError``        pack, unpack, copy or temp-file failure
- ``BackendError``        object storage transport or auth failure
"""

from __future__ import annotations


class BuildstashError(RuntimeError):
    """Base class for all errors raised by buildstash."""


class ConfigInvalidError(BuildstashError):
    """Raised when configuration is missing, malformed or incomplete."""


class NotFoundError(BuildstashError):
    """Raised when a unit, asset, directory or repository entry is absent."""


class ExternalToolError(BuildstashError):
    """Raised when an external command exits with a non-zero status.

    Parameters
    ----------
    command:
        The command as it was invoked, for display.
    returncode:
        Exit status of the process (``-1`` if it could not be started).
    stderr:
        Captured standard error, if any was captured.
    """

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"Command '{command}' failed with return code {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ArchiveError(BuildstashError):
    """Raised when an archive cannot be written, read or extracted."""


class BackendError(BuildstashError):
    """Raised when a repository backend fails for a reason other than not-found."""
