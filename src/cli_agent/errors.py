"""Error types raised by the session loop and its startup path."""

from __future__ import annotations


class CliAgentError(Exception):
    """Base class for cli-agent errors."""


class UserInputError(CliAgentError):
    """A submission that cannot be processed (e.g. empty text).

    Recovered locally: the task reports it as a failure result and the loop
    keeps running.
    """


class StartupError(CliAgentError):
    """The terminal or configuration could not be initialized.

    Fatal: the loop never starts and the process exits non-zero.
    """


__all__ = ["CliAgentError", "StartupError", "UserInputError"]
