"""Module entrypoint for `python -m cli_agent`."""

from __future__ import annotations

from cli_agent.cli import run


if __name__ == "__main__":
    run()
