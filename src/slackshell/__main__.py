"""slackshell command line entry point."""

from __future__ import annotations

from slackshell.cli import app

if __name__ == "__main__":
    app()
