"""Entry point for running projectdash as a module or installed script.

Usage:
    projectdash / python -m projectdash               → viewer (uvicorn)
    projectdash <command> ... / python -m projectdash <command> ... → CLI
"""

import sys


def run() -> None:
    """Entry point: no args → viewer, else → CLI."""
    if len(sys.argv) == 1:
        from projectdash.cli import serve
        from projectdash.config import Settings
        from projectdash.console import configure_logging

        configure_logging(Settings.load().log_level)
        serve()
    else:
        from projectdash.cli import run_cli
        run_cli()


if __name__ == "__main__":
    run()
