"""neogities CLI: entry-point for all site operations.

Usage:
    python cli/main.py --help

Sub-commands of the `site` group map to API endpoints:
    site info     → GET  /api/info
    site list     → GET  /api/list
    site delete   → POST /api/delete
    site upload   → POST /api/upload
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from neogities import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging

import typer

from cli.commands.site import site_app

app = typer.Typer(
    name="neogities",
    help="Neocities site client.",
    no_args_is_help=True,
)
app.add_typer(site_app, name="site")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP traffic to stderr."),
) -> None:
    """Neocities site client."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            stream=sys.stderr,
        )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
