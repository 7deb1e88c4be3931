"""Site commands: inspect, list, delete and upload files."""

from __future__ import annotations

import ntpath
from typing import List, Optional

import typer

from neogities import api
from neogities.config import settings
from neogities.errors import NeocitiesError

site_app = typer.Typer(help="Work with a Neocities site.", no_args_is_help=True)

_API_KEY_HELP = "Site API key (defaults to NEOCITIES_API_KEY)."


def _report(exc: NeocitiesError) -> None:
    typer.echo(f"Error: {exc}", err=True)


def _parse_upload_target(target: str) -> tuple[str, str]:
    """Split ``LOCAL:REMOTE`` at the last colon; a bare ``LOCAL`` uploads under its basename.

    A colon that only ends a drive letter (``C:\\site\\index.html``) is part of
    the local path.
    """
    local, sep, remote = target.rpartition(":")
    if not sep or _is_drive(local):
        local, remote = target, ""
    if not remote:
        return local, ntpath.basename(local)
    return local, remote


def _is_drive(prefix: str) -> bool:
    return len(prefix) == 1 and prefix.isalpha()


@site_app.command("info")
def site_info(
    sitename: Optional[str] = typer.Option(None, "--sitename", help="Site to look up."),
) -> None:
    """Show public information about a site."""
    try:
        info = api.info(sitename)
    except NeocitiesError as exc:
        _report(exc)
        raise typer.Exit(code=1)

    typer.echo(f"Site         : {info.sitename or '(unknown)'}")
    typer.echo(f"Domain       : {info.domain or '(none)'}")
    typer.echo(f"Created      : {info.created_at or '-'}")
    typer.echo(f"Last updated : {info.last_updated or '-'}")
    typer.echo(f"Hits         : {info.hits}")
    typer.echo(f"Tags         : {', '.join(info.tags) if info.tags else '(none)'}")


@site_app.command("list")
def site_list(
    path: Optional[str] = typer.Option(None, "--path", help="Only list this directory."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help=_API_KEY_HELP),
) -> None:
    """List the files of the authenticated site."""
    try:
        listing = api.list_files(api_key or settings.api_key, path=path)
    except NeocitiesError as exc:
        _report(exc)
        raise typer.Exit(code=1)

    for file_path in listing.paths:
        typer.echo(f"  {file_path}")
    typer.echo(f"{listing.count} file(s).")


@site_app.command("delete")
def site_delete(
    filenames: List[str] = typer.Argument(..., help="Remote files to delete."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help=_API_KEY_HELP),
) -> None:
    """Delete files from the site and print the server's reply."""
    try:
        reply = api.delete(api_key or settings.api_key, filenames)
    except NeocitiesError as exc:
        _report(exc)
        raise typer.Exit(code=1)
    typer.echo(reply)


@site_app.command("upload")
def site_upload(
    targets: List[str] = typer.Argument(..., help="Files as LOCAL[:REMOTE]."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help=_API_KEY_HELP),
) -> None:
    """Upload local files to the site and print the server's reply."""
    files = [_parse_upload_target(t) for t in targets]
    try:
        reply = api.upload(api_key or settings.api_key, files)
    except NeocitiesError as exc:
        _report(exc)
        raise typer.Exit(code=1)
    typer.echo(reply)
