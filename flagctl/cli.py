"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from flagctl.core.codec import calculate_hash, decode_options, encode_options
from flagctl.core.config_store import ConfigurationStore
from flagctl.core.errors import FlagctlError
from flagctl.core.service import BuildService
from flagctl.core.session import FlagSession
from flagctl.templates.library import TemplateLibrary

app = typer.Typer(help="Build flag resolution, encoding and board template translation")
configs_app = typer.Typer(help="Manage saved build configurations")
app.add_typer(configs_app, name="configs")


@app.callback()
def main(
    ctx: typer.Context,
    catalog: Path | None = typer.Option(None, "--catalog", help="Flag catalog file to use instead of the packaged one"),
    platform: str | None = typer.Option(None, "--platform", help="Hide flags disabled on this platform"),
    store: Path | None = typer.Option(None, "--store", help="Directory for saved configurations"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"catalog": catalog, "platform": platform, "store": store}


def _build_service(ctx: typer.Context) -> BuildService:
    options = ctx.obj or {}
    service = BuildService(
        catalog_path=options.get("catalog"),
        store=ConfigurationStore(options.get("store")),
        platform=options.get("platform"),
    )
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _echo_session(session: FlagSession) -> None:
    for key in session.enabled_keys():
        typer.echo(key)
    typer.echo(f"Hash: {session.hash()}")
    typer.echo(f"Encoded: {session.encoded()}")


@app.command("flags")
def list_flags(ctx: typer.Context) -> None:
    """List catalog flags grouped by section."""
    try:
        service = _build_service(ctx)
        sections = service.list_flags()
        if not sections:
            typer.echo("No flags loaded")
            raise typer.Exit(code=1)

        for section in sections:
            typer.echo(f"{section.name}:")
            for flag in section.flags:
                marker = "on" if flag.enabled else "off"
                typer.echo(f"  {flag.key} [{marker}] {flag.display_name}")
                if flag.requires:
                    typer.echo(f"    requires: {', '.join(flag.requires)}")
                if flag.excludes:
                    typer.echo(f"    excludes: {', '.join(flag.excludes)}")
    except FlagctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("resolve")
def resolve(
    ctx: typer.Context,
    enable: list[str] = typer.Option([], "--enable", "-e", help="Flag to switch on (repeatable)"),
    disable: list[str] = typer.Option([], "--disable", "-d", help="Flag to switch off (repeatable)"),
    base: str | None = typer.Option(None, "--base", help="Encoded configuration to start from"),
    save: str | None = typer.Option(None, "--save", help="Save the result under this name"),
) -> None:
    """Toggle flags with dependency and exclusion rules applied.

    Prints the enabled flags, their hash and their encoded form.
    """
    try:
        base_keys: list[str] | None = None
        if base is not None:
            base_keys = decode_options(base)
            if base_keys is None:
                typer.echo("Error: --base is not a valid encoded configuration", err=True)
                raise typer.Exit(code=1)

        service = _build_service(ctx)
        session = service.resolve(enable, disable, base=base_keys)
        _echo_session(session)
        if save is not None:
            saved = service.save(session, save)
            typer.echo(f"Saved as {saved.name}")
    except FlagctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("hash")
def hash_keys(keys: list[str] = typer.Argument(..., help="Flag keys")) -> None:
    """Print the configuration hash of a set of flag keys."""
    typer.echo(calculate_hash(keys))


@app.command("encode")
def encode_keys(keys: list[str] = typer.Argument(..., help="Flag keys")) -> None:
    """Print the compact encoded form of a set of flag keys."""
    typer.echo(encode_options(keys))


@app.command("decode")
def decode(encoded: str) -> None:
    """Print the flag keys packed in an encoded configuration."""
    keys = decode_options(encoded)
    if keys is None:
        typer.echo("Error: Not a valid encoded configuration", err=True)
        raise typer.Exit(code=1)
    for key in keys:
        typer.echo(key)


@app.command("template")
def template(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Template JSON file, or a template name with --library"),
    library: Path | None = typer.Option(None, "--library", help="JSON file holding a list of templates"),
    save: str | None = typer.Option(None, "--save", help="Save the derived flags under this name"),
) -> None:
    """Translate a board template and derive its build flags."""
    try:
        if library is not None:
            ref: str | int = int(source) if source.isdigit() else source
            text = TemplateLibrary.from_file(library).template_json(ref)
        else:
            try:
                text = Path(source).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                typer.echo(f"Error: Could not read template {source}: {exc}", err=True)
                raise typer.Exit(code=1) from None

        service = _build_service(ctx)
        session, selection = service.session_from_template(text)
        for warning in selection.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        typer.echo(selection.summary)
        _echo_session(session)
        if save is not None:
            saved = service.save(session, save)
            typer.echo(f"Saved as {saved.name}")
    except FlagctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@configs_app.command("list")
def list_configurations(ctx: typer.Context) -> None:
    """List saved configurations, newest first."""
    try:
        service = _build_service(ctx)
        saved = service.list_configurations()
        if not saved:
            typer.echo("No saved configurations")
            return
        for item in saved:
            platform = f" ({item.platform})" if item.platform else ""
            typer.echo(f"{item.saved_at} {item.name}{platform} {item.hash[:12]}")
    except FlagctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@configs_app.command("show")
def show_configuration(ctx: typer.Context, ref: str = typer.Argument(..., help="Name, hash or encoded string")) -> None:
    """Show the flags of a saved or encoded configuration."""
    try:
        service = _build_service(ctx)
        session, unknown = service.load(ref)
        for key in unknown:
            typer.echo(f"Warning: Unknown flag '{key}' ignored", err=True)
        _echo_session(session)
        for flag_key, values in session.parameter_values().items():
            for identifier, value in values.items():
                typer.echo(f"  {flag_key}.{identifier} = {value}")
    except FlagctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@configs_app.command("delete")
def delete_configuration(ctx: typer.Context, name: str) -> None:
    """Delete a saved configuration by name."""
    try:
        service = _build_service(ctx)
        if not service.delete_configuration(name):
            typer.echo(f"Error: No saved configuration named '{name}'", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Deleted {name}")
    except FlagctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
