"""TMPrep CLI Main Entry Point

Prepares email templates for the template mailer: flattens layout
inheritance, converts layout tags into tables and inlines CSS.

Usage:
    tmprep compile                          # Compile ./templates into ./templates-dist
    tmprep compile -t welcome               # Compile a single template
    tmprep -t user:token template -f out.njk -n welcome
    tmprep -t user:token send -n welcome -r a@example.com -V '{"x": 1}'
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from ._version import __version__
from .commands import compile_command, send_command, template_command
from .commands.utils import setup_logging

typer_app = typer.Typer(no_args_is_help=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tmprep {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    ctx: typer.Context,
    api: str = typer.Option(
        "http://localhost:3000", "-a", "--api", help="Base API endpoint."
    ),
    token: Optional[str] = typer.Option(
        None, "-t", "--token", help='Authentication token, "username:token".'
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show progress."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Email template preprocessor and mailer client."""
    setup_logging(verbose)
    ctx.obj = {"api": api, "token": token}


@typer_app.command("compile")
def compile_cmd(
    input_dir: Optional[Path] = typer.Option(
        None, "-i", "--input", help="Input directory [default: ./templates]."
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output directory [default: ./templates-dist]."
    ),
    css: Optional[Path] = typer.Option(
        None,
        "-c",
        "--css",
        help="Stylesheet to inline [default: ./templates/foundation-emails.css].",
    ),
    template: Optional[str] = typer.Option(
        None, "-t", "--template", help="Process a specific template only."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Config file [default: ./tmprep.yaml]."
    ),
    jobs: Optional[int] = typer.Option(
        None, "-j", "--jobs", min=1, help="Templates to process in parallel."
    ),
) -> None:
    """Compile templates by resolving inheritance and converting layout tags."""
    compile_command(
        input_dir=input_dir,
        output_dir=output_dir,
        css=css,
        template=template,
        config_file=config_file,
        jobs=jobs,
    )


@typer_app.command("template")
def template_cmd(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(
        None, "-f", "--file", help="Template file (reads stdin if omitted)."
    ),
    name: Optional[str] = typer.Option(None, "-n", "--name", help="Template name."),
    sender: Optional[str] = typer.Option(
        None, "-s", "--sender", help='Sender, "Name <addr@example.com>".'
    ),
    subject: Optional[str] = typer.Option(None, "-b", "--subject", help="Subject."),
    locale: Optional[str] = typer.Option(None, "-l", "--locale", help="Locale."),
    domain: Optional[str] = typer.Option(None, "-d", "--domain", help="Domain."),
    part: bool = typer.Option(False, "-p", "--part", help="Upload as a partial."),
) -> None:
    """Store a template on the server."""
    template_command(
        api=ctx.obj["api"],
        token=ctx.obj["token"],
        file=file,
        name=name,
        sender=sender,
        subject=subject,
        locale=locale,
        domain=domain,
        part=part,
    )


@typer_app.command("send")
def send_cmd(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "-n", "--name", help="Template name."),
    rcpt: Optional[str] = typer.Option(
        None, "-r", "--rcpt", help="Recipients (comma-separated)."
    ),
    domain: Optional[str] = typer.Option(None, "-d", "--domain", help="Domain."),
    locale: Optional[str] = typer.Option(None, "-l", "--locale", help="Locale."),
    vars_json: Optional[str] = typer.Option(
        None, "-V", "--vars", help="Template parameters (JSON object)."
    ),
) -> None:
    """Send a template to recipients."""
    send_command(
        api=ctx.obj["api"],
        token=ctx.obj["token"],
        name=name,
        rcpt=rcpt,
        domain=domain,
        locale=locale,
        vars_json=vars_json,
    )


def app(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    typer_app(args=argv)


if __name__ == "__main__":
    app()
