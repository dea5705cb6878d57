"""Template command - store a template on the server"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tmprep.client import MailerClient, TemplateUpload

from .utils import handle_error, read_template_data


def template_command(
    api: str,
    token: Optional[str],
    file: Optional[Path] = None,
    name: Optional[str] = None,
    sender: Optional[str] = None,
    subject: Optional[str] = None,
    locale: Optional[str] = None,
    domain: Optional[str] = None,
    part: bool = False,
) -> None:
    """Upload a template read from a file or stdin."""
    try:
        with MailerClient(api, token or "") as client:
            upload = TemplateUpload(
                template=read_template_data(file),
                sender=sender,
                name=name,
                subject=subject,
                locale=locale,
                domain=domain,
                part=part,
            )
            client.post_template(upload)
    except Exception as e:
        handle_error(e)

    typer.echo("Template updated")
