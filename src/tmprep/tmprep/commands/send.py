"""Send command - send a stored template to recipients"""

from __future__ import annotations

import json
from typing import Optional

import typer

from tmprep.client import MailerClient, SendRequest
from tmprep.errors import ValidationError

from .utils import handle_error


def send_command(
    api: str,
    token: Optional[str],
    name: Optional[str] = None,
    rcpt: Optional[str] = None,
    domain: Optional[str] = None,
    locale: Optional[str] = None,
    vars_json: Optional[str] = None,
) -> None:
    """Send template `name` to the comma-separated `rcpt` list."""
    try:
        try:
            variables = json.loads(vars_json) if vars_json else {}
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid --vars JSON: {e}") from e

        with MailerClient(api, token or "") as client:
            request = SendRequest(
                name=name or "",
                rcpt=rcpt or "",
                domain=domain,
                locale=locale,
                vars=variables,
            )
            client.post_send(request)
    except Exception as e:
        handle_error(e)

    typer.echo("Template sent")
