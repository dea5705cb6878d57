"""Client for the template mailer API.

Uploads compiled templates and triggers sends. Input is validated locally
before anything goes over the wire.
"""

from __future__ import annotations

import logging
import re
from email.utils import getaddresses
from pathlib import Path
from typing import Any

import httpx
from jinja2 import Environment, FileSystemLoader, TemplateError
from pydantic import BaseModel, Field

from tmprep.errors import ClientError, ValidationError

logger = logging.getLogger(__name__)

SENDER_PATTERN = re.compile(r"^[^<>]+<[^<>]+@[^<>]+\.[^<>]+>$")
ADDRESS_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class TemplateUpload(BaseModel):
    """Body of POST /api/v1/template."""

    template: str
    domain: str | None = None
    sender: str | None = None
    name: str | None = None
    subject: str | None = None
    locale: str | None = None
    part: bool = False


class SendRequest(BaseModel):
    """Body of POST /api/v1/send."""

    name: str
    rcpt: str
    domain: str | None = None
    locale: str | None = None
    vars: dict[str, Any] = Field(default_factory=dict)


def validate_emails(addresses: str) -> tuple[list[str], list[str]]:
    """Split a comma-separated address list into (valid, invalid)."""
    valid: list[str] = []
    invalid: list[str] = []
    for entry in (e.strip() for e in addresses.split(",")):
        if not entry:
            continue
        parsed = getaddresses([entry])
        address = parsed[0][1] if len(parsed) == 1 else ""
        if address and ADDRESS_PATTERN.match(address):
            valid.append(address)
        else:
            invalid.append(entry)
    return valid, invalid


def validate_sender(sender: str) -> None:
    if not SENDER_PATTERN.match(sender):
        raise ValidationError(
            'Invalid sender format. Expected "Name <email@example.com>"'
        )


class MailerClient:
    """JSON client for the template mailer server."""

    def __init__(
        self,
        base_url: str,
        token: str,
        templates_dir: Path = Path("templates"),
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            base_url: API root, e.g. http://localhost:3000.
            token: API key in "username:token" form.
            templates_dir: Where includes are looked up when validating uploads.
            transport: Optional httpx transport (used by tests).
            timeout: Request timeout in seconds.
        """
        if not base_url or not token:
            raise ValidationError("Apikey/api-url required")

        self.base_url = base_url.rstrip("/")
        self.templates_dir = templates_dir
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer apikey-{token}",
        }
        self._http = httpx.Client(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "MailerClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def request(self, method: str, command: str, body: Any = None) -> Any:
        """Send a request and return the decoded JSON response.

        Raises:
            ClientError: On a non-2xx response or transport failure.
        """
        try:
            response = self._http.request(
                method, command, json=body if body is not None else {}
            )
        except httpx.HTTPError as e:
            raise ClientError(0, str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_success:
            return data

        message = data.get("message") if isinstance(data, dict) else None
        logger.debug("%s %s -> %s %s", method, command, response.status_code, data)
        raise ClientError(response.status_code, message or response.reason_phrase)

    def get(self, command: str) -> Any:
        return self.request("GET", command)

    def post(self, command: str, body: Any) -> Any:
        return self.request("POST", command, body)

    def put(self, command: str, body: Any) -> Any:
        return self.request("PUT", command, body)

    def delete(self, command: str, body: Any = None) -> Any:
        return self.request("DELETE", command, body)

    def validate_template(self, template: str) -> None:
        """Render `template` once with no data to catch syntax errors."""
        env = Environment(loader=FileSystemLoader(str(self.templates_dir)))
        try:
            env.from_string(template).render()
        except TemplateError as e:
            raise ValidationError(f"Template validation failed: {e}") from e

    def post_template(self, upload: TemplateUpload) -> Any:
        if not upload.template:
            raise ValidationError("No template data provided")

        self.validate_template(upload.template)
        if upload.sender:
            validate_sender(upload.sender)

        logger.info("Uploading template %s", upload.name or "")
        return self.post("/api/v1/template", upload.model_dump(exclude_none=True))

    def post_send(self, send: SendRequest) -> Any:
        if not send.name or not send.rcpt:
            raise ValidationError("Invalid request body")

        _, invalid = validate_emails(send.rcpt)
        if invalid:
            raise ValidationError(f"Invalid email address(es): {','.join(invalid)}")

        logger.info("Sending template %s", send.name)
        return self.post("/api/v1/send", send.model_dump(exclude_none=True))
