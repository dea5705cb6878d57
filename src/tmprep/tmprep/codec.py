"""Placeholder codec - shields templating syntax from HTML and CSS tooling.

`protect()` turns every variable expression ({{ ... }}) and every flow-control
tag ({% if %}, {% for %}, ...) into an HTML comment carrying a base64 copy of
the original fragment. HTML parsers and the CSS inliner pass comments through
untouched, so `restore()` can put the exact fragments back afterwards.

Inheritance markers ({% block %}, {% endblock %}, {% extends %}) are left as
they are so the resolver's textual scans keep working on protected text.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import List, Optional

from tmprep.errors import CorruptPlaceholderError

VAR = "VAR"
FLOW = "FLOW"

# One left-to-right scan. Inheritance markers are matched (and kept) first so
# no later alternative can start inside them.
_FRAGMENT = re.compile(
    r"(?P<marker>\{%-?\s*(?:block|endblock|extends)\b.*?%\})"
    r"|(?P<var>\{\{.*?\}\})"
    r"|(?P<flow>\{%.*?%\})",
    re.DOTALL,
)

# Serializers escape the angle brackets of comments that end up inside
# attribute values, either as entities or percent-encoded in URLs.
_TOKEN = re.compile(
    r"(?:<|&lt;|%3[Cc])!--(?P<kind>VAR|FLOW):(?P<payload>[^\s<>&%]*?)--(?:>|&gt;|%3[Ee])"
)


def encode_token(kind: str, fragment: str) -> str:
    """Build the comment token for one fragment."""
    payload = base64.b64encode(fragment.encode("utf-8")).decode("ascii")
    return f"<!--{kind}:{payload}-->"


def decode_payload(payload: str) -> str:
    """Decode a token payload.

    Raises:
        ValueError: If the payload is not valid base64 of UTF-8 text.
    """
    try:
        return base64.b64decode(payload, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"invalid placeholder payload: {e}") from e


def protect(text: str) -> str:
    """Replace templating fragments in `text` with inert comment tokens."""

    def replace(match: re.Match[str]) -> str:
        if match.group("marker") is not None:
            return match.group(0)
        kind = VAR if match.group("var") is not None else FLOW
        return encode_token(kind, match.group(0))

    return _FRAGMENT.sub(replace, text)


def restore(
    text: str, errors: Optional[List[CorruptPlaceholderError]] = None
) -> str:
    """Replace every comment token in `text` with the fragment it encodes.

    Tokens whose payload does not decode are left in place. When `errors` is
    given, a CorruptPlaceholderError is appended to it for each of them.
    """

    def replace(match: re.Match[str]) -> str:
        try:
            return decode_payload(match.group("payload"))
        except ValueError:
            if errors is not None:
                errors.append(CorruptPlaceholderError(match.group(0)))
            return match.group(0)

    return _TOKEN.sub(replace, text)


def find_tokens(text: str) -> List[str]:
    """Return every comment token still present in `text`."""
    return [m.group(0) for m in _TOKEN.finditer(text)]


def token_payloads(text: str) -> List[str]:
    """Return the payload of every token in `text`, whatever its spelling."""
    return [m.group("payload") for m in _TOKEN.finditer(text)]
