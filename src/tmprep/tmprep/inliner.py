"""Style inliner - merges stylesheet rules into element style attributes."""

from __future__ import annotations

import logging

from premailer import Premailer

from tmprep.errors import InlineError

logger = logging.getLogger(__name__)


def inline_css(html: str, extra_css: str = "") -> str:
    """Inline `extra_css` and the document's own <style> rules into `html`.

    <style> tags are kept in the output. Rules premailer cannot inline,
    such as @media queries and @font-face, are left in a <style> block.

    Raises:
        InlineError: If premailer fails on the document.
    """
    try:
        premailer = Premailer(
            html,
            css_text=extra_css or None,
            keep_style_tags=True,
            remove_classes=False,
            strip_important=False,
            allow_network=False,
            disable_validation=True,
            cssutils_logging_level=logging.CRITICAL,
        )
        return premailer.transform(pretty_print=False)
    except Exception as e:
        raise InlineError(f"CSS inlining failed: {e}") from e


def inline(html: str, extra_css: str = "") -> str:
    """Like inline_css(), but return `html` unchanged if inlining fails."""
    try:
        return inline_css(html, extra_css)
    except InlineError as e:
        logger.warning("%s; passing markup through unchanged", e)
        return html
