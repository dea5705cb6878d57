"""Resolver - flattens extends/block inheritance into a single template body.

Inheritance is resolved with a lexical scan of the sources, not by rendering:
variables and flow control must survive untouched so the merged template can
still be rendered with real data later.

Algorithm for a child that extends a layout:
1. Collect the child's blocks (name -> trimmed body).
2. Replace the first block region of the same name in the layout.
3. If the layout extends a further ancestor, the replacements keep their
   block markers and resolution continues from the merged layout text.
   Otherwise the markers are dropped and leftover empty blocks removed.

Substitution therefore happens once, at the direct parent, and the child's
content wins over every ancestor.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Sequence

from tmprep.errors import CyclicInheritanceError
from tmprep.loader import TemplateLoader

logger = logging.getLogger(__name__)

EXTENDS = re.compile(r"""\{%-?\s*extends\s+['"]([^'"]+)['"]\s*-?%\}""")

BLOCK = re.compile(
    r"\{%-?\s*block\s+([A-Za-z0-9_]+)\s*-?%\}"
    r"(.*?)"
    r"\{%-?\s*endblock(?:\s+[A-Za-z0-9_]+)?\s*-?%\}",
    re.DOTALL,
)

EMPTY_BLOCK = re.compile(
    r"\{%-?\s*block\s+[A-Za-z0-9_]+\s*-?%\}"
    r"\s*"
    r"\{%-?\s*endblock(?:\s+[A-Za-z0-9_]+)?\s*-?%\}"
)


def find_extends(text: str) -> Optional[str]:
    """Return the layout name of the first extends declaration, if any."""
    match = EXTENDS.search(text)
    return match.group(1) if match else None


def strip_extends(text: str) -> str:
    """Remove the first extends declaration."""
    return EXTENDS.sub("", text, count=1)


def extract_blocks(text: str) -> Dict[str, str]:
    """Collect block overrides from a child template.

    A name defined twice keeps its last body.
    """
    blocks: Dict[str, str] = {}
    for match in BLOCK.finditer(text):
        name, body = match.group(1), match.group(2)
        if name in blocks:
            logger.warning("Block '%s' defined more than once; using the last one", name)
        blocks[name] = body.strip()
    return blocks


def _block_region(name: str) -> re.Pattern[str]:
    return re.compile(
        r"\{%-?\s*block\s+" + re.escape(name) + r"\s*-?%\}"
        r".*?"
        r"\{%-?\s*endblock(?:\s+[A-Za-z0-9_]+)?\s*-?%\}",
        re.DOTALL,
    )


def replace_block(text: str, name: str, replacement: str) -> tuple[str, bool]:
    """Replace the first block region called `name`.

    Returns:
        The new text and whether a region was found.
    """
    # Function replacement: the body is literal text, not a regex template.
    new_text, count = _block_region(name).subn(lambda _: replacement, text, count=1)
    return new_text, count > 0


def wrap_block(name: str, body: str) -> str:
    return f"{{% block {name} %}}{body}{{% endblock %}}"


def remove_empty_blocks(text: str) -> str:
    return EMPTY_BLOCK.sub("", text)


class Resolver:
    """Resolves template inheritance using a TemplateLoader for lookups."""

    def __init__(self, loader: TemplateLoader):
        self.loader = loader

    def resolve(self, name: str) -> str:
        """Resolve `name` into a flat template with no extends declaration.

        Args:
            name: Template name relative to the source root, with extension.

        Returns:
            The merged template text. A template without an extends
            declaration is returned unchanged.

        Raises:
            SourceNotFoundError: If the template or one of its layouts is missing.
            CyclicInheritanceError: If the extends chain loops.
        """
        source = self.loader.load_source(name)
        return self._resolve_text(source, (name,))

    def _resolve_text(self, text: str, chain: Sequence[str]) -> str:
        layout_name = find_extends(text)
        if layout_name is None:
            return text

        if layout_name in chain:
            raise CyclicInheritanceError([*chain, layout_name])

        layout = self.loader.load_source(layout_name)
        keep_markers = find_extends(layout) is not None

        merged = layout
        for block_name, body in extract_blocks(text).items():
            replacement = wrap_block(block_name, body) if keep_markers else body
            merged, found = replace_block(merged, block_name, replacement)
            if not found:
                logger.debug(
                    "Block '%s' has no counterpart in %s; dropped",
                    block_name,
                    layout_name,
                )

        if keep_markers:
            return self._resolve_text(merged, [*chain, layout_name])

        merged = strip_extends(merged)
        return remove_empty_blocks(merged)
