"""Template source loading through jinja2's FileSystemLoader.

Only raw sources are read here; nothing is compiled or rendered.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from tmprep.errors import SourceDecodeError, SourceNotFoundError

logger = logging.getLogger(__name__)


class TemplateLoader:
    """Loads raw template text by name, relative to a source directory.

    Names use "/" separators and include the file extension, the same way
    they appear in `{% extends "..." %}` declarations.
    """

    def __init__(self, src_dir: Path):
        self.src_dir = Path(src_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.src_dir)), autoescape=False
        )
        self._cache: Dict[str, str] = {}

    def load_source(self, name: str) -> str:
        """Return the raw text of `name`.

        Raises:
            SourceNotFoundError: If no such template exists under src_dir.
            SourceDecodeError: If the file exists but is unreadable or not UTF-8.
        """
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        try:
            source, filename, _ = self.env.loader.get_source(self.env, name)  # type: ignore[union-attr]
        except TemplateNotFound as e:
            raise SourceNotFoundError(name) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceDecodeError(name, str(e)) from e

        logger.debug("Loaded %s from %s", name, filename)
        self._cache[name] = source
        return source

    def exists(self, name: str) -> bool:
        """Whether `name` is present under src_dir, readable or not."""
        if name in self._cache:
            return True
        try:
            self.load_source(name)
        except SourceNotFoundError:
            return False
        except SourceDecodeError:
            return True
        return True
