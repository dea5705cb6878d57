"""Pipeline - compiles templates from the source tree into the dist tree.

Per template the stages run strictly in order:

    RESOLVING -> PROTECTING -> TRANSFORMING -> INLINING -> RESTORING -> WRITING -> DONE

TRANSFORMING and INLINING degrade to passing their input through when they
fail. A missing source, a cyclic extends chain or a failed write ends the
template in FAILED; in batch mode the remaining templates are still processed.
"""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from tmprep import codec
from tmprep.config import PrepConfig
from tmprep.errors import (
    CorruptPlaceholderError,
    InlineError,
    MarkupParseError,
    PrepError,
    WriteError,
)
from tmprep.inliner import inline_css
from tmprep.loader import TemplateLoader
from tmprep.resolver import EXTENDS, Resolver
from tmprep.transformer import transform

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Pipeline stage a template is in (or ended in)."""

    RESOLVING = "resolving"
    PROTECTING = "protecting"
    TRANSFORMING = "transforming"
    INLINING = "inlining"
    RESTORING = "restoring"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TemplateResult:
    """Outcome of compiling one template."""

    name: str
    stage: Stage = Stage.RESOLVING
    output_path: Optional[Path] = None
    output: Optional[str] = None
    error: Optional[PrepError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.stage == Stage.DONE


class Pipeline:
    """Runs the compile pipeline for one configuration."""

    def __init__(self, config: PrepConfig, css: Optional[str] = None):
        """Initialize the pipeline.

        Args:
            config: Immutable pipeline configuration.
            css: Extra stylesheet text. Read from config.css_path if None.
        """
        self.config = config
        self.css = css if css is not None else config.read_stylesheet()
        self.loader = TemplateLoader(config.src_dir)
        self.resolver = Resolver(self.loader)

    def compile(self, name: str, result: Optional[TemplateResult] = None) -> str:
        """Run every stage but WRITING and return the final text.

        Args:
            name: Extension-stripped template name relative to src_dir.
            result: Receives stage progress and degradation warnings.

        Raises:
            SourceNotFoundError: If the template or a layout is missing.
            CyclicInheritanceError: If the extends chain loops.
        """
        result = result or TemplateResult(name=name)

        result.stage = Stage.RESOLVING
        merged = self.resolver.resolve(self.config.template_file(name))

        result.stage = Stage.PROTECTING
        protected = codec.protect(merged)

        result.stage = Stage.TRANSFORMING
        try:
            processed = transform(protected)
        except MarkupParseError as e:
            self._degrade(result, f"markup transform failed for {name}: {e}")
            processed = protected

        result.stage = Stage.INLINING
        try:
            inlined = inline_css(processed, self.css)
        except InlineError as e:
            self._degrade(result, f"css inlining failed for {name}: {e}")
            inlined = processed
        else:
            lost = _lost_tokens(processed, inlined)
            if lost:
                self._degrade(
                    result,
                    f"css inlining lost {lost} placeholder(s) in {name}; "
                    "keeping markup without inlined styles",
                )
                inlined = processed

        result.stage = Stage.RESTORING
        corrupt: List[CorruptPlaceholderError] = []
        final = codec.restore(inlined, corrupt)
        for err in corrupt:
            self._degrade(result, f"corrupt placeholder in {name}: {err.token[:60]}")

        return final

    def process_template(self, name: str) -> TemplateResult:
        """Compile `name` and write it under dist_dir. Never raises PrepError."""
        logger.info("Processing template: %s", name)
        result = TemplateResult(name=name)

        try:
            final = self.compile(name, result)
            result.stage = Stage.WRITING
            result.output_path = self._write(name, final)
            result.output = final
        except PrepError as e:
            logger.error("failed to process %s at %s: %s", name, result.stage.value, e)
            result.error = e
            result.stage = Stage.FAILED
            return result

        result.stage = Stage.DONE
        logger.info("Created %s", result.output_path)
        return result

    def find_templates(self) -> List[str]:
        """Discover leaf templates under src_dir.

        A file is a leaf when it has the template extension, does not start
        with the private prefix, has no excluded part ("layout", "part") in
        its name and contains an extends declaration.

        Returns:
            Sorted, extension-stripped names relative to src_dir.
        """
        cfg = self.config
        names: List[str] = []
        if not cfg.src_dir.is_dir():
            logger.warning("Source directory not found: %s", cfg.src_dir)
            return names

        for path in sorted(cfg.src_dir.rglob(f"*{cfg.extension}")):
            if not path.is_file():
                continue
            basename = path.name
            if cfg.private_prefix and basename.startswith(cfg.private_prefix):
                continue
            if any(part in basename for part in cfg.excluded_name_parts):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable template %s: %s", path, e)
                continue
            if not EXTENDS.search(content):
                continue
            relative = path.relative_to(cfg.src_dir).as_posix()
            names.append(relative[: -len(cfg.extension)])

        return names

    def process_all(self) -> List[TemplateResult]:
        """Compile every discovered template; results follow discovery order.

        Raises:
            WriteError: If dist_dir cannot be created.
        """
        try:
            self.config.dist_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(self.config.dist_dir, str(e)) from e

        templates = self.find_templates()
        logger.info(
            "Found %d templates to process: %s", len(templates), ", ".join(templates)
        )

        if self.config.jobs > 1 and len(templates) > 1:
            with ThreadPoolExecutor(max_workers=self.config.jobs) as pool:
                results = list(pool.map(self.process_template, templates))
        else:
            results = [self.process_template(name) for name in templates]

        failed = sum(1 for r in results if not r.ok)
        logger.info("All templates processed (%d failed)", failed)
        return results

    def run(self) -> List[TemplateResult]:
        """Single-template mode if config.template is set, batch mode otherwise.

        Raises:
            PrepError: In single-template mode, if the template fails.
        """
        if self.config.template:
            result = self.process_template(self.config.template)
            if result.error is not None:
                raise result.error
            return [result]
        return self.process_all()

    def _write(self, name: str, text: str) -> Path:
        path = self.config.output_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise WriteError(path, str(e)) from e
        return path

    @staticmethod
    def _degrade(result: TemplateResult, message: str) -> None:
        logger.warning(message)
        result.warnings.append(message)


def _lost_tokens(before: str, after: str) -> int:
    """Count placeholder tokens present in `before` but missing from `after`.

    Premailer reparses style attributes with cssutils and drops declarations
    whose value is a comment token, such as `color: {{ c }}` once protected.
    """
    missing = Counter(codec.token_payloads(before))
    missing.subtract(codec.token_payloads(after))
    return sum(n for n in missing.values() if n > 0)
