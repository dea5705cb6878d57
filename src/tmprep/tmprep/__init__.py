"""tmprep - email template preprocessor

Flattens extends/block inheritance, converts email layout tags into tables
and inlines CSS while keeping templating syntax intact for later rendering.
"""

from tmprep._version import __version__
from tmprep.codec import protect, restore
from tmprep.config import PrepConfig
from tmprep.inliner import inline, inline_css
from tmprep.loader import TemplateLoader
from tmprep.pipeline import Pipeline, Stage, TemplateResult
from tmprep.resolver import Resolver
from tmprep.transformer import transform, transform_tree

__all__ = [
    "__version__",
    # Codec
    "protect",
    "restore",
    # Inheritance
    "TemplateLoader",
    "Resolver",
    # Markup
    "transform",
    "transform_tree",
    "inline",
    "inline_css",
    # Pipeline
    "PrepConfig",
    "Pipeline",
    "Stage",
    "TemplateResult",
]
