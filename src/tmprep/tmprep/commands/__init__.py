"""CLI commands"""

from .compile import compile_command
from .send import send_command
from .template import template_command

__all__ = ["compile_command", "send_command", "template_command"]
