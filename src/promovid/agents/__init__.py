"""AI agents for content generation and planning."""

from .base import BaseAgent, TextModelClient, create_text_client
from .script import ScriptAgent, ScriptInput

__all__ = ["BaseAgent", "TextModelClient", "create_text_client", "ScriptAgent", "ScriptInput"]
