"""External service clients."""

from attune.providers.groq import GroqClient
from attune.providers.prompts import PromptLoader

__all__ = ["GroqClient", "PromptLoader"]
