"""
Abstract interface for Large Language Model (LLM) services.

The application only needs text in, text out: a prompt goes to a remote
model and a summary comes back. Providers may raise on timeouts or remote
errors; callers treat that as an ordinary failure.
"""

from abc import ABC, abstractmethod
from typing import Any


class LLMInterface(ABC):
    """
    Abstract Base Class for Large Language Model services.
    Defines a common interface for interacting with different LLM providers.
    """

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> str:
        """Generates text based on a given prompt."""

    async def close(self):
        """
        Optional method to close any underlying connections or clients.
        Providers that don't need explicit closing can keep this default.
        """
        return
