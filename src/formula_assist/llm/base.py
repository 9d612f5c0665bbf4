from __future__ import annotations

from abc import ABC, abstractmethod


class CompletionProvider(ABC):
    name: str = "provider"

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the raw completion for the given prompt."""
