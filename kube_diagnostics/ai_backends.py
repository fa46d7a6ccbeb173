"""
AI backends that turn a sanitized prompt into an explanation

Usage:
    from kube_diagnostics.ai_backends import create_backend

    backend = create_backend("noop")
    backend = create_backend("anthropic", model="claude-3-5-haiku-latest")

Environment variables:
    ANTHROPIC_API_KEY - Required by the "anthropic" backend unless api_key is passed
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

import anthropic

from .exceptions import BackendError, InvalidConfigurationError

logger = logging.getLogger("kube_diagnostics.ai_backends")


class AIBackend(ABC):
    """Contract every backend satisfies"""

    name: str = ""

    # Backends may replace the kind-specific templates with their own
    prompt_template: Optional[str] = None

    @abstractmethod
    def get_completion(self, prompt: str) -> str:
        """
        Generate an explanation for a prompt

        Raises:
            BackendError: If the backend call fails
        """

    def close(self):
        """Release backend resources"""


class NoOpBackend(AIBackend):
    """Echoes the prompt back, used for dry runs and tests"""

    name = "noop"

    def get_completion(self, prompt: str) -> str:
        return f"I am a noop response to the prompt {prompt}"


class AnthropicBackend(AIBackend):
    """Explanations from the Anthropic Messages API"""

    name = "anthropic"

    DEFAULT_MODEL = "claude-3-5-haiku-latest"
    DEFAULT_MAX_TOKENS = 1024

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = 0.7,
        client: Any = None,
    ):
        """
        Initialize Anthropic backend

        Args:
            api_key: API key (read from ANTHROPIC_API_KEY when omitted)
            model: Model identifier
            max_tokens: Response token limit
            temperature: Sampling temperature
            client: Preconfigured anthropic.Anthropic instance

        Raises:
            InvalidConfigurationError: If no API key is available
        """
        if client is None:
            api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not api_key:
                raise InvalidConfigurationError("ANTHROPIC_API_KEY environment variable not set.")
            client = anthropic.Anthropic(api_key=api_key)

        self.client = client
        self.model = model
        self.max_tokens = int(max_tokens)
        self.temperature = float(temperature)
        logger.info(f"Using Anthropic API backend (model={self.model})")

    def get_completion(self, prompt: str) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise BackendError(f"Anthropic request failed: {e}", backend=self.name) from e

        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        if not text:
            raise BackendError("Anthropic returned an empty response", backend=self.name)
        return text

    def close(self):
        self.client.close()


BACKENDS: Dict[str, Type[AIBackend]] = {
    NoOpBackend.name: NoOpBackend,
    AnthropicBackend.name: AnthropicBackend,
}


def create_backend(name: str, **options: Any) -> AIBackend:
    """
    Factory for AI backends

    Args:
        name: Backend name ("noop" or "anthropic")
        **options: Keyword arguments passed to the backend constructor

    Raises:
        InvalidConfigurationError: If the backend is unknown or misconfigured
    """
    backend_class = BACKENDS.get((name or "").lower().strip())
    if backend_class is None:
        raise InvalidConfigurationError(f"Unknown AI backend '{name}', expected one of: {', '.join(sorted(BACKENDS))}")

    try:
        return backend_class(**options)
    except TypeError as e:
        raise InvalidConfigurationError(f"Invalid options for AI backend '{name}': {e}") from e
