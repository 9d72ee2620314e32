"""
Ollama Client

Async client for local Ollama LLM integration.
Supports retries and connection pooling.
"""

import asyncio
from typing import Optional

import httpx

from config import OllamaSettings, get_settings
from core.logging_config import llm_logger as logger


class OllamaError(RuntimeError):
    """Raised when the model could not produce a response after retries."""


class OllamaClient:
    """
    Async client for Ollama API.

    Features:
    - Connection pooling
    - Automatic retries on server errors and timeouts
    - Client errors (4xx, including 429) re-raised to the caller
    """

    def __init__(
        self,
        settings: Optional[OllamaSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings().ollama
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=httpx.Timeout(self.settings.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 300,
    ) -> str:
        """
        Generate a response from the LLM.

        Args:
            prompt: User prompt
            system: Optional system prompt
            model: Model name (uses default if None)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Generated response text

        Raises:
            httpx.HTTPStatusError: on a 4xx response
            OllamaError: when every attempt failed
        """
        if model is None:
            model = self.settings.model

        client = await self.get_client()

        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            }
        }

        if system:
            payload["system"] = system

        attempts = max(1, self.settings.max_retries)
        last_error = None
        for attempt in range(attempts):
            try:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()

                data = response.json()
                return data.get("response", "")

            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise
                last_error = e
            except httpx.TimeoutException as e:
                last_error = e
            except httpx.HTTPError as e:
                last_error = e
                break

            logger.warning(f"Ollama attempt {attempt + 1}/{attempts} failed: {last_error}")
            if attempt + 1 < attempts:
                await asyncio.sleep(2 ** attempt)

        raise OllamaError(f"Ollama request failed after retries: {last_error}")

    async def is_available(self) -> bool:
        """Check if Ollama is running and responsive."""
        try:
            client = await self.get_client()
            response = await client.get("/")
            return response.status_code == 200
        except httpx.HTTPError:
            return False


# Global instance
ollama_client = OllamaClient()
