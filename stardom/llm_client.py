"""
LLM client wrapper. Supports OpenAI-compatible servers and Anthropic.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from stardom.settings import OracleSettings, get_settings


class LLMClient(ABC):
    """Abstract LLM client interface."""

    def __init__(self, settings: Optional[OracleSettings] = None):
        settings = settings or get_settings().oracle
        self.model = settings.model_name
        self.image_model = settings.image_model
        self.api_key = settings.api_key
        self.temperature = settings.temperature
        self.max_tokens = settings.max_tokens
        self.timeout = settings.timeout_seconds
        self.base_url = settings.base_url

    @abstractmethod
    async def generate(
        self, prompt: str, system_prompt: Optional[str] = None, json_mode: bool = False
    ) -> str:
        ...

    async def generate_image(self, prompt: str) -> Optional[str]:
        """Returns a data URL, or None when the provider has no image endpoint."""
        return None


class OpenAIClient(LLMClient):
    """OpenAI chat completions (or any server speaking the same API)."""

    BASE_URL = "https://api.openai.com/v1"

    def _url(self, path: str) -> str:
        return (self.base_url or self.BASE_URL).rstrip("/") + path

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _build_messages(self, prompt: str, system_prompt: Optional[str] = None) -> list:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate(
        self, prompt: str, system_prompt: Optional[str] = None, json_mode: bool = False
    ) -> str:
        body = {
            "model": self.model,
            "messages": self._build_messages(prompt, system_prompt),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self._url("/chat/completions"), headers=self._headers(), json=body
            )
            response.raise_for_status()
            data = response.json()
            return data["choices"][0]["message"]["content"]

    async def generate_image(self, prompt: str) -> Optional[str]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self._url("/images/generations"),
                headers=self._headers(),
                json={"model": self.image_model, "prompt": prompt, "size": "1536x1024"},
            )
            response.raise_for_status()
            data = response.json()
            for item in data.get("data", []):
                if item.get("b64_json"):
                    return f"data:image/png;base64,{item['b64_json']}"
                if item.get("url"):
                    return item["url"]
            return None


class AnthropicClient(LLMClient):
    """Anthropic Claude API client."""

    BASE_URL = "https://api.anthropic.com/v1/messages"

    async def generate(
        self, prompt: str, system_prompt: Optional[str] = None, json_mode: bool = False
    ) -> str:
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            body["system"] = system_prompt
        if json_mode:
            body["system"] = (body.get("system", "") + "\nRespond with JSON only.").strip()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.base_url or self.BASE_URL,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                    "Content-Type": "application/json",
                },
                json=body,
            )
            response.raise_for_status()
            data = response.json()
            return data["content"][0]["text"]


def create_llm_client(settings: Optional[OracleSettings] = None) -> Optional[LLMClient]:
    """Factory: create an LLM client based on settings. None means offline."""
    settings = settings or get_settings().oracle
    provider = settings.provider.lower()

    if provider == "offline":
        return None
    elif provider == "openai":
        return OpenAIClient(settings)
    elif provider == "anthropic":
        return AnthropicClient(settings)
    raise ValueError(f"Unknown oracle provider: {provider}. Use 'offline', 'openai', or 'anthropic'")
