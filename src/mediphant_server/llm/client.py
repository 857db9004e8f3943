from typing import List, Dict, Any, Optional
import logging

import httpx

from ..config import settings
from ..core.errors import UpstreamServiceError

logger = logging.getLogger("mediphant.llm")


class LLMError(UpstreamServiceError):
    """Raised when a chat completion cannot be obtained."""


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if api_key is None and settings.openai_api_key is not None:
            api_key = settings.openai_api_key.get_secret_value()
        if not api_key:
            raise LLMError("Generative API key is not configured.")

        self.api_key = api_key
        self.model = model or settings.chat_model
        self.url = (base_url or settings.openai_base_url).rstrip("/") + "/chat/completions"
        self.timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self._transport = transport

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        max_tokens: int = 200,
        temperature: float = 0.3,
    ) -> str:
        """
        Returns the assistant message content of the first choice.

        Raises LLMError on transport failure, timeout, non-2xx status or a
        response without a non-empty text completion.
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self.url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            resp.raise_for_status()
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Chat completion failed (%s)", type(exc).__name__)
            raise LLMError(f"Chat completion failed: {type(exc).__name__}") from exc

        if not isinstance(content, str) or not content.strip():
            raise LLMError("Chat completion returned no content.")
        return content.strip()
