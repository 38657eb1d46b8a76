"""OpenRouter chat-completion client.

OpenRouter speaks the OpenAI API, so the official async OpenAI client is used
with a different base URL.
"""

import logging
from typing import Dict, List, Optional

from openai import AsyncOpenAI

from ..mlops.tracing import MLflowTracer

logger = logging.getLogger(__name__)

class LLMClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        max_tokens: int = 2000,
        tracer: Optional[MLflowTracer] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.client = client or AsyncOpenAI(base_url=base_url, api_key=api_key)
        self.max_tokens = max_tokens
        self.tracer = tracer or MLflowTracer(enabled=False)

    @classmethod
    def from_settings(cls, settings, tracer: Optional[MLflowTracer] = None) -> "LLMClient":
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            max_tokens=settings.MAX_TOKENS,
            tracer=tracer,
        )

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: str,
        max_tokens: Optional[int] = None,
        span_name: str = "completion",
    ) -> Optional[str]:
        """
        Run one chat completion and return the first choice's text.
        Returns None when the model produced no text. API errors propagate.
        """
        with self.tracer.span(span_name, span_type="LLM", inputs={"messages": messages}) as span:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens or self.max_tokens,
            )
            text = None
            if response.choices:
                text = response.choices[0].message.content or None

            tokens = None
            if getattr(response, "usage", None):
                tokens = {
                    "prompt_tokens": response.usage.prompt_tokens,
                    "completion_tokens": response.usage.completion_tokens,
                }
            self.tracer.trace_llm_call(span, model, messages, text, tokens)

        logger.debug(f"Completion from {model}: {len(text or '')} chars")
        return text
