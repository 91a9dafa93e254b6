"""
Generative call adapter.

Wraps exactly one request to the configured chat model provider (through
LangChain), optionally with the provider's hosted web-search tool, and
returns the trimmed text output. Failures are classified so callers can
decide what to do; nothing is retried here.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import anthropic
import httpx
import openai
from pydantic import BaseModel

from models.errors import EmptyOutput, TransportError
from utils.deadline import Deadline
from utils.helpers import truncate_text

logger = logging.getLogger(__name__)

WEB_SEARCH = "web_search"

SUPPORTED_PROVIDERS = ("openai", "claude")

_SDK_ERRORS = (openai.OpenAIError, anthropic.AnthropicError, httpx.HTTPError)


class LLMConfig(BaseModel):
    """Explicit configuration for GenerativeClient; no environment lookups."""
    provider: str = "openai"
    api_key: str = ""
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 4000
    request_timeout: float = 300.0


def collect_text(content: Union[str, List[Any], None]) -> str:
    """Concatenate the text segments of a chat message content, in order."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") in ("text", "output_text"):
            parts.append(block.get("text") or "")
    return "".join(parts)


class GenerativeClient:
    """
    One-shot text generation against OpenAI or Anthropic chat models.

    Args:
        config: Provider, credentials and request defaults
    """

    def __init__(self, config: LLMConfig):
        provider = config.provider.lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {config.provider}")
        self.config = config
        self.provider = provider

    def _build_model(self, model: str, timeout: float):
        if self.provider == "claude":
            from langchain_anthropic import ChatAnthropic
            return ChatAnthropic(
                model=model,
                anthropic_api_key=self.config.api_key,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                timeout=timeout,
                max_retries=0
            )

        from langchain_openai import ChatOpenAI
        kwargs: Dict[str, Any] = {}
        if self.config.base_url:
            kwargs["openai_api_base"] = self.config.base_url
        return ChatOpenAI(
            model=model,
            openai_api_key=self.config.api_key,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout=timeout,
            max_retries=0,
            use_responses_api=True,  # hosted web_search lives on the Responses API
            **kwargs
        )

    def _provider_tools(self, tools: List[Union[str, Dict]]) -> List[Dict]:
        mapped = []
        for tool in tools:
            if tool == WEB_SEARCH:
                if self.provider == "claude":
                    mapped.append({"type": "web_search_20250305", "name": "web_search", "max_uses": 5})
                else:
                    mapped.append({"type": "web_search_preview"})
            elif isinstance(tool, dict):
                mapped.append(tool)
            else:
                raise ValueError(f"Unsupported tool: {tool}")
        return mapped

    def generate(
        self,
        model: str,
        prompt: str,
        tools: Optional[List[Union[str, Dict]]] = None,
        tool_choice: Optional[str] = None,
        deadline: Optional[Deadline] = None
    ) -> str:
        """
        Issue one request and return the trimmed concatenated text output.

        Raises:
            DeadlineExceeded: The deadline expired before the call
            TransportError: The request failed (network, auth, quota, timeout)
            EmptyOutput: The request succeeded but produced no text
        """
        timeout = self.config.request_timeout
        if deadline is not None:
            deadline.check(f"calling {model}")
            timeout = min(timeout, deadline.remaining())

        tools = tools or []
        logger.info(
            f"🤖 generate: model={model} tools={len(tools)} "
            f"prompt={truncate_text(' '.join(prompt.split()), 120)!r}"
        )

        try:
            llm = self._build_model(model, timeout)
            if tools:
                llm = llm.bind_tools(self._provider_tools(tools), tool_choice=tool_choice)
            response = llm.invoke(prompt)
        except _SDK_ERRORS as e:
            logger.error(f"❌ {self.provider} call to {model} failed: {e}")
            raise TransportError(f"{self.provider} call to {model} failed: {e}") from e

        text = collect_text(getattr(response, "content", None)).strip()
        logger.info(f"   got output len={len(text)}")

        if not text:
            raise EmptyOutput(f"empty output from {self.provider} model {model}")
        return text
