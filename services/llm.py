# services/llm.py
# Wrapper around OpenAI Chat Completions with function (tool) calling.
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

import config


class ModelProtocolError(RuntimeError):
    """The model returned nothing usable."""


@dataclass
class ModelFunctionCall:
    id: str
    name: str
    arguments: str  # JSON string, as emitted by the model

    def to_message(self) -> Dict[str, Any]:
        # assistant turn that carries the invocation, for the follow-up call
        return {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": self.id,
                    "type": "function",
                    "function": {"name": self.name, "arguments": self.arguments},
                }
            ],
        }


@dataclass
class ModelReply:
    content: str
    function_call: Optional[ModelFunctionCall] = None


def _extract_reply(resp) -> ModelReply:
    choices = getattr(resp, "choices", None) or []
    if not choices or choices[0].message is None:
        raise ModelProtocolError("No response from OpenAI")

    msg = choices[0].message
    content = (msg.content or "").strip()
    tool_calls = getattr(msg, "tool_calls", None) or []
    for call in tool_calls:
        fn = getattr(call, "function", None)
        if fn and fn.name:
            return ModelReply(
                content=content,
                function_call=ModelFunctionCall(id=call.id, name=fn.name, arguments=fn.arguments or ""),
            )
    return ModelReply(content=content)


class LLM:
    """One chat completion per call. A fresh AsyncOpenAI client per call unless one is injected."""

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model or config.OPENAI_MODEL
        self.api_key = api_key or config.OPENAI_API_KEY
        self.temperature = config.OPENAI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or config.OPENAI_MAX_TOKENS
        self.timeout = timeout or config.OPENAI_TIMEOUT_SEC
        self._client = client

    async def complete(self, messages: List[Dict[str, Any]], functions: Optional[List[Dict[str, Any]]] = None) -> ModelReply:
        kwargs: Dict[str, Any] = dict(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        if functions:
            kwargs["tools"] = functions
            kwargs["tool_choice"] = "auto"

        if self._client is not None:
            resp = await self._client.chat.completions.create(**kwargs)
        else:
            if not self.api_key:
                raise RuntimeError("OPENAI_API_KEY is not set")
            async with AsyncOpenAI(api_key=self.api_key, timeout=self.timeout) as client:
                resp = await client.chat.completions.create(**kwargs)
        return _extract_reply(resp)
