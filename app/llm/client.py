from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.errors import TextGenerationError

log = logging.getLogger(__name__)


class TextGenerator:
    """Anything that turns a prompt into text."""

    def generate(self, prompt: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelTurn:
    """One model answer: its text plus any tool calls it asked for."""
    text: str
    function_calls: List[FunctionCall] = field(default_factory=list)

    @classmethod
    def from_parts(cls, parts: List[Any]) -> "ModelTurn":
        texts: List[str] = []
        calls: List[FunctionCall] = []
        for part in parts:
            if not isinstance(part, dict):
                continue
            if "text" in part:
                texts.append(part["text"])
            call = part.get("functionCall")
            if isinstance(call, dict) and call.get("name"):
                calls.append(FunctionCall(name=call["name"], args=dict(call.get("args") or {})))
        return cls(text="".join(texts), function_calls=calls)


@dataclass
class GeminiClient(TextGenerator):
    api_key: str
    model: str = settings.gemini_model
    api_base: str = settings.gemini_api_base
    timeout: float = settings.gemini_timeout
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)

    def _url(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                r = client.post(
                    self._url(),
                    params={"key": self.api_key},
                    json=payload,
                )
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            raise TextGenerationError(
                f"{self.model} returned HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TextGenerationError(f"{self.model} request failed: {e}") from e

    def generate(self, prompt: str) -> str:
        data = self._post({"contents": [{"role": "user", "parts": [{"text": prompt}]}]})
        text = self._extract_text(data)
        log.debug("Generated %d characters with %s", len(text), self.model)
        return text

    def generate_content(
        self,
        contents: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        system_instruction: Optional[str] = None,
    ) -> ModelTurn:
        """
        Send a whole conversation and return the model's next turn.

        Args:
            contents: History as ``{"role": ..., "parts": [...]}`` messages
            tools: Function declarations the model may call
            system_instruction: Standing instruction sent with every turn
        """
        payload: Dict[str, Any] = {"contents": contents}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if tools:
            payload["tools"] = [{"functionDeclarations": tools}]
            payload["toolConfig"] = {"functionCallingConfig": {"mode": "AUTO"}}
        turn = ModelTurn.from_parts(self._parts(self._post(payload)))
        log.debug(
            "%s answered with %d characters and %d tool call(s)",
            self.model, len(turn.text), len(turn.function_calls),
        )
        return turn

    def _parts(self, data: Any) -> List[Any]:
        try:
            return data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            reason = data.get("promptFeedback", {}).get("blockReason") if isinstance(data, dict) else None
            raise TextGenerationError(
                f"{self.model} returned no candidates" + (f" ({reason})" if reason else "")
            ) from e

    def _extract_text(self, data: Any) -> str:
        return "".join(p.get("text", "") for p in self._parts(data) if isinstance(p, dict))


def get_text_generator() -> Optional[GeminiClient]:
    """The configured generator, or None when no API key is set."""
    if not settings.gemini_api_key:
        return None
    return GeminiClient(api_key=settings.gemini_api_key)
