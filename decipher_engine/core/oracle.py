"""Code-equivalence oracle client.

A user's hand-written deobfuscation is judged by an external generative model.
The engine treats the verdict as opaque: it only reads the numeric fields and
folds them into the session history. Any failure, including offline mode, maps
to a conservative verdict that awards nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional
import json
import logging
import re

import requests

from .offline_guard import ensure_network_allowed
from ..config import Config

logger = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

GENERATION_CONFIG = {
    "temperature": 0.2,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1024,
}

PROMPT_TEMPLATE = """You are a code validation expert. Decide whether the second snippet is a valid deobfuscation of the first.

OBFUSCATED CODE:
```javascript
{original}
```

USER'S DEOBFUSCATED CODE:
```javascript
{user_code}
```

The snippets are equivalent when they perform the same operations, produce the same outputs for the same inputs and have the same side effects.
Ignore differences in variable naming (when consistent), whitespace, comments and declaration style.

Respond with a JSON object:
{{
  "isCorrect": true/false,
  "explanation": "brief reasoning",
  "score": 0-100 (readability improvement),
  "bonus": 0-10 (exceptional improvements),
  "penalty": 0-10 (issues found)
}}
"""


class OracleError(Exception):
    """The oracle could not produce a verdict."""


@dataclass(frozen=True)
class OracleVerdict:
    is_correct: bool
    score: int
    explanation: str
    bonus: int = 0
    penalty: int = 0

    @classmethod
    def conservative(cls, explanation: str) -> "OracleVerdict":
        return cls(is_correct=False, score=0, explanation=explanation)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OracleVerdict":
        """Build from the model's JSON (camelCase or snake_case keys)."""

        def number(key: str, upper: int) -> int:
            try:
                value = int(round(float(payload.get(key) or 0)))
            except (TypeError, ValueError):
                value = 0
            return max(0, min(upper, value))

        is_correct = payload.get("isCorrect", payload.get("is_correct", False))
        return cls(
            is_correct=is_correct is True,
            score=number("score", 100),
            explanation=str(payload.get("explanation") or "No explanation provided"),
            bonus=number("bonus", 10),
            penalty=number("penalty", 10),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_prompt(original: str, user_code: str) -> str:
    return PROMPT_TEMPLATE.format(original=original, user_code=user_code)


def parse_verdict_text(text: str) -> OracleVerdict:
    """Extract the verdict JSON from free-form model output."""
    match = JSON_BLOCK.search(text or "")
    if not match:
        raise OracleError("No JSON object in oracle response")
    try:
        payload = json.loads(match.group(0))
    except ValueError as e:
        raise OracleError(f"Malformed verdict JSON: {e}") from e
    if not isinstance(payload, dict):
        raise OracleError("Verdict JSON is not an object")
    return OracleVerdict.from_payload(payload)


class EquivalenceOracle(ABC):
    """Judges whether user_code is a faithful deobfuscation of original."""

    @abstractmethod
    def validate(self, original: str, user_code: str) -> OracleVerdict:
        pass


class HttpEquivalenceOracle(EquivalenceOracle):
    """Calls a generateContent-style HTTP endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        endpoint: str = Config.DEFAULT_CONFIG["oracle"]["endpoint"],
        model: str = Config.DEFAULT_CONFIG["oracle"]["model"],
        timeout: float = 30,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> "HttpEquivalenceOracle":
        settings = config.get("oracle") or {}
        defaults = Config.DEFAULT_CONFIG["oracle"]
        return cls(
            api_key=config.oracle_api_key(),
            endpoint=settings.get("endpoint") or defaults["endpoint"],
            model=settings.get("model") or defaults["model"],
            timeout=float(settings.get("timeout_seconds") or defaults["timeout_seconds"]),
        )

    def request_body(self, original: str, user_code: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": build_prompt(original, user_code)}]}],
            "generationConfig": dict(GENERATION_CONFIG),
        }

    def validate(self, original: str, user_code: str) -> OracleVerdict:
        if not self.api_key:
            raise OracleError("No oracle API key configured")
        ensure_network_allowed("Oracle validation")

        try:
            response = requests.post(
                self.endpoint.format(model=self.model),
                params={"key": self.api_key},
                json=self.request_body(original, user_code),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise OracleError(f"Oracle request failed: {e}") from e

        if response.status_code != 200:
            raise OracleError(f"Oracle returned HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise OracleError(f"Oracle reply is not JSON: {e}") from e

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise OracleError("No text in oracle response") from None
        return parse_verdict_text(text)


def safe_validate(oracle: Optional[EquivalenceOracle], original: str, user_code: str) -> OracleVerdict:
    """Never raises: every failure becomes a conservative verdict."""
    if not (user_code or "").strip():
        return OracleVerdict.conservative("Please enter your deobfuscated code")
    if oracle is None:
        return OracleVerdict.conservative("No equivalence oracle configured")
    try:
        return oracle.validate(original, user_code)
    except Exception as e:
        logger.warning(f"Oracle validation failed: {e}")
        return OracleVerdict.conservative(f"Validation error: {e}")
