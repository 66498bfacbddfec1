"""ai.py

Thin clients for the hosted LLM APIs the bot can talk to.

Features:
- One call: pass (role, text) turns in, get a string out
- Gemini generateContent and OpenAI Responses backends
- Retry with exponential backoff on timeouts and dropped connections
- Typed failures (transport, bad request, HTTP status, bad response)

Backends are synchronous (requests); the bot runs them in a worker thread.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import requests

from utils.errors import CluthaError
from utils.logging import log

__all__ = [
    "Backend",
    "BackendError",
    "TransportError",
    "MalformedRequestError",
    "HttpStatusError",
    "MalformedResponseError",
    "GeminiClient",
    "ChatGptClient",
    "build_backend",
]

Turns = Sequence[Tuple[str, str]]


# -------------------------
# Failures
# -------------------------

class BackendError(CluthaError):
    """The backend could not produce a reply."""


class TransportError(BackendError):
    """The request never got a response (timeout, DNS, connection reset)."""


class MalformedRequestError(BackendError):
    """The request body could not be built."""


class HttpStatusError(BackendError):
    def __init__(self, status: int, body: str = ""):
        super().__init__(f"HTTP status {status}")
        self.status = status
        self.body = body


class MalformedResponseError(BackendError):
    """The response body was not in the expected shape."""


class Backend(Protocol):
    def generate(self, prompt: Turns) -> str:
        ...


# -------------------------
# Shared HTTP plumbing
# -------------------------

@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 2.0
    timeout_s: int = 120


class _HttpBackend:
    name = "backend"

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        retry: RetryPolicy = RetryPolicy(),
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.retry = retry
        self._session = session or requests.Session()

    def _url(self) -> str:
        raise NotImplementedError

    def _headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def build_request(self, prompt: Turns) -> Dict[str, Any]:
        raise NotImplementedError

    def parse_response(self, data: Any) -> str:
        raise NotImplementedError

    def generate(self, prompt: Turns) -> str:
        """Send the turns and return the generated text."""
        request = self.build_request(prompt)
        try:
            body = json.dumps(request)
        except (TypeError, ValueError) as e:
            log(f"[{self.name}] Couldn't serialise request: {request!r}")
            raise MalformedRequestError(f"Couldn't serialise request: {e}", cause=e) from e

        resp = self._post(body)

        if not resp.ok:
            log(f"[{self.name}] Bad HTTP content: {resp.text}")
            raise HttpStatusError(resp.status_code, resp.text)

        try:
            return self.parse_response(resp.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            log(f"[{self.name}] Bad response JSON: {resp.text}")
            raise MalformedResponseError(f"Bad response from {self.name}: {e}", cause=e) from e

    def _post(self, body: str) -> requests.Response:
        # Retry with exponential backoff for timeouts and dropped connections
        headers = {"Content-Type": "application/json", **self._headers()}
        for attempt in range(self.retry.max_retries):
            try:
                return self._session.post(
                    self._url(), data=body, headers=headers, timeout=self.retry.timeout_s,
                )
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if attempt < self.retry.max_retries - 1:
                    delay = self.retry.base_delay * (2 ** attempt)  # 2s, 4s, 8s
                    log(f"[{self.name}] {type(e).__name__} on attempt {attempt + 1}/{self.retry.max_retries}, retrying in {delay}s...")
                    time.sleep(delay)
                else:
                    raise TransportError(
                        f"{self.name} unreachable after {self.retry.max_retries} attempts: {e}", cause=e,
                    ) from e
            except requests.RequestException as e:
                raise TransportError(f"Failed to reach {self.name}: {e}", cause=e) from e
        raise TransportError(f"{self.name}: no attempts made")


# -------------------------
# Gemini
# -------------------------

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1"
GEMINI_DEFAULT_MODEL = "models/gemini-2.5-flash-lite"


class GeminiClient(_HttpBackend):
    """Google Gemini generateContent endpoint."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = GEMINI_DEFAULT_MODEL, **kwargs: Any):
        super().__init__(api_key, model, **kwargs)

    def _url(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.model}:generateContent"

    def _headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    def build_request(self, prompt: Turns) -> Dict[str, Any]:
        contents: List[Dict[str, Any]] = [
            {"parts": [{"text": text}], "role": role} for role, text in prompt
        ]
        return {"contents": contents}

    def parse_response(self, data: Any) -> str:
        return data["candidates"][0]["content"]["parts"][0]["text"]


# -------------------------
# ChatGPT
# -------------------------

OPENAI_RESPONSES_URL = "https://api.openai.com/v1/responses"
CHATGPT_DEFAULT_MODEL = "gpt-3.5-turbo"


class ChatGptClient(_HttpBackend):
    """OpenAI Responses endpoint."""

    name = "chatgpt"

    def __init__(self, api_key: str, model: str = CHATGPT_DEFAULT_MODEL, **kwargs: Any):
        super().__init__(api_key, model, **kwargs)

    def _url(self) -> str:
        return OPENAI_RESPONSES_URL

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def build_request(self, prompt: Turns) -> Dict[str, Any]:
        # OpenAI calls the model side "assistant"
        items = [
            {"type": "message", "content": text, "role": "assistant" if role == "model" else role}
            for role, text in prompt
        ]
        return {"model": self.model, "input": items}

    def parse_response(self, data: Any) -> str:
        content = data["output"][0]["content"][0]
        if content.get("type") == "refusal":
            return content["refusal"]
        if content.get("type") != "output_text":
            raise ValueError(f"unexpected content type {content.get('type')!r}")
        return content["text"]


_BACKENDS = {
    "gemini": GeminiClient,
    "chatgpt": ChatGptClient,
}


def build_backend(name: str, api_key: str, model: Optional[str] = None) -> Backend:
    """Pick the backend implementation configured at startup."""
    try:
        cls = _BACKENDS[name.strip().lower()]
    except KeyError:
        raise CluthaError(f"Unknown backend {name!r} (expected one of: {', '.join(_BACKENDS)})") from None
    if model:
        return cls(api_key, model)
    return cls(api_key)
