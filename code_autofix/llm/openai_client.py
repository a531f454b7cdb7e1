"""
OpenAI-compatible LLM client — works with Mistral (the default endpoint),
OpenAI, Groq, Together.ai, and any other provider that implements the
OpenAI chat/completions API.
"""

import json
import requests

from .base import LLMClient
from ..cli_display import token_tracker, log

_DEFAULT_SYSTEM = "You are an expert code reviewer."


class OpenAIClient(LLMClient):

    def __init__(self, base_url: str, model: str, api_key: str,
                 timeout: int = 300, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _payload(self, prompt: str, system: str | None, temperature: float,
                 max_tokens: int, stream: bool) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system or _DEFAULT_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }

    # ── Non-streaming generation ──

    def _generate(self, prompt: str, system: str | None,
                  temperature: float, max_tokens: int) -> str:
        est_tokens = int(len(prompt.split()) * 1.3)
        log.debug(f"[OpenAI] Sending ~{est_tokens} est. tokens to {self.model}")
        log.debug(f"[OpenAI] Prompt:\n{prompt}")

        url = f"{self.base_url}/chat/completions"
        response = requests.post(
            url, headers=self._headers(),
            json=self._payload(prompt, system, temperature, max_tokens, False),
            timeout=(10, self.timeout),
        )
        response.raise_for_status()
        data = response.json()

        usage = data.get("usage") or {}
        prompt_tokens = usage.get("prompt_tokens", est_tokens)
        completion_tokens = usage.get("completion_tokens", 0)
        token_tracker.record(
            prompt_tokens if isinstance(prompt_tokens, int) else est_tokens,
            completion_tokens if isinstance(completion_tokens, int) else 0,
        )
        log.debug(f"[OpenAI] Usage: prompt={prompt_tokens} completion={completion_tokens}")

        choices = data.get("choices") or [{}]
        response_text = (choices[0].get("message") or {}).get("content") or ""
        log.debug(f"[OpenAI] Response:\n{response_text}")
        return response_text

    # ── Streaming generation ──

    def _generate_stream(self, prompt: str, system: str | None,
                         temperature: float, max_tokens: int) -> str:
        est_tokens = int(len(prompt.split()) * 1.3)
        log.debug(f"[OpenAI] Streaming ~{est_tokens} est. tokens from {self.model}")

        url = f"{self.base_url}/chat/completions"
        content_parts: list[str] = []
        tokens_generated = 0

        response = requests.post(
            url, headers=self._headers(),
            json=self._payload(prompt, system, temperature, max_tokens, True),
            stream=True, timeout=(10, self.timeout),
        )
        response.raise_for_status()

        for line in response.iter_lines(decode_unicode=True):
            if not line:
                continue
            if line.startswith("data: "):
                data_str = line[6:]
                if data_str.strip() == "[DONE]":
                    break
                try:
                    chunk = json.loads(data_str)
                    delta = chunk.get("choices", [{}])[0].get("delta", {})
                    token = delta.get("content", "")
                    if token:
                        content_parts.append(token)
                        tokens_generated += 1
                except (json.JSONDecodeError, KeyError, IndexError):
                    continue

        result = "".join(content_parts)
        token_tracker.record(est_tokens, tokens_generated)
        log.debug(f"[OpenAI] Streamed {tokens_generated} tokens")

        return result
