import random
import time
from abc import ABC, abstractmethod

from ..cli_display import log


class LLMError(Exception):
    """Raised when all LLM retries are exhausted."""


class LLMClient(ABC):

    def __init__(self, max_retries: int = 3, retry_delay: float = 2.0,
                 stream: bool = False, temperature: float = 0.3,
                 max_tokens: int = 4096):
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.stream = stream
        self.temperature = temperature
        self.max_tokens = max_tokens

    # ── Public entry point ──

    def generate_response(self, prompt: str, system: str | None = None,
                          temperature: float | None = None,
                          max_tokens: int | None = None) -> str:
        """Generate a response with automatic retry and exponential backoff.

        Calls ``_generate_stream`` when streaming is enabled, otherwise
        ``_generate``.  Raises :class:`LLMError` after all retries are
        exhausted.
        """
        options = {
            "system": system,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": self.max_tokens if max_tokens is None else max_tokens,
        }
        last_error: Exception | None = None
        use_stream = self.stream  # falls back on failure

        for attempt in range(1, self.max_retries + 1):
            try:
                if use_stream:
                    result = self._generate_stream(prompt, **options)
                else:
                    result = self._generate(prompt, **options)

                if not result or not result.strip():
                    log.warning(
                        f"[LLM] Empty response on attempt {attempt}/{self.max_retries}")
                    if attempt < self.max_retries:
                        time.sleep(self._backoff(attempt))
                        continue
                    raise LLMError("LLM returned empty response after all retries")

                return result

            except LLMError:
                raise
            except Exception as e:
                last_error = e
                log.warning(
                    f"[LLM] Error on attempt {attempt}/{self.max_retries}: {e}")

                # If streaming failed, fall back to non-streaming for next retry
                if use_stream:
                    log.warning("[LLM] Streaming failed — falling back to non-streaming")
                    use_stream = False

                if attempt < self.max_retries:
                    wait = self._backoff(attempt)
                    # Special handling for 429: wait longer
                    if "429" in str(e):
                        wait *= 2
                        log.info(f"[LLM] Rate limit detected (429). Backing off for {wait:.1f}s")
                    time.sleep(wait)

        raise LLMError(
            f"LLM failed after {self.max_retries} retries: {last_error}")

    def _backoff(self, attempt: int) -> float:
        """Jittered exponential backoff."""
        wait = self.retry_delay * (2 ** (attempt - 1))
        return wait + wait * 0.1 * random.random()

    # ── Subclass hooks ──

    @abstractmethod
    def _generate(self, prompt: str, system: str | None,
                  temperature: float, max_tokens: int) -> str:
        """Synchronous (non-streaming) generation."""

    @abstractmethod
    def _generate_stream(self, prompt: str, system: str | None,
                         temperature: float, max_tokens: int) -> str:
        """Streaming generation; returns the concatenated content."""
