"""Gemini text enhancement gateway: rate limiting, model routing, prompts."""

import threading
import time
from collections import deque
from functools import lru_cache
from typing import Callable

from google import genai
from google.genai import types
from loguru import logger

from taskflow.config import get_settings
from taskflow.exceptions import EnhancementFailed, RateLimitExceeded
from taskflow.models.enhance import EnhancementType

ONE_MINUTE = 60.0
ONE_DAY = 24 * 60 * 60.0

PROMPTS = {
    EnhancementType.GENERAL: (
        "Rewrite this text to be clear and professional. Do not include any explanations, "
        "options, or additional text. Return only the rewritten version:\n\n\"{text}\""
    ),
    EnhancementType.SPEC: (
        "As a product manager, convert this into a technical specification with requirements "
        "and acceptance criteria. Return only the specification, no explanations:\n\n\"{text}\""
    ),
    EnhancementType.BUG: (
        "As an IT specialist, format this as a bug report with steps to reproduce, expected vs "
        "actual behavior. Return only the bug report, no explanations:\n\n\"{text}\""
    ),
    EnhancementType.PROMPT: (
        "Convert this into an optimized AI prompt. Return only the prompt, "
        "no explanations:\n\n\"{text}\""
    ),
}


def build_prompt(text: str, kind: EnhancementType | str) -> str:
    return PROMPTS[EnhancementType.parse(kind)].format(text=text)


class RateLimiter:
    """Rolling one-minute window plus a daily counter.

    acquire() checks and records in one locked step and returns True when the
    call should go to the fallback model.
    """

    def __init__(
        self,
        per_minute: int = 9,
        per_day: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.per_minute = per_minute
        self.per_day = per_day
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: deque[float] = deque()
        self.daily_requests = 0
        self.last_reset = clock()

    def acquire(self) -> bool:
        with self._lock:
            now = self._clock()
            if now - self.last_reset > ONE_DAY:
                self.daily_requests = 0
                self.last_reset = now
            while self._requests and now - self._requests[0] >= ONE_MINUTE:
                self._requests.popleft()

            if self.daily_requests >= self.per_day:
                raise RateLimitExceeded("Rate limit exceeded. Please try again later.")
            use_fallback = len(self._requests) >= self.per_minute

            self._requests.append(now)
            self.daily_requests += 1
            return use_fallback

    @property
    def window_size(self) -> int:
        with self._lock:
            return len(self._requests)


def _get_client() -> genai.Client:
    settings = get_settings()
    if not settings.gemini_api_key:
        raise EnhancementFailed(
            "Gemini API key not configured. Get one at "
            "https://aistudio.google.com/apikey and set GEMINI_API_KEY in .env"
        )
    return genai.Client(
        api_key=settings.gemini_api_key,
        http_options=types.HttpOptions(timeout=settings.enhance_timeout_ms),
    )


class EnhancementGateway:
    """Dispatches enhancement prompts to Gemini under a shared RateLimiter."""

    def __init__(
        self,
        limiter: RateLimiter,
        primary_model: str = "gemini-2.0-flash-exp",
        fallback_model: str = "gemini-2.0-flash-lite",
    ):
        self.limiter = limiter
        self.primary_model = primary_model
        self.fallback_model = fallback_model

    def enhance(self, text: str, kind: EnhancementType | str = EnhancementType.GENERAL) -> str:
        """Return the provider's raw rewrite of text. Never returns partial text."""
        kind = EnhancementType.parse(kind)
        try:
            use_fallback = self.limiter.acquire()
        except RateLimitExceeded:
            logger.warning("Daily enhancement budget exhausted ({} requests)", self.limiter.per_day)
            raise
        model = self.fallback_model if use_fallback else self.primary_model
        logger.info("Enhancing {} chars as '{}' with {}", len(text), kind.value, model)

        prompt = build_prompt(text, kind)
        try:
            response = _get_client().models.generate_content(model=model, contents=prompt)
            result = response.text
        except EnhancementFailed:
            raise
        except Exception as e:
            logger.opt(exception=e).error("Gemini API error")
            raise EnhancementFailed("Failed to enhance task. Please try again.") from e
        if not result:
            raise EnhancementFailed("Failed to enhance task. Please try again.")
        return result


@lru_cache
def get_gateway() -> EnhancementGateway:
    settings = get_settings()
    limiter = RateLimiter(settings.requests_per_minute, settings.requests_per_day)
    return EnhancementGateway(limiter, settings.primary_model, settings.fallback_model)
