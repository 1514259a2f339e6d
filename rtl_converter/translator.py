"""
Translation Module

This module translates UI strings through the Gemini generateContent API.
Strings are sent in fixed-size batches; each batch walks a chain of
fallback models, retrying rate-limited requests with server-suggested
backoff, and the first model that succeeds is reused for later batches.
"""

import json
import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from .backoff import (
    DEFAULT_RETRY_DELAY,
    MAX_RETRY_DELAY,
    RETRY_PADDING,
    Sleeper,
    parse_retry_delay,
)
from .channel import LoggingChannel, MessageChannel
from .models import LogType
from .scanner import normalize_whitespace

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"

# Fallback chain, tried in order
DEFAULT_MODELS = [
    "gemini-2.0-flash-lite",
    "gemini-2.0-flash",
    "gemini-1.5-flash",
    "gemini-1.5-flash-8b",
]

LANGUAGE_NAMES = {
    "ar": "Arabic",
    "he": "Hebrew",
    "fa": "Persian",
    "ur": "Urdu",
}
DEFAULT_LANGUAGE_NAME = "Arabic"

BATCH_SIZE = 50
MAX_ATTEMPTS = 3
BATCH_PAUSE_SECONDS = 2.0

# Share of overall conversion progress taken by translation
TRANSLATION_PROGRESS_SHARE = 40

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


class ModelRequestError(Exception):
    """A model answered with a non-success HTTP status."""

    def __init__(self, model: str, status_code: int, body: str = ""):
        super().__init__(f"{model} error {status_code}: {body[:200]}")
        self.model = model
        self.status_code = status_code
        self.body = body


class RateLimitError(ModelRequestError):
    """HTTP 429 from the model endpoint."""


class ResponseParseError(ValueError):
    """The model response did not contain a usable JSON mapping."""


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get((code or "").lower(), DEFAULT_LANGUAGE_NAME)


def partition_batches(texts: List[str], batch_size: int = BATCH_SIZE) -> List[List[str]]:
    """Split texts into contiguous batches of at most ``batch_size``."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [texts[i:i + batch_size] for i in range(0, len(texts), batch_size)]


def build_prompt(batch: List[str], lang_name: str) -> str:
    """Build the translation instruction block for one batch."""
    return f"""You are a professional UI/UX translator. Translate these user interface strings to {lang_name}.

RULES:
- Return ONLY valid JSON object, no markdown, no explanation
- Keep numbers as standard digits (123), NOT {lang_name} numerals
- Keep proper nouns, brand names, and email addresses unchanged
- Keep date formats readable in {lang_name}
- Translations should be natural and concise for mobile UI
- If a string is already in {lang_name}, return it as-is
- Maintain line breaks if present in the original

INPUT:
{json.dumps(batch, ensure_ascii=False)}

OUTPUT (JSON object mapping each input string to its {lang_name} translation):"""


def parse_translation_text(content: str) -> Dict[str, str]:
    """
    Parse model output into a string-to-string mapping.

    The text is parsed directly first; if that fails, the outermost
    ``{...}`` span is extracted from any surrounding prose and parsed.
    Null and nested values are dropped; numbers are kept as strings.

    Raises:
        ResponseParseError: if neither attempt yields a JSON object
    """
    if not isinstance(content, str):
        raise ResponseParseError(f"Expected response text, got {type(content).__name__}")

    try:
        parsed = json.loads(content)
    except ValueError:
        match = _JSON_OBJECT_PATTERN.search(content)
        if not match:
            raise ResponseParseError("Could not parse Gemini response as JSON")
        try:
            parsed = json.loads(match.group(0))
        except ValueError as e:
            raise ResponseParseError(f"Could not parse Gemini response as JSON: {e}")

    if not isinstance(parsed, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(parsed).__name__}")

    result = {}
    for key, value in parsed.items():
        if isinstance(value, str):
            result[key] = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            result[key] = str(value)

    dropped = len(parsed) - len(result)
    if dropped:
        logger.warning(f"Dropped {dropped} translation(s) with null or non-text values")
    return result


def extract_candidate_text(data: Any) -> str:
    """Pull the generated text out of a generateContent response body."""
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise ResponseParseError(f"Unexpected response shape: {e!r}")


class TranslationBackend(ABC):
    """Abstract base class for model backends."""

    @abstractmethod
    async def generate(self, model: str, prompt: str) -> str:
        """
        Send one prompt to one model and return the generated text.

        Raises:
            RateLimitError: the model is rate limited
            ModelRequestError: any other non-success status
            ResponseParseError: the body has no generated text
        """
        pass

    async def aclose(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


class GeminiBackend(TranslationBackend):
    """Google Gemini generateContent backend."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = GEMINI_ENDPOINT,
        temperature: float = 0.1,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the Gemini backend.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter
            endpoint: API base URL
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            client: Shared HTTP client (one is created and owned if None)
        """
        if not api_key:
            raise ValueError("A Gemini API key is required")
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.temperature = temperature
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def model_url(self, model: str) -> str:
        return f"{self.endpoint}/models/{model}:generateContent"

    async def generate(self, model: str, prompt: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "responseMimeType": "application/json",
            },
        }
        response = await self.client.post(
            self.model_url(model),
            params={"key": self.api_key},
            json=payload,
        )

        if response.status_code == 429:
            raise RateLimitError(model, response.status_code, response.text)
        if not response.is_success:
            raise ModelRequestError(model, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise ResponseParseError(f"{model} returned a non-JSON body: {e}")
        return extract_candidate_text(data)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


class Translator:
    """
    Batch translator with model fallback and rate-limit recovery.

    Translation failures never escape ``translate``: a batch that no model
    could handle is logged and skipped, and the caller receives whatever
    part of the mapping was produced.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        models: Optional[List[str]] = None,
        batch_size: int = BATCH_SIZE,
        max_attempts: int = MAX_ATTEMPTS,
        batch_pause: float = BATCH_PAUSE_SECONDS,
        default_retry_delay: int = DEFAULT_RETRY_DELAY,
        retry_padding: int = RETRY_PADDING,
        max_retry_delay: int = MAX_RETRY_DELAY,
        sleeper: Optional[Sleeper] = None,
        channel: Optional[MessageChannel] = None,
    ):
        self.backend = backend
        self.models = list(models or DEFAULT_MODELS)
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.batch_pause = batch_pause
        self.default_retry_delay = default_retry_delay
        self.retry_padding = retry_padding
        self.max_retry_delay = max_retry_delay
        self.sleeper = sleeper or Sleeper()
        self.channel = channel or LoggingChannel()

        # Model that last succeeded; reset for every translate() run
        self.working_model: Optional[str] = None

        logger.info(f"Translator initialized:")
        logger.info(f"  - Model chain: {', '.join(self.models)}")
        logger.info(f"  - Batch size: {batch_size}, attempts per model: {max_attempts}")

    async def translate(self, texts: List[str], target_language: str) -> Dict[str, str]:
        """
        Translate unique source strings.

        Args:
            texts: Unique, trimmed source strings
            target_language: Target language code (ar, he, fa, ur)

        Returns:
            Mapping from source string to translation (possibly partial)
        """
        self.working_model = None
        translations: Dict[str, str] = {}
        if not texts:
            return translations

        lang_name = language_name(target_language)
        batches = partition_batches(texts, self.batch_size)
        total = len(texts)
        processed = 0

        logger.info(f"Translating {total} strings to {lang_name} in {len(batches)} batches...")

        for batch_num, batch in enumerate(batches, start=1):
            self.channel.progress(
                math.floor(processed / total * TRANSLATION_PROGRESS_SHARE),
                f"Translating batch {batch_num}/{len(batches)}...",
            )

            result = await self._translate_batch(batch, build_prompt(batch, lang_name), batch_num)
            if result is None:
                self.channel.log(
                    f"Batch {batch_num}: ALL models failed. Skipping batch.", LogType.ERROR
                )
            else:
                for source, target in result.items():
                    translations.setdefault(source, target)

            processed += len(batch)

            # Small delay between batches to avoid rate limits
            if batch_num < len(batches):
                await self.sleeper(self.batch_pause)

        logger.info(f"Received {len(translations)} translations for {total} strings")
        return translations

    async def _translate_batch(
        self, batch: List[str], prompt: str, batch_num: int
    ) -> Optional[Dict[str, str]]:
        """Try each candidate model in turn. Returns None if all fail."""
        # A cached working model is the only candidate
        models_to_try = [self.working_model] if self.working_model else self.models

        for model in models_to_try:
            parsed = await self._try_model(model, prompt)
            if parsed is None:
                continue

            result = self._filter_to_batch(parsed, batch)
            self.working_model = model
            self.channel.log(
                f"Batch {batch_num}: translated {len(parsed)} strings via {model}",
                LogType.SUCCESS,
            )
            return result

        return None

    async def _try_model(self, model: str, prompt: str) -> Optional[Dict[str, str]]:
        """Up to ``max_attempts`` requests against one model."""
        for attempt in range(1, self.max_attempts + 1):
            self.channel.log(f"Trying {model} (attempt {attempt})...")
            try:
                content = await self.backend.generate(model, prompt)
                return parse_translation_text(content)

            except RateLimitError as e:
                delay = parse_retry_delay(
                    e.body,
                    default=self.default_retry_delay,
                    padding=self.retry_padding,
                    cap=self.max_retry_delay,
                )
                if attempt < self.max_attempts:
                    self.channel.log(
                        f"Rate limited on {model}. Waiting {delay}s before retry...",
                        LogType.ERROR,
                    )
                    await self.sleeper(delay)
                    continue
                self.channel.log(
                    f"{model}: {self.max_attempts} retries exhausted. Trying next model...",
                    LogType.ERROR,
                )
                return None

            except ModelRequestError as e:
                self.channel.log(f"{model}: {e}", LogType.ERROR)
                return None

            except (ResponseParseError, httpx.HTTPError) as e:
                logger.debug(f"{model} attempt {attempt} failed: {e}")
                if attempt == self.max_attempts:
                    self.channel.log(f"{model}: {e}", LogType.ERROR)

        return None

    @staticmethod
    def _filter_to_batch(parsed: Dict[str, str], batch: List[str]) -> Dict[str, str]:
        """Drop keys the model returned that were never requested."""
        requested = set(batch)
        requested.update(normalize_whitespace(text) for text in batch)
        result = {k: v for k, v in parsed.items() if k in requested}
        dropped = len(parsed) - len(result)
        if dropped:
            logger.warning(f"Ignoring {dropped} unrequested keys in model response")
        return result
