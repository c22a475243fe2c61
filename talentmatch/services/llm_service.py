"""
LLM Service
Wrapper for the LLM backends (OpenAI, LM Studio, Ollama) used by the AI
augmentation layer.

- Minimum delay between outbound calls (rate limit)
- Retry with linear backoff (attempt * backoff_seconds)
- Response cache keyed by the SHA-256 of the prompt
"""

import hashlib
import json
import os
import re
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import ollama
from openai import OpenAI

from talentmatch.config import PLACEHOLDER_API_KEYS, PROVIDERS
from talentmatch.exceptions import AugmentationUnavailableError
from talentmatch.services.logging_utils import print_with_prefix


DEFAULT_SYSTEM_PROMPT = (
    "You are an expert HR analyst specializing in technical skill assessment and "
    "candidate evaluation. Provide concise, accurate analysis in JSON format when requested."
)


class LLMService:
    """
    Service for talking to an LLM backend.

    `is_available` is decided once at construction; when it is False every
    call raises AugmentationUnavailableError without touching the network.
    """

    def __init__(
        self,
        provider: str = "openai",
        model: Optional[str] = None,
        temperature: float = 0.3,
        timeout: int = 60,
        max_tokens: int = 500,
        openai_api_key: Optional[str] = None,
        lmstudio_base_url: Optional[str] = None,
        lmstudio_api_key: Optional[str] = None,
        rate_limit_seconds: float = 1.0,
        max_retries: int = 3,
        retry_backoff_seconds: float = 1.0,
        enable_cache: bool = True,
        max_cache_size: int = 256,
        check_availability: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        verbose: bool = True
    ):
        """
        Initialize the service.

        Args:
            provider: "openai", "lmstudio" or "ollama"
            model: Model name (default depends on the provider)
            temperature: Default sampling temperature
            timeout: Request timeout in seconds (OpenAI-compatible backends)
            max_tokens: Max tokens per completion
            openai_api_key: API key (default: env OPENAI_API_KEY)
            lmstudio_base_url: LM Studio endpoint (default: env LMSTUDIO_BASE_URL or http://localhost:1234/v1)
            lmstudio_api_key: LM Studio key (default: env LMSTUDIO_API_KEY or "lmstudio")
            rate_limit_seconds: Minimum delay between two outbound calls
            max_retries: Attempts per call before giving up
            retry_backoff_seconds: Backoff unit, attempt N waits N * this value
            enable_cache: Cache responses by prompt hash
            max_cache_size: Cached responses kept; the oldest entry is evicted first
            check_availability: Probe the backend in the constructor
            sleep: Sleep function (injected in tests)
            verbose: Log availability and failures
        """
        self.provider = (provider or "openai").lower()
        if self.provider not in PROVIDERS:
            raise ValueError(f"provider must be one of {sorted(PROVIDERS)}")

        self.model = model or {
            "openai": "gpt-3.5-turbo",
            "lmstudio": "meta-llama-3.1-8b-instruct",
            "ollama": "llama3.2",
        }[self.provider]
        self.temperature = temperature
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.rate_limit_seconds = rate_limit_seconds
        self.max_retries = max(1, max_retries)
        self.retry_backoff_seconds = retry_backoff_seconds
        self.enable_cache = enable_cache
        self.max_cache_size = max(1, max_cache_size)
        self.verbose = verbose
        self._sleep = sleep

        self.openai_api_key = openai_api_key if openai_api_key is not None else os.getenv("OPENAI_API_KEY", "")
        self.lmstudio_base_url = lmstudio_base_url or os.getenv("LMSTUDIO_BASE_URL", "http://localhost:1234/v1")
        self.lmstudio_api_key = lmstudio_api_key or os.getenv("LMSTUDIO_API_KEY", "lmstudio")

        self.is_available = False
        self.request_count = 0
        self._client: Optional[OpenAI] = None
        self._last_request_time = 0.0
        self._rate_lock = threading.Lock()
        self._cache: Dict[str, str] = {}
        self._cache_lock = threading.Lock()

        if check_availability:
            self.check_availability()

    # ═══════════════════════════════════════════════════════════════
    # Availability
    # ═══════════════════════════════════════════════════════════════

    @property
    def has_credentials(self) -> bool:
        if self.provider == "openai":
            return (self.openai_api_key or "").strip() not in PLACEHOLDER_API_KEYS
        return True

    def check_availability(self) -> bool:
        if self.provider == "openai":
            self._check_openai()
        elif self.provider == "lmstudio":
            self._check_lmstudio()
        else:
            self._check_ollama()
        return self.is_available

    def _check_openai(self) -> None:
        """OpenAI is considered available as soon as a real API key is configured."""
        if not self.has_credentials:
            self.is_available = False
            self._log("OPENAI_API_KEY not set: AI augmentation will use local fallbacks")
            return
        self._get_client()
        self.is_available = True
        self._log(f"LLM Service ready (provider: openai, model: {self.model})")

    def _check_lmstudio(self) -> None:
        try:
            listing = self._get_client().models.list()
        except Exception as e:
            self.is_available = False
            self._log(f"LM Studio not reachable at {self.lmstudio_base_url}: {e}")
            return
        self._mark_model_loaded([m.id for m in getattr(listing, "data", None) or []])

    def _check_ollama(self) -> None:
        try:
            listing = ollama.list()
        except Exception as e:
            self.is_available = False
            self._log(f"Ollama not reachable ({e}). Start it with: ollama serve")
            return
        self._mark_model_loaded([m.model for m in listing.models or [] if m.model])
        if not self.is_available:
            self._log(f"Run: ollama pull {self.model}")

    def _mark_model_loaded(self, served: List[str]) -> None:
        """A local backend is usable only when it serves the configured model (tag suffixes allowed)."""
        self.is_available = any(name.startswith(self.model) or self.model in name for name in served)
        if self.is_available:
            self._log(f"LLM Service ready (provider: {self.provider}, model: {self.model})")
        else:
            self._log(f"Model '{self.model}' not served by {self.provider}. Available: {served}")

    def _get_client(self) -> OpenAI:
        """Lazily build the OpenAI-compatible client (OpenAI or LM Studio)."""
        if self._client is None:
            if self.provider == "lmstudio":
                self._client = OpenAI(
                    base_url=self.lmstudio_base_url,
                    api_key=self.lmstudio_api_key,
                    timeout=self.timeout,
                )
            else:
                self._client = OpenAI(api_key=self.openai_api_key, timeout=self.timeout)
        return self._client

    # ═══════════════════════════════════════════════════════════════
    # Generation
    # ═══════════════════════════════════════════════════════════════

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: User prompt
            system_prompt: System prompt (default: HR analyst persona)
            temperature: Temperature override
            max_tokens: Max tokens override

        Returns:
            Text produced by the model

        Raises:
            AugmentationUnavailableError: backend unavailable or every retry failed
        """
        if not self.is_available:
            raise AugmentationUnavailableError(
                f"LLM backend '{self.provider}' not available (model: {self.model})"
            )

        system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        cache_key = self._cache_key(system_prompt, prompt)
        if self.enable_cache:
            with self._cache_lock:
                cached = self._cache.get(cache_key)
            if cached is not None:
                self._log(f"Cache hit ({cache_key[:8]})")
                return cached

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        temperature = self.temperature if temperature is None else temperature
        max_tokens = max_tokens or self.max_tokens

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            self._enforce_rate_limit()
            try:
                content = self._call_backend(messages, temperature, max_tokens)
                if not isinstance(content, str) or not content.strip():
                    raise ValueError(f"Empty or non-text response from {self.provider}: {type(content).__name__}")
                self.request_count += 1
                if self.enable_cache:
                    self._store(cache_key, content)
                return content
            except Exception as e:
                last_error = e
                self._log(f"{self.provider} call attempt {attempt}/{self.max_retries} failed: {e}")
                if attempt < self.max_retries:
                    self._sleep(attempt * self.retry_backoff_seconds)

        raise AugmentationUnavailableError(
            f"All {self.max_retries} attempts to {self.provider} failed: {last_error}"
        ) from last_error

    def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Generate and parse a JSON object.

        Returns:
            Parsed dict, or None when the response contains no usable JSON
        """
        if "json" not in prompt.lower():
            prompt += "\n\nRespond only with valid JSON, no other text."

        response_text = self.generate(prompt, system_prompt, temperature, max_tokens)
        return self._extract_json(response_text)

    def _call_backend(self, messages: List[Dict[str, str]], temperature: float, max_tokens: int) -> str:
        if self.provider == "ollama":
            response = ollama.chat(
                model=self.model,
                messages=messages,
                options={"temperature": temperature, "num_predict": max_tokens},
            )
            return response.message.content

        response = self._get_client().chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content

    def _enforce_rate_limit(self) -> None:
        """Serialize outbound calls so that two calls are at least rate_limit_seconds apart."""
        with self._rate_lock:
            elapsed = time.monotonic() - self._last_request_time
            if self._last_request_time and elapsed < self.rate_limit_seconds:
                self._sleep(self.rate_limit_seconds - elapsed)
            self._last_request_time = time.monotonic()

    @staticmethod
    def _cache_key(system_prompt: str, prompt: str) -> str:
        return hashlib.sha256(f"{system_prompt}\n{prompt}".encode("utf-8")).hexdigest()

    def _store(self, cache_key: str, content: str) -> None:
        with self._cache_lock:
            self._cache.pop(cache_key, None)
            self._cache[cache_key] = content
            while len(self._cache) > self.max_cache_size:
                # dicts keep insertion order: the first key is the oldest
                del self._cache[next(iter(self._cache))]

    def clear_cache(self) -> None:
        """Drop every cached response. The cache is also bounded by max_cache_size."""
        with self._cache_lock:
            self._cache.clear()

    @property
    def cache_size(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    @staticmethod
    def _extract_json(text: Any) -> Optional[Dict[str, Any]]:
        """
        Pull the first JSON object out of a model reply.

        Tries, in order: the whole reply, the body of a ```json / ``` fence,
        then the first '{' from which a complete object decodes.
        Anything that is not a string, or holds no object, gives None.
        """
        if not isinstance(text, str) or not text.strip():
            return None

        candidates = [text.strip()]
        fence = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', text)
        if fence:
            candidates.append(fence.group(1))

        for candidate in candidates:
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                return parsed

        decoder = json.JSONDecoder()
        start = text.find('{')
        while start != -1:
            try:
                parsed, _ = decoder.raw_decode(text, start)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                return parsed
            start = text.find('{', start + 1)

        return None

    def _log(self, message: str) -> None:
        print_with_prefix("[LLMService]", message, enabled=self.verbose)
