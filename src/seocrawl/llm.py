"""LLM client used by the page analyzer and link extractor."""

from typing import Optional
import os
import time
import logging

from seocrawl.constants import (
    DEFAULT_LLM_MAX_RETRIES,
    DEFAULT_LLM_MAX_TOKENS,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_PROVIDER,
    INITIAL_LLM_RETRY_DELAY_SECONDS,
    LLM_RETRY_BACKOFF_FACTOR,
    SUPPORTED_LLM_PROVIDERS,
)
from seocrawl.exceptions import LLMError

logger = logging.getLogger(__name__)

# Substrings of provider errors that retrying cannot fix
NON_RETRYABLE_ERRORS = (
    'invalid api key',
    'api key not valid',
    'authentication',
    'unauthorized',
    'permission denied',
    'invalid_api_key',
    'model not found',
    'invalid model',
)


class LLMClient:
    """Client for sending prompts to an LLM provider and returning raw text.

    Provider SDKs are imported lazily, so only the SDK of the configured
    provider needs to be installed.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_LLM_MODEL,
        provider: str = DEFAULT_LLM_PROVIDER,
        max_tokens: int = DEFAULT_LLM_MAX_TOKENS,
        max_retries: int = DEFAULT_LLM_MAX_RETRIES,
        retry_delay: float = INITIAL_LLM_RETRY_DELAY_SECONDS,
        backoff_factor: float = LLM_RETRY_BACKOFF_FACTOR,
        request_timeout: Optional[float] = None,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for the LLM provider
            model: Model name to use
            provider: LLM provider (gemini, openai, anthropic)
            max_tokens: Maximum tokens for LLM response (default: 8192)
            max_retries: Retries for transient failures (default: 0)
            retry_delay: Initial delay between retries in seconds (default: 2.0)
            backoff_factor: Multiplier for delay after each retry (default: 2.0)
            request_timeout: Seconds before the provider SDK abandons a request
                (default: the SDK's own timeout)
        """
        self.api_key = api_key or os.getenv("LLM_API_KEY")
        if not self.api_key and provider == "gemini":
            self.api_key = os.getenv("GOOGLE_API_KEY")
        self.model = model
        self.provider = provider
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.backoff_factor = backoff_factor
        self.request_timeout = request_timeout

        if not self.api_key:
            raise ValueError(
                "API key must be provided or set in LLM_API_KEY environment variable"
            )
        if provider not in SUPPORTED_LLM_PROVIDERS:
            raise LLMError(f"Unsupported provider: {provider}")

    def generate(self, prompt: str, temperature: float = 0.0, response_schema: Optional[dict] = None) -> str:
        """Send a prompt that expects a JSON reply, with retry logic.

        Transient failures (connection errors, rate limits, timeouts) are
        retried with exponential backoff up to ``max_retries`` times.
        Non-retryable errors (auth, invalid model) are raised immediately.

        Args:
            prompt: The prompt to send
            temperature: Sampling temperature
            response_schema: Optional Gemini response schema constraining the
                reply; other providers rely on the prompt alone

        Returns:
            LLM response text

        Raises:
            LLMError: If the call fails and retries are exhausted
        """
        current_delay = self.retry_delay

        for attempt in range(self.max_retries + 1):
            try:
                if self.provider == "gemini":
                    return self._call_gemini(prompt, temperature, response_schema)
                elif self.provider == "openai":
                    return self._call_openai(prompt, temperature)
                return self._call_anthropic(prompt, temperature)

            except ImportError as e:
                raise LLMError(str(e)) from e

            except Exception as e:
                error_str = str(e).lower()

                if any(err in error_str for err in NON_RETRYABLE_ERRORS):
                    logger.error(f"Non-retryable LLM error: {e}")
                    raise LLMError(str(e)) from e

                if attempt < self.max_retries:
                    logger.warning(
                        f"LLM call failed (attempt {attempt + 1}/{self.max_retries + 1}): {e}. "
                        f"Retrying in {current_delay:.1f}s..."
                    )
                    time.sleep(current_delay)
                    current_delay *= self.backoff_factor
                else:
                    logger.error(
                        f"LLM call failed after {self.max_retries + 1} attempts: {e}"
                    )
                    raise LLMError(str(e)) from e

    def _call_gemini(self, prompt: str, temperature: float, response_schema: Optional[dict] = None) -> str:
        """Call the Gemini API in JSON mode.

        Args:
            prompt: The prompt to send
            temperature: Sampling temperature
            response_schema: Optional schema for structured output

        Returns:
            Response text
        """
        try:
            from google import genai
            from google.genai import types
        except ImportError:
            raise ImportError(
                "google-genai package not installed. Install with: pip install google-genai"
            )

        http_options = None
        if self.request_timeout:
            http_options = types.HttpOptions(timeout=int(self.request_timeout * 1000))

        client = genai.Client(api_key=self.api_key, http_options=http_options)
        response = client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_schema,
                temperature=temperature,
                max_output_tokens=self.max_tokens,
            ),
        )
        return response.text or ""

    def _call_openai(self, prompt: str, temperature: float) -> str:
        """Call OpenAI API.

        Args:
            prompt: The prompt to send
            temperature: Sampling temperature

        Returns:
            Response text
        """
        try:
            import openai
        except ImportError:
            raise ImportError(
                "openai package not installed. Install with: pip install 'seocrawl[openai]'"
            )

        client = openai.OpenAI(**self._sdk_client_kwargs())
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": "You are an expert technical SEO crawler. Reply with JSON only.",
                },
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    def _call_anthropic(self, prompt: str, temperature: float) -> str:
        """Call Anthropic API.

        Args:
            prompt: The prompt to send
            temperature: Sampling temperature

        Returns:
            Response text
        """
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic package not installed. Install with: pip install 'seocrawl[anthropic]'"
            )

        client = anthropic.Anthropic(**self._sdk_client_kwargs())
        response = client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text

    def _sdk_client_kwargs(self) -> dict:
        kwargs = {"api_key": self.api_key}
        if self.request_timeout:
            kwargs["timeout"] = self.request_timeout
        return kwargs
