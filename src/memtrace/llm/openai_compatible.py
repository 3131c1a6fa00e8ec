"""
Chat completion client for OpenAI-compatible endpoints.

Talks to any endpoint that implements the OpenAI chat completions API
(OpenAI itself, vLLM, Ollama, LiteLLM proxies, ...).
"""

import logging
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (429, 502, 503, 504)

Message = dict[str, str]


class ChatCompletionLLM:
    """LLM client for OpenAI-compatible chat completion endpoints."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        timeout: int = 60,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ):
        """
        Initialize the client.

        Args:
            base_url: API base URL, e.g. https://api.openai.com/v1
            model: Model name sent with every request
            api_key: Bearer token (omit for unauthenticated local servers)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts for rate-limit/gateway errors
            retry_delay: Initial delay between retries (uses exponential backoff)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def chat(self, messages: list[Message]) -> str:
        """
        Run a chat completion.

        Implements retry logic with exponential backoff for rate limits and
        gateway errors.

        Args:
            messages: Conversation as role/content dicts

        Returns:
            Content of the first choice

        Raises:
            requests.HTTPError: If the API request fails after all retries
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        for attempt in range(self.max_retries):
            try:
                response = requests.post(
                    self.endpoint_url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
                response.raise_for_status()

                result = response.json()
                return result["choices"][0]["message"]["content"] or ""

            except requests.HTTPError as e:
                if (
                    e.response is not None
                    and e.response.status_code in RETRYABLE_STATUS_CODES
                    and attempt < self.max_retries - 1
                ):
                    delay = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Endpoint returned {e.response.status_code}, "
                        f"retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise

            except (requests.Timeout, requests.ConnectionError) as e:
                if attempt < self.max_retries - 1:
                    delay = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Connection error: {str(e)}, "
                        f"retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise

        raise RuntimeError("All retry attempts failed")

    def invoke(self, prompt: str) -> str:
        """Call the LLM with a single user prompt."""
        return self.chat([{"role": "user", "content": prompt}])

    def health_check(self, timeout: int = 30) -> tuple[bool, str]:
        """
        Perform a quick health check on the endpoint.

        Sends a one-token completion with a shorter timeout than normal
        invocations for fast failure detection.

        Returns:
            Tuple of (is_healthy, message)
        """
        test_payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": "test"}],
            "temperature": 0.0,
            "max_tokens": 1,
        }

        try:
            logger.info(f"Performing health check on endpoint: {self.endpoint_url}")
            response = requests.post(
                self.endpoint_url,
                json=test_payload,
                headers=self._headers(),
                timeout=timeout,
            )
            response.raise_for_status()

            result = response.json()
            if result.get("choices"):
                elapsed = response.elapsed.total_seconds()
                logger.info(f"Endpoint health check passed ({elapsed:.2f}s)")
                return True, f"Endpoint healthy (responded in {elapsed:.2f}s)"

            error_msg = "Endpoint returned invalid response structure"
            logger.warning(error_msg)
            return False, error_msg

        except requests.Timeout:
            error_msg = f"Endpoint timed out after {timeout}s"
            logger.error(error_msg)
            return False, error_msg

        except requests.ConnectionError as e:
            error_msg = f"Connection failed: {str(e)}"
            logger.error(error_msg)
            return False, error_msg

        except requests.HTTPError as e:
            error_msg = f"HTTP {e.response.status_code}: {e.response.reason}"
            logger.error(error_msg)
            return False, error_msg
