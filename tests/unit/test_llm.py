"""Unit tests for the chat completion client and LLM factory."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from memtrace.llm.factory import create_llm
from memtrace.llm.openai_compatible import ChatCompletionLLM


def _response(content: str = "Hello!", status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if status_code >= 400:
        error = requests.HTTPError(f"{status_code} error")
        error.response = response
        response.raise_for_status.side_effect = error
    return response


@pytest.fixture
def client():
    return ChatCompletionLLM(
        base_url="https://api.openai.com/v1/",
        model="gpt-4o-mini",
        api_key="sk-test",
        temperature=0.2,
        max_tokens=64,
        timeout=10,
        max_retries=3,
        retry_delay=0.5,
    )


@pytest.mark.unit
class TestChatCompletionLLM:
    """Tests for ChatCompletionLLM."""

    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_chat_posts_openai_payload(self, mock_post, client):
        mock_post.return_value = _response("Hi Alice")
        messages = [{"role": "user", "content": "Hi"}]

        assert client.chat(messages) == "Hi Alice"

        mock_post.assert_called_once_with(
            "https://api.openai.com/v1/chat/completions",
            json={
                "model": "gpt-4o-mini",
                "messages": messages,
                "temperature": 0.2,
                "max_tokens": 64,
            },
            headers={"Content-Type": "application/json", "Authorization": "Bearer sk-test"},
            timeout=10,
        )

    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_no_auth_header_without_key(self, mock_post):
        mock_post.return_value = _response()
        llm = ChatCompletionLLM(base_url="http://localhost:11434/v1", model="llama3")

        llm.invoke("Hi")

        _, kwargs = mock_post.call_args
        assert "Authorization" not in kwargs["headers"]
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "Hi"}]

    @patch("memtrace.llm.openai_compatible.time.sleep")
    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_retries_rate_limit_with_backoff(self, mock_post, mock_sleep, client):
        mock_post.side_effect = [_response(status_code=429), _response(status_code=503), _response("ok")]

        assert client.chat([{"role": "user", "content": "Hi"}]) == "ok"

        assert mock_post.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]

    @patch("memtrace.llm.openai_compatible.time.sleep")
    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_client_error_not_retried(self, mock_post, mock_sleep, client):
        mock_post.return_value = _response(status_code=401)

        with pytest.raises(requests.HTTPError):
            client.chat([{"role": "user", "content": "Hi"}])

        assert mock_post.call_count == 1
        mock_sleep.assert_not_called()

    @patch("memtrace.llm.openai_compatible.time.sleep")
    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_connection_error_raised_after_retries(self, mock_post, mock_sleep, client):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(requests.ConnectionError):
            client.chat([{"role": "user", "content": "Hi"}])

        assert mock_post.call_count == 3

    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_health_check(self, mock_post, client):
        response = _response()
        response.elapsed.total_seconds.return_value = 0.25
        mock_post.return_value = response

        healthy, message = client.health_check()

        assert healthy is True
        assert "0.25" in message

    @patch("memtrace.llm.openai_compatible.requests.post")
    def test_health_check_timeout(self, mock_post, client):
        mock_post.side_effect = requests.Timeout()

        healthy, message = client.health_check(timeout=5)

        assert healthy is False
        assert message == "Endpoint timed out after 5s"


@pytest.mark.unit
class TestCreateLLM:
    """Tests for create_llm factory function."""

    @patch("memtrace.config.settings")
    def test_create_llm_from_settings(self, mock_settings):
        mock_settings.llm_base_url = "https://api.openai.com/v1"
        mock_settings.llm_model = "gpt-4o-mini"
        mock_settings.openai_api_key_value = "sk-test"
        mock_settings.llm_temperature = 0.7
        mock_settings.llm_max_tokens = 512
        mock_settings.llm_timeout = 30
        mock_settings.llm_max_retries = 4
        mock_settings.llm_retry_delay = 1.0

        llm = create_llm()

        assert isinstance(llm, ChatCompletionLLM)
        assert llm.model == "gpt-4o-mini"
        assert llm.api_key == "sk-test"
        assert llm.temperature == 0.7
        assert llm.max_tokens == 512
        assert llm.max_retries == 4

    @patch("memtrace.config.settings")
    def test_create_llm_custom_temperature(self, mock_settings):
        mock_settings.llm_base_url = "https://api.openai.com/v1"
        mock_settings.llm_temperature = 0.7

        llm = create_llm(temperature=0.0)

        assert llm.temperature == 0.0
