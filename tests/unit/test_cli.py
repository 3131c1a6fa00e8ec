"""Unit tests for the command-line interface."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from memtrace.chat import ChatResult
from memtrace.cli import app

runner = CliRunner()


@pytest.fixture
def traced_memory(sample_memories):
    memory = MagicMock()
    memory.search.return_value = sample_memories
    memory.get_all.return_value = sample_memories
    memory.add.return_value = [{"id": "m-3", "memory": "Likes Thai food", "event": "ADD"}]
    with patch("memtrace.cli._traced_memory", return_value=memory), patch(
        "memtrace.tracing.shutdown_tracing"
    ):
        yield memory


@pytest.mark.unit
class TestCLI:
    """Tests for CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "memtrace v0.1.0" in result.output

    def test_remember(self, traced_memory):
        result = runner.invoke(app, ["remember", "I like Thai food", "--user", "alice"])

        assert result.exit_code == 0
        assert "Likes Thai food" in result.output
        traced_memory.add.assert_called_once_with("I like Thai food", user_id="alice")

    def test_search(self, traced_memory):
        result = runner.invoke(app, ["search", "food", "-u", "alice", "-n", "2"])

        assert result.exit_code == 0
        assert "Is vegetarian" in result.output
        traced_memory.search.assert_called_once_with("food", user_id="alice", limit=2)

    def test_memories_empty(self, traced_memory):
        traced_memory.get_all.return_value = []

        result = runner.invoke(app, ["memories", "--user", "bob"])

        assert result.exit_code == 0
        assert "No memories stored for bob" in result.output

    def test_memory_failure_exits_nonzero(self, traced_memory):
        traced_memory.get_all.side_effect = ConnectionError("store down")

        result = runner.invoke(app, ["memories", "--user", "alice"])

        assert result.exit_code == 1
        assert "store down" in result.output

    def test_chat_single_message(self, traced_memory):
        with patch("memtrace.llm.create_llm", return_value=MagicMock()), patch(
            "memtrace.chat.MemoryAssistant"
        ) as mock_assistant:
            mock_assistant.return_value.chat.return_value = ChatResult(
                response="Hello Alice", memories=["Name is Alice"], trace_id="cd" * 16
            )

            result = runner.invoke(app, ["chat", "Hi", "--user", "alice", "--verbose"])

        assert result.exit_code == 0
        assert "Hello Alice" in result.output
        assert "Name is Alice" in result.output
        assert "cd" * 16 in result.output
        mock_assistant.return_value.chat.assert_called_once_with("Hi", user_id="alice")

    def test_trace_url(self):
        with patch("memtrace.config.settings") as mock_config, patch(
            "memtrace.tracing.project_url", return_value="http://localhost:6006/projects"
        ):
            mock_config.enable_tracing = True
            mock_config.log_level = "INFO"
            mock_config.phoenix_project_name = "mem0-phoenix-integration"

            result = runner.invoke(app, ["trace-url"])

        assert result.exit_code == 0
        assert "http://localhost:6006/projects" in result.output
        assert "mem0-phoenix-integration" in result.output


@pytest.mark.unit
class TestCLIShutdown:
    """Tracing is flushed even when clients cannot be created."""

    def test_memory_client_failure_shuts_down_tracing(self):
        with patch("memtrace.tracing.setup_tracing"), patch(
            "memtrace.tracing.shutdown_tracing"
        ) as mock_shutdown, patch(
            "memtrace.memory.create_memory", side_effect=ValueError("MEM0_API_KEY is required")
        ):
            result = runner.invoke(app, ["memories", "--user", "alice"])

        assert result.exit_code == 1
        assert "MEM0_API_KEY is required" in result.output
        mock_shutdown.assert_called_once()

    def test_chat_llm_failure_shuts_down_tracing(self, traced_memory):
        with patch("memtrace.llm.create_llm", side_effect=RuntimeError("bad LLM config")), patch(
            "memtrace.tracing.shutdown_tracing"
        ) as mock_shutdown:
            result = runner.invoke(app, ["chat", "Hi", "--user", "alice"])

        assert result.exit_code == 1
        assert "bad LLM config" in result.output
        mock_shutdown.assert_called_once()
