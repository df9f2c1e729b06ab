"""Tests for the LLM service providers."""

import os
from unittest.mock import MagicMock, patch

import pytest

from reviewrag.context.similarity import cosine_similarity
from reviewrag.llm import GeminiService, OllamaService, get_llm_service


def _chat_response(content):
    mock_message = MagicMock()
    mock_message.content = content
    mock_response = MagicMock()
    mock_response.message = mock_message
    return mock_response


class TestOllamaService:
    """Tests for OllamaService class."""

    @pytest.mark.asyncio
    async def test_generate_response_success(self):
        """Test successful response generation."""
        service = OllamaService(host="http://test:11434", model="test-model")
        service.client.chat = MagicMock(return_value=_chat_response("[]"))

        messages = [{"role": "user", "content": "Review this diff"}]
        response = await service.generate_response(messages)

        assert response == "[]"
        service.client.chat.assert_called_once_with(model="test-model", messages=messages)

    @pytest.mark.asyncio
    async def test_generate_response_empty_content(self):
        service = OllamaService(host="http://test:11434", model="test-model")
        service.client.chat = MagicMock(return_value=_chat_response(None))

        assert await service.generate_response([{"role": "user", "content": "x"}]) == ""

    @pytest.mark.asyncio
    async def test_generate_response_error(self):
        """Test that API errors propagate to the caller."""
        service = OllamaService(host="http://test:11434", model="test-model")
        service.client.chat = MagicMock(side_effect=ConnectionError("Ollama not running"))

        with pytest.raises(ConnectionError):
            await service.generate_response([{"role": "user", "content": "x"}])

    def test_generate_embeddings_multiple_texts(self):
        """Test generating embeddings for multiple texts with OllamaService."""
        service = OllamaService(host="http://test:11434", model="test-model")
        service.client.embed = MagicMock(
            side_effect=[
                {"embeddings": [[0.1, 0.2]]},
                {"embeddings": [[0.3, 0.4]]},
            ]
        )

        embeddings = service.generate_embeddings(["def a(): pass", "def b(): pass"], "nomic-embed-text")

        assert embeddings == [[0.1, 0.2], [0.3, 0.4]]
        assert service.client.embed.call_count == 2

    def test_generate_embeddings_default_model(self):
        """Test generating embeddings with default model."""
        service = OllamaService(host="http://test:11434", model="test-model")
        service.client.embed = MagicMock(return_value={"embeddings": [[0.1, 0.2, 0.3]]})

        # Clear EMBEDDING_MODEL env to test default
        with patch.dict(os.environ, {}, clear=True):
            service.generate_embeddings(["test text"])

        service.client.embed.assert_called_once_with(model="nomic-embed-text", input="test text")

    @pytest.mark.integration
    @pytest.mark.requires_ollama
    def test_generate_embeddings_similarity(self, ollama_service):
        """Test that similar code has more similar embeddings than unrelated text."""
        embeddings = ollama_service.generate_embeddings(
            [
                "def total(items): return sum(item.price for item in items)",
                "def order_total(lines): return sum(line.amount for line in lines)",
                "Cooking delicious recipes",
            ],
            "nomic-embed-text",
        )

        assert cosine_similarity(embeddings[0], embeddings[1]) > cosine_similarity(
            embeddings[0], embeddings[2]
        )


class TestGetLLMService:
    """Tests for the get_llm_service factory."""

    @patch("reviewrag.llm.factory.OllamaService")
    def test_creates_ollama_service_with_env(self, mock_ollama_class):
        with patch.dict(
            os.environ,
            {
                "LLM_SERVICE": "ollama",
                "OLLAMA_HOST": "http://ollama:11434",
                "LLM_MODEL": "codellama",
                "LLM_TIMEOUT_SECONDS": "45",
            },
            clear=True,
        ):
            get_llm_service()

        mock_ollama_class.assert_called_once_with(
            host="http://ollama:11434", model="codellama", timeout=45.0
        )

    @patch("reviewrag.llm.factory.OllamaService")
    def test_uses_hardcoded_defaults_when_no_env(self, mock_ollama_class):
        with patch.dict(os.environ, {}, clear=True):
            get_llm_service()

        mock_ollama_class.assert_called_once_with(
            host="http://localhost:11434", model="llama3", timeout=120.0
        )

    @patch("reviewrag.llm.factory.GeminiService")
    def test_creates_gemini_service(self, mock_gemini_class):
        get_llm_service({"service": "gemini", "model": "gemini-2.5-pro"})
        mock_gemini_class.assert_called_once_with(model="gemini-2.5-pro")

    def test_raises_error_for_unsupported_service(self):
        with pytest.raises(ValueError, match="Unsupported service type: openai"):
            get_llm_service({"service": "openai"})


class TestGeminiService:
    """Tests for GeminiService class."""

    @pytest.mark.asyncio
    @patch("reviewrag.llm.gemini.genai.Client")
    async def test_generate_response_success(self, mock_client_class):
        mock_client = mock_client_class.return_value
        mock_client.models.generate_content.return_value = MagicMock(text="[]")

        service = GeminiService(model="gemini-2.5-flash")
        response = await service.generate_response([{"role": "user", "content": "Review"}])

        assert response == "[]"
        kwargs = mock_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["contents"] == "Review"
        assert "config" not in kwargs

    @pytest.mark.asyncio
    @patch("reviewrag.llm.gemini.genai.Client")
    async def test_generate_response_with_system_message(self, mock_client_class):
        mock_client = mock_client_class.return_value
        mock_client.models.generate_content.return_value = MagicMock(text="ok")

        service = GeminiService(model="gemini-2.5-flash")
        await service.generate_response(
            [
                {"role": "system", "content": "You review code."},
                {"role": "user", "content": "Review"},
            ]
        )

        kwargs = mock_client.models.generate_content.call_args.kwargs
        assert kwargs["contents"] == "Review"
        assert kwargs["config"].system_instruction == "You review code."

    @pytest.mark.asyncio
    @patch("reviewrag.llm.gemini.genai.Client")
    async def test_generate_response_error(self, mock_client_class):
        mock_client_class.return_value.models.generate_content.side_effect = RuntimeError("quota")

        service = GeminiService(model="gemini-2.5-flash")
        with pytest.raises(RuntimeError, match="quota"):
            await service.generate_response([{"role": "user", "content": "x"}])

    @patch("reviewrag.llm.gemini.genai.Client")
    def test_generate_embeddings_multiple_texts(self, mock_client_class):
        def create_mock_response(values):
            embedding = MagicMock()
            embedding.values = values
            response = MagicMock()
            response.embeddings = [embedding]
            return response

        mock_client = mock_client_class.return_value
        mock_client.models.embed_content.side_effect = [
            create_mock_response([0.1, 0.2]),
            create_mock_response([0.3, 0.4]),
        ]

        service = GeminiService(model="gemini-2.5-flash")
        with patch.dict(os.environ, {}, clear=True):
            embeddings = service.generate_embeddings(["a", "b"])

        assert embeddings == [[0.1, 0.2], [0.3, 0.4]]
        assert mock_client.models.embed_content.call_args.kwargs["model"] == "text-embedding-004"
