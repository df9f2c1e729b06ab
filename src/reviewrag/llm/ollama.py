"""Ollama LLM service implementation."""

import asyncio
import logging

import ollama

from reviewrag.constants import DEFAULT_LLM_TIMEOUT, get_embedding_model

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama LLM service implementation.

    This service uses the Ollama API to generate review responses and
    embeddings from local models.
    """

    def __init__(self, host: str, model: str, timeout: float = DEFAULT_LLM_TIMEOUT) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The chat model name to use (e.g., "llama3")
            timeout: Seconds before an HTTP request to Ollama is abandoned
        """
        self.host = host
        self.model = model
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")
        # Configure the Ollama client with the specified host
        self.client = ollama.Client(host=host, timeout=timeout)

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a response using Ollama.

        The blocking client call runs in a worker thread so several files can
        be reviewed concurrently.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Returns:
            str: The generated response content from the model.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Messages: {len(messages)} messages")
        for i, msg in enumerate(messages):
            role = msg.get("role", "unknown")
            content_preview = msg.get("content", "")[:100]
            logger.debug(f"  Message {i + 1} ({role}): {content_preview}...")

        try:
            response = await asyncio.to_thread(
                self.client.chat, model=self.model, messages=messages
            )
        except Exception as e:
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            raise

        content = response.message.content or ""
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Generate embeddings for a list of texts using Ollama.

        Args:
            texts: List of text strings to embed
            model: Optional embedding model name. If None, uses EMBEDDING_MODEL env var
                   or service-specific default.

        Returns:
            list[list[float]]: List of embedding vectors
        """
        embedding_model = model or get_embedding_model("ollama")
        embeddings = []

        for text in texts:
            response = self.client.embed(model=embedding_model, input=text)
            embeddings.append(response["embeddings"][0])

        logger.debug(f"Generated {len(embeddings)} embeddings with {embedding_model}")
        return embeddings
