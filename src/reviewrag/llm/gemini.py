"""Google Gemini LLM service implementation."""

import asyncio
import logging

from google import genai

from reviewrag.constants import get_embedding_model

logger = logging.getLogger(__name__)


class GeminiService:
    """Google Gemini LLM service implementation.

    This service uses the Google Gemini API to generate review responses and
    embeddings. The API key is automatically retrieved from the GEMINI_API_KEY
    environment variable.
    """

    def __init__(self, model: str) -> None:
        """Initialize the Gemini service.

        Args:
            model: The model name to use (e.g., "gemini-2.5-flash")
        """
        self.model = model
        logger.info(f"🤖 Initializing GeminiService: model={model}")
        # The client gets the API key from the GEMINI_API_KEY environment variable
        self.client = genai.Client()

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a response using Gemini.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.
                     System messages become the system instruction; the rest are
                     joined into a single prompt.

        Returns:
            str: The generated response content from the model.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Messages: {len(messages)} messages")

        system_parts = [m.get("content", "") for m in messages if m.get("role") == "system"]
        contents = "\n".join(
            m.get("content", "") for m in messages if m.get("role") != "system"
        )

        generate_kwargs = {"model": self.model, "contents": contents}
        if system_parts:
            generate_kwargs["config"] = genai.types.GenerateContentConfig(
                system_instruction="\n".join(system_parts),
            )

        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content, **generate_kwargs
            )
        except Exception as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            raise

        content = response.text or ""
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Generate embeddings for a list of texts using Gemini.

        Args:
            texts: List of text strings to embed
            model: Optional embedding model name. If None, uses EMBEDDING_MODEL env var
                   or service-specific default.

        Returns:
            list[list[float]]: List of embedding vectors
        """
        embedding_model = model or get_embedding_model("gemini")
        embeddings = []

        for text in texts:
            try:
                response = self.client.models.embed_content(model=embedding_model, contents=[text])
                embeddings.append(response.embeddings[0].values)
            except Exception as e:
                logger.error(f"❌ Gemini embedding error for text: {e}", exc_info=True)
                raise

        logger.debug(f"Generated {len(embeddings)} embeddings with {embedding_model}")
        return embeddings
