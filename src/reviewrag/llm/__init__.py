"""LLM service abstraction layer for reviewrag.

This package provides a unified interface for multiple LLM providers:
- OllamaService: Local LLM via Ollama
- GeminiService: Google Gemini API

All services implement the LLMService protocol, which covers both chat
completion (used by review agents) and embeddings (used by the context engine).

Usage:
    from reviewrag.llm import get_llm_service, LLMService

    # Create service from environment config
    service = get_llm_service()

    # Or with explicit config
    service = get_llm_service({"service": "gemini", "model": "gemini-2.5-flash"})
"""

from reviewrag.llm.base import LLMService
from reviewrag.llm.factory import get_llm_service
from reviewrag.llm.gemini import GeminiService
from reviewrag.llm.ollama import OllamaService

__all__ = [
    "LLMService",
    "OllamaService",
    "GeminiService",
    "get_llm_service",
]
