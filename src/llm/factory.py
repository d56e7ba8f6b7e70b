from __future__ import annotations

from typing import TYPE_CHECKING

from src.config import settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_core.language_models.chat_models import BaseChatModel

# Valid provider identifiers
VALID_PROVIDERS = ("ollama", "openai", "anthropic")
EMBEDDING_PROVIDERS = ("ollama", "openai")

# Module-level caches, cleared by clear_llm_cache()
_llm_cache: dict[str, BaseChatModel] = {}
_embedding_cache: dict[str, Embeddings] = {}


def clear_llm_cache() -> None:
    """Drop all cached LLM / embedding instances so they're recreated on next call."""
    _llm_cache.clear()
    _embedding_cache.clear()


# ---------------------------------------------------------------------------
# Internal constructors (lazy imports to avoid hard dep on unused packages)
# ---------------------------------------------------------------------------

def _create_chat_model(
    provider: str,
    *,
    ollama_model: str,
    openai_model: str,
    anthropic_model: str,
    temperature: float,
) -> BaseChatModel:
    if provider == "ollama":
        from langchain_ollama import ChatOllama

        return ChatOllama(
            base_url=settings.OLLAMA_BASE_URL,
            model=ollama_model,
            temperature=temperature,
        )

    if provider == "openai":
        from langchain_openai import ChatOpenAI

        if not settings.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY is required when using the openai provider")
        return ChatOpenAI(
            model=openai_model,
            temperature=temperature,
            api_key=settings.OPENAI_API_KEY,
        )

    if provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        if not settings.ANTHROPIC_API_KEY:
            raise ValueError("ANTHROPIC_API_KEY is required when using the anthropic provider")
        return ChatAnthropic(
            model=anthropic_model,
            temperature=temperature,
            api_key=settings.ANTHROPIC_API_KEY,
        )

    raise ValueError(f"Unknown provider: {provider!r}. Valid: {VALID_PROVIDERS}")


def _create_embeddings(provider: str) -> Embeddings:
    if provider == "ollama":
        from langchain_ollama import OllamaEmbeddings

        return OllamaEmbeddings(base_url=settings.OLLAMA_BASE_URL, model=settings.OLLAMA_MODEL_EMBEDDING)

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        if not settings.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY is required when using openai embeddings")
        return OpenAIEmbeddings(
            model=settings.OPENAI_MODEL_EMBEDDING,
            api_key=settings.OPENAI_API_KEY,
        )

    if provider == "anthropic":
        raise ValueError("Embeddings are not supported with the 'anthropic' provider. Use ollama or openai.")

    raise ValueError(f"Unknown embedding provider: {provider!r}. Valid: {EMBEDDING_PROVIDERS}")


# ---------------------------------------------------------------------------
# Public factory functions
# ---------------------------------------------------------------------------

def get_primary_llm() -> BaseChatModel:
    """Primary Reasoning Engine. Used for: quality analysis, classification, entities, summaries."""
    key = "primary"
    if key not in _llm_cache:
        _llm_cache[key] = _create_chat_model(
            settings.LLM_PROVIDER_PRIMARY,
            ollama_model=settings.OLLAMA_MODEL_PRIMARY,
            openai_model=settings.OPENAI_MODEL_PRIMARY,
            anthropic_model=settings.ANTHROPIC_MODEL_PRIMARY,
            temperature=0.2,
        )
    return _llm_cache[key]


def get_embeddings() -> Embeddings:
    """Embedding Engine. Used for: similarity against prior art and sibling patents."""
    key = "embedding"
    if key not in _embedding_cache:
        _embedding_cache[key] = _create_embeddings(settings.LLM_PROVIDER_EMBEDDING)
    return _embedding_cache[key]
