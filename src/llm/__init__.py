from src.llm.factory import (
    get_primary_llm,
    get_embeddings,
    clear_llm_cache,
)
