"""FastAPI dependency injection providers.

Provides process-wide singletons for routes, built once from config:
- Application config
- Dataset registry (datasets loaded and profiled lazily)
- Response cache and session store
- Gemini client and the question service wiring them together

Tests replace these with app.dependency_overrides.
"""

import os
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends

from data_chat.core.config_loader import get_project_root, load_app_config
from data_chat.core.llm_client import GeminiClient
from data_chat.core.question_service import QuestionService
from data_chat.core.result_cache import ResponseCache
from data_chat.core.state_store import FileSessionStore, InMemorySessionStore, SessionStore
from data_chat.datasets.registry import DatasetRegistry

# ============================================================================
# Singletons
# ============================================================================


@lru_cache(maxsize=1)
def get_app_config() -> dict[str, Any]:
    """Application config (YAML + env overrides), loaded once."""
    return load_app_config()


@lru_cache(maxsize=1)
def get_registry() -> DatasetRegistry:
    """Dataset registry for the configured catalogue."""
    return DatasetRegistry()


@lru_cache(maxsize=1)
def get_response_cache() -> ResponseCache:
    """Answer cache; a configured size of 0 keeps answers for the process lifetime."""
    max_size = get_app_config()["response_cache_max_size"]
    return ResponseCache(max_size=max_size if max_size > 0 else None)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """Session store selected by the session_store config key ("memory" or "file")."""
    config = get_app_config()
    if config["session_store"] == "file":
        path = config["session_store_path"]
        if not os.path.isabs(path):
            path = get_project_root() / path
        return FileSessionStore(path)
    return InMemorySessionStore()


@lru_cache(maxsize=1)
def get_gemini_client() -> GeminiClient:
    """Gemini client; GEMINI_API_KEY is read from the environment only."""
    return GeminiClient.from_config(get_app_config(), api_key=os.getenv("GEMINI_API_KEY"))


@lru_cache(maxsize=1)
def get_question_service() -> QuestionService:
    """Question service wired to the singletons above."""
    config = get_app_config()
    return QuestionService(
        registry=get_registry(),
        generator=get_gemini_client(),
        response_cache=get_response_cache(),
        session_store=get_session_store(),
        sample_row_count=config["sample_row_count"],
        attach_source_files=config["attach_source_files"],
    )


# ============================================================================
# Type Aliases for Route Injection
# ============================================================================

RegistryDep = Annotated[DatasetRegistry, Depends(get_registry)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
QuestionServiceDep = Annotated[QuestionService, Depends(get_question_service)]
