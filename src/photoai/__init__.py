"""PhotoAI - prompt catalog and settings service for AI photo transformation."""

__version__ = "0.3.0"

from photoai.core.config import PhotoAIConfig, config
from photoai.core.store import PromptCatalogStore

__all__ = [
    "PhotoAIConfig",
    "PromptCatalogStore",
    "config",
]
