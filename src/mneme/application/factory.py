"""
Store Factory
Centralizes the logic for selecting the storage adapter.
"""

import logging

from mneme.application.config import AppConfig
from mneme.infrastructure.adapters.memory_store import InMemoryStore
from mneme.infrastructure.adapters.yaml_store import YamlStore

logger = logging.getLogger(__name__)


def get_store(config: AppConfig) -> InMemoryStore | YamlStore:
    """
    Returns the store implementation selected by config.

    The returned object implements both ItemRepository and SessionRepository.
    """
    if config.backend == "memory":
        logger.debug("Backend: memory")
        return InMemoryStore()

    logger.debug(f"Backend: yaml ({config.store_path})")
    return YamlStore(config.store_path)
