# Storage adapters
from .memory_store import InMemoryStore
from .yaml_store import YamlStore

__all__ = ["InMemoryStore", "YamlStore"]
