from .lru import DEFAULT_MAX_SIZE, QueryCache

__all__ = ["DEFAULT_MAX_SIZE", "QueryCache"]
