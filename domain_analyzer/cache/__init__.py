"""Cache key derivation for report reuse."""

from .keys import CACHE_KEY_LENGTH, canonical_json, generate_cache_key

__all__ = ["CACHE_KEY_LENGTH", "canonical_json", "generate_cache_key"]
