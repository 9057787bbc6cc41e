"""Translation cache package.

Provides the per-paste translation cache and the in-flight request coalescing it relies on.
"""

from __future__ import annotations

from core.cache.inflight_manager import InFlightManager
from core.cache.translation_cache import CacheStatistics, TranslationCache

__all__: list[str] = ["CacheStatistics", "InFlightManager", "TranslationCache"]
