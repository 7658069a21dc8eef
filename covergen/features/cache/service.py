# covergen/features/cache/service.py
from __future__ import annotations

from typing import Any, Dict

from covergen.features.templates.service import get_style_template
from covergen.lib.cache import CACHE_PRESETS, CacheFactory, CacheKeyGenerator, MemoryCache
from covergen.lib.errors import NotFoundError
from covergen.logger import get_logger

log = get_logger(__name__)

WARM_TEMPLATES = ("minimal-clean", "modern-bold", "elegant-gold", "nature-fresh", "tech-blue")

WARM_PATTERNS: Dict[str, Dict[str, Any]] = {
    "sentiment:positive": {"sentiment": "positive", "confidence": 0.9},
    "sentiment:negative": {"sentiment": "negative", "confidence": 0.9},
    "sentiment:neutral": {"sentiment": "neutral", "confidence": 0.9},
    "category:lifestyle": {"category": "lifestyle", "keywords": ["life", "daily"]},
    "category:technology": {"category": "technology", "keywords": ["tech", "gadgets"]},
    "category:food": {"category": "food", "keywords": ["food", "cooking"]},
}


def get_cache(name: str) -> MemoryCache:
    if name not in CACHE_PRESETS:
        raise NotFoundError("Cache", name)
    return CacheFactory.get_instance(name)


def all_stats() -> Dict[str, Any]:
    caches = {name: cache.stats() for name, cache in CacheFactory.all().items()}
    hits = sum(s["hits"] for s in caches.values())
    misses = sum(s["misses"] for s in caches.values())
    return {
        "caches": caches,
        "total": {
            "hits": hits,
            "misses": misses,
            "entries": sum(s["entries"] for s in caches.values()),
            "hit_rate": (hits / (hits + misses)) if (hits + misses) else 0.0,
        },
    }


def warm(strategy: str = "all") -> Dict[str, Any]:
    results: Dict[str, Any] = {"warmed": 0, "errors": 0, "strategies": {}}

    if strategy in ("all", "templates"):
        cache = CacheFactory.get_instance("templates")
        items = 0
        for template_id in WARM_TEMPLATES:
            template = get_style_template(template_id)
            if template is None:
                results["errors"] += 1
                continue
            cache.set(CacheKeyGenerator.template(template_id), template.model_dump())
            items += 1
        results["strategies"]["templates"] = {"items": items}
        results["warmed"] += items

    if strategy in ("all", "patterns"):
        cache = CacheFactory.get_instance("ai_responses")
        for key, value in WARM_PATTERNS.items():
            cache.set(key, value)
        results["strategies"]["patterns"] = {"items": len(WARM_PATTERNS)}
        results["warmed"] += len(WARM_PATTERNS)

    log.info(f"cache warm ({strategy}): {results['warmed']} entries, {results['errors']} errors")
    return {"strategy": strategy, **results}
