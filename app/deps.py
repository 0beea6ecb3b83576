from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from app.services.checkout import CheckoutService
from app.services.pricing import PricingTable, default_pricing
from cms.cache import VersionedCache
from cms.client import ContentClient


@lru_cache
def get_pricing() -> PricingTable:
    return default_pricing()


@lru_cache
def get_checkout_service() -> CheckoutService:
    return CheckoutService(settings.stripe_secret_key, base_url=settings.public_base_url)


@lru_cache
def _content_cache() -> VersionedCache:
    return VersionedCache(
        ttl_seconds=settings.content_cache_seconds,
        version=settings.deploy_version,
        max_entries=settings.content_cache_max_entries,
    )


def get_content_cache() -> VersionedCache:
    cache = _content_cache()
    # A new deployment marker drops everything cached under the previous one.
    cache.set_version(settings.deploy_version)
    return cache


@lru_cache
def _content_client() -> ContentClient:
    return ContentClient(settings.wordpress_api_url, timeout=settings.request_timeout, cache=_content_cache())


def get_content_client(cache: VersionedCache = Depends(get_content_cache)) -> ContentClient:
    _ = cache
    return _content_client()
