import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from cms.cache import VersionedCache


logger = logging.getLogger(__name__)


class ContentErrorKind(str, Enum):
    TRANSPORT = "transport"
    FORMAT = "format"
    GRAPHQL = "graphql"


class ContentError(Exception):
    kind: ContentErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UpstreamUnavailable(ContentError):
    kind = ContentErrorKind.TRANSPORT

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(ContentError):
    kind = ContentErrorKind.FORMAT

    def __init__(self, message: str, body_preview: str = ""):
        super().__init__(message)
        self.body_preview = body_preview


class GraphQLQueryError(ContentError):
    kind = ContentErrorKind.GRAPHQL

    def __init__(self, message: str, errors: List[Any]):
        super().__init__(message)
        self.errors = errors


def preview(text: str, limit: int = 200) -> str:
    text = (text or "").strip()
    return text if len(text) <= limit else text[:limit] + "..."


def looks_like_html(text: str) -> bool:
    head = text.lstrip()[:15].lower()
    return head.startswith("<!doctype") or head.startswith("<html")


class ContentClient:
    """POSTs GraphQL documents to the WordPress endpoint and returns the `data` member."""

    def __init__(self, api_url: str, timeout: int = 30, cache: Optional[VersionedCache] = None, session=None):
        self.api_url = api_url
        self.timeout = timeout
        self.cache = cache
        self.session = session or requests

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None, use_cache: bool = True) -> Optional[Dict[str, Any]]:
        variables = variables or {}
        key = VersionedCache.key(query, variables) if self.cache is not None else ""
        if use_cache and self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        data = self._fetch(query, variables)
        if use_cache and self.cache is not None and data is not None:
            self.cache.set(key, data)
        return data

    def _fetch(self, query: str, variables: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        logger.debug("Fetching from %s", self.api_url)
        try:
            resp = self.session.post(
                self.api_url,
                json={"query": query, "variables": variables},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("CMS transport error url=%s: %s", self.api_url, exc)
            raise UpstreamUnavailable(f"CMS request failed: {exc}") from exc

        text = resp.text or ""
        if not 200 <= resp.status_code < 300:
            logger.error("CMS HTTP error status=%s body=%s", resp.status_code, preview(text))
            raise UpstreamUnavailable(f"HTTP error! status: {resp.status_code}", status_code=resp.status_code)

        if looks_like_html(text):
            logger.error("CMS returned HTML instead of JSON: %s", preview(text))
            raise MalformedResponse(
                "GraphQL endpoint returned HTML instead of JSON - check WORDPRESS_API_URL",
                body_preview=preview(text),
            )

        try:
            envelope = json.loads(text)
        except ValueError as exc:
            logger.error("CMS JSON parse error: %s body=%s", exc, preview(text))
            raise MalformedResponse("Invalid JSON response from GraphQL endpoint", body_preview=preview(text)) from exc

        if not isinstance(envelope, dict):
            raise MalformedResponse("GraphQL response is not an object", body_preview=preview(text))

        errors = envelope.get("errors")
        if errors:
            logger.error("CMS GraphQL errors: %s", errors)
            raise GraphQLQueryError("GraphQL query failed: " + json.dumps(errors, default=str)[:500], errors=errors)

        data = envelope.get("data")
        if data is not None and not isinstance(data, dict):
            raise MalformedResponse("GraphQL `data` member is not an object", body_preview=preview(text))
        logger.debug("CMS response received data=%s", "yes" if data else "no")
        return data
