import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from cms import queries
from cms.client import ContentClient, ContentError, MalformedResponse
from cms.models import Category, Post, PostsPage


logger = logging.getLogger(__name__)

RELATED_POSTS_LIMIT = 5


def sort_by_date(posts: Iterable[Post]) -> List[Post]:
    return sorted(posts, key=lambda p: p.date, reverse=True)


def merge_pages(accumulated: List[Post], new_posts: List[Post]) -> List[Post]:
    """Append a continuation page and re-sort the whole list, keeping the first copy of any id."""
    seen = {p.id for p in accumulated}
    merged = list(accumulated)
    for post in new_posts:
        if post.id not in seen:
            seen.add(post.id)
            merged.append(post)
    return sort_by_date(merged)


def _parse_posts(nodes: Any) -> List[Post]:
    if nodes is None:
        return []
    if not isinstance(nodes, list):
        raise MalformedResponse("Expected a list of post nodes")
    try:
        return [Post.model_validate(node) for node in nodes]
    except ValidationError as exc:
        logger.error("CMS post payload failed validation: %s", exc)
        raise MalformedResponse(f"Post payload failed validation: {exc.error_count()} error(s)") from exc


def get_all_posts(client: ContentClient, first: int = 10, after: Optional[str] = None) -> PostsPage:
    if first < 1:
        raise ValueError("first must be >= 1")
    data = client.query(queries.ALL_POSTS, {"first": first, "after": after})
    if not data or not data.get("posts"):
        logger.warning("No posts data received first=%s after=%s", first, after)
        return PostsPage.empty()

    block = data["posts"]
    if not isinstance(block, dict):
        raise MalformedResponse("`posts` member is not an object")
    # Neither the upstream order nor its page size is trusted.
    posts = sort_by_date(_parse_posts(block.get("nodes")))
    page_info = block.get("pageInfo") or {}
    has_next_page = bool(page_info.get("hasNextPage"))
    if len(posts) > first:
        logger.warning("CMS returned %s posts for first=%s, truncating", len(posts), first)
        posts = posts[:first]
        has_next_page = True
    return PostsPage(
        posts=posts,
        has_next_page=has_next_page,
        end_cursor=page_info.get("endCursor") or None,
    )


def get_blog_posts(client: ContentClient, first: int = 10) -> List[Post]:
    try:
        data = client.query(queries.BLOG_POSTS, {"first": first})
        block = (data or {}).get("posts") or {}
        return sort_by_date(_parse_posts(block.get("nodes") if isinstance(block, dict) else None))
    except ContentError as exc:
        logger.error("Error fetching blog posts kind=%s: %s", exc.kind.value, exc)
        return []


def get_post_by_slug(client: ContentClient, slug: str) -> Optional[Post]:
    try:
        data = client.query(queries.POST_BY_SLUG, {"slug": slug})
        node = (data or {}).get("post")
        if not node:
            return None
        try:
            return Post.model_validate(node)
        except ValidationError as exc:
            raise MalformedResponse(f"Post {slug!r} failed validation: {exc.error_count()} error(s)") from exc
    except ContentError as exc:
        logger.error("Error fetching post with slug %s kind=%s: %s", slug, exc.kind.value, exc)
        return None


def _category_ref(category: Any) -> Optional[Dict[str, str]]:
    if isinstance(category, Category):
        raw_id, database_id = category.id, category.database_id
    elif isinstance(category, dict):
        raw_id, database_id = category.get("id"), category.get("databaseId", category.get("database_id"))
    else:
        return None
    if raw_id:
        return {"categoryId": str(raw_id), "idType": "ID"}
    if database_id:
        return {"categoryId": str(database_id), "idType": "DATABASE_ID"}
    return None


def get_related_posts(client: ContentClient, categories: Optional[List[Any]]) -> List[Post]:
    """Up to five posts from the first identifiable category. The source post may be among them."""
    if not categories:
        return []
    refs = [ref for ref in (_category_ref(c) for c in categories) if ref]
    if not refs:
        return []

    variables = dict(refs[0], first=RELATED_POSTS_LIMIT)
    logger.info("Fetching related posts for category %s", variables["categoryId"])
    try:
        data = client.query(queries.RELATED_POSTS, variables)
        category = (data or {}).get("category") or {}
        block = category.get("posts") if isinstance(category, dict) else None
        nodes = block.get("nodes") if isinstance(block, dict) else None
        posts = _parse_posts(nodes)[:RELATED_POSTS_LIMIT]
    except ContentError as exc:
        logger.error("Error fetching related posts kind=%s: %s", exc.kind.value, exc)
        return []
    logger.info("Related posts found: %s", len(posts))
    return posts
