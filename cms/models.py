"""Validated shapes of the WordPress GraphQL payloads.

WPGraphQL wraps relations as `{"node": {...}}` and `{"nodes": [...]}`; the
wrappers are flattened here so the rest of the code sees plain fields.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _unwrap_node(value: Any) -> Any:
    if isinstance(value, dict) and "node" in value:
        return value["node"]
    return value


def _unwrap_nodes(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, dict) and "nodes" in value:
        return value["nodes"] or []
    return value


class WPModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Category(WPModel):
    name: str
    slug: str
    id: Optional[str] = None
    database_id: Optional[int] = Field(default=None, alias="databaseId")


class Tag(WPModel):
    name: str
    slug: str


class FeaturedImage(WPModel):
    source_url: str = Field(alias="sourceUrl")
    alt_text: str = Field(default="", alias="altText")

    @field_validator("alt_text", mode="before")
    @classmethod
    def _none_alt(cls, value: Any) -> Any:
        return value or ""


class Post(WPModel):
    id: str
    slug: str
    title: str = ""
    excerpt: str = ""
    content: str = ""
    date: datetime
    author: Optional[str] = None
    categories: List[Category] = []
    tags: List[Tag] = []
    featured_image: Optional[FeaturedImage] = Field(default=None, alias="featuredImage")

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        author = _unwrap_node(data.get("author"))
        data["author"] = author.get("name") if isinstance(author, dict) else author
        data["categories"] = _unwrap_nodes(data.get("categories"))
        data["tags"] = _unwrap_nodes(data.get("tags"))
        image_key = "featuredImage" if "featuredImage" in data else "featured_image"
        data[image_key] = _unwrap_node(data.get(image_key))
        for key in ("title", "excerpt", "content"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @field_validator("date")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        # WordPress returns site-local naive timestamps; pin them so sorting never mixes naive and aware.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def category_ids(self) -> List[str]:
        return [cat.id or str(cat.database_id) for cat in self.categories if cat.id or cat.database_id]


class PostsPage(WPModel):
    posts: List[Post] = []
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: Optional[str] = Field(default=None, alias="endCursor")

    @classmethod
    def empty(cls) -> "PostsPage":
        return cls(posts=[], has_next_page=False, end_cursor=None)
