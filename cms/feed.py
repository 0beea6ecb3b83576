import logging
from typing import List, Optional

from cms.client import ContentClient, ContentError
from cms.models import Post, PostsPage
from cms.posts import get_all_posts, merge_pages


logger = logging.getLogger(__name__)


class BlogFeed:
    """Accumulates posts across "load more" requests by following the cursor.

    Once closed, the feed ignores further requests and discards any page that
    arrives for a fetch started before the close.
    """

    def __init__(self, client: ContentClient, initial_page: PostsPage, page_size: int = 12):
        self.client = client
        self.page_size = page_size
        self.posts: List[Post] = list(initial_page.posts)
        self.has_next_page = initial_page.has_next_page
        self.end_cursor: Optional[str] = initial_page.end_cursor
        self.loading = False
        self.closed = False
        self.last_error: Optional[ContentError] = None

    @classmethod
    def start(cls, client: ContentClient, page_size: int = 12) -> "BlogFeed":
        return cls(client, get_all_posts(client, first=page_size), page_size=page_size)

    def close(self) -> None:
        self.closed = True

    def load_more(self) -> bool:
        if self.closed or not self.has_next_page or self.loading:
            return False

        self.loading = True
        try:
            page = get_all_posts(self.client, first=self.page_size, after=self.end_cursor)
        except ContentError as exc:
            logger.error("Error loading more posts kind=%s: %s", exc.kind.value, exc)
            if not self.closed:
                self.last_error = exc
            return False
        finally:
            self.loading = False

        if self.closed:
            logger.info("Feed closed during fetch, dropping page after=%s", self.end_cursor)
            return False
        self.last_error = None
        self.posts = merge_pages(self.posts, page.posts)
        self.has_next_page = page.has_next_page
        self.end_cursor = page.end_cursor
        return True
