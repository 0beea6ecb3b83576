from cms.feed import BlogFeed
from cms.models import PostsPage
from cms.posts import get_all_posts
from tests.mocks import FakeResponse, json_response, posts_payload, wp_post


def start_feed(cms_client, cms_session):
    cms_session.queue(
        json_response(posts_payload([wp_post("3", "2024-03-01T00:00:00"), wp_post("2", "2024-02-01T00:00:00")], True, "c2"))
    )
    return BlogFeed.start(cms_client, page_size=2)


def test_load_more_appends_and_resorts(cms_client, cms_session):
    feed = start_feed(cms_client, cms_session)
    cms_session.queue(
        json_response(posts_payload([wp_post("1", "2024-01-01T00:00:00"), wp_post("4", "2024-02-15T00:00:00")], False, None))
    )

    assert feed.load_more() is True
    assert [p.id for p in feed.posts] == ["3", "4", "2", "1"]
    assert feed.has_next_page is False
    assert feed.end_cursor is None
    assert cms_session.variables[-1] == {"first": 2, "after": "c2"}


def test_load_more_noop_without_next_page(cms_client, cms_session):
    feed = BlogFeed(cms_client, PostsPage.empty())
    assert feed.load_more() is False
    assert cms_session.calls == []


def test_load_more_noop_while_in_flight(cms_client, cms_session):
    feed = start_feed(cms_client, cms_session)
    feed.loading = True
    assert feed.load_more() is False
    assert len(cms_session.calls) == 1


def test_reentrant_trigger_is_ignored(cms_client, cms_session):
    feed = start_feed(cms_client, cms_session)
    nested = []

    def respond(body):
        nested.append(feed.load_more())
        return json_response(posts_payload([wp_post("1", "2024-01-01T00:00:00")], False, None))

    cms_session.queue(respond)
    assert feed.load_more() is True
    assert nested == [False]
    assert feed.loading is False


def test_failure_keeps_state(cms_client, cms_session):
    feed = start_feed(cms_client, cms_session)
    cms_session.queue(FakeResponse(503, ""))
    assert feed.load_more() is False
    assert feed.loading is False
    assert feed.end_cursor == "c2"
    assert feed.has_next_page is True
    assert [p.id for p in feed.posts] == ["3", "2"]
    assert feed.last_error is not None


def test_initial_page_from_fetcher(cms_client, cms_session):
    cms_session.queue(json_response(posts_payload([wp_post("1", "2024-01-01T00:00:00")])))
    page = get_all_posts(cms_client, first=12)
    feed = BlogFeed(cms_client, page)
    assert [p.id for p in feed.posts] == ["1"]
    assert feed.has_next_page is False


def test_page_arriving_after_close_is_discarded(cms_client, cms_session):
    feed = start_feed(cms_client, cms_session)

    def respond(body):
        feed.close()
        return json_response(posts_payload([wp_post("1", "2024-01-01T00:00:00")], False, None))

    cms_session.queue(respond)
    assert feed.load_more() is False
    assert [p.id for p in feed.posts] == ["3", "2"]
    assert feed.end_cursor == "c2"
    assert feed.has_next_page is True
    assert feed.loading is False


def test_closed_feed_does_not_fetch(cms_client, cms_session):
    feed = start_feed(cms_client, cms_session)
    feed.close()
    assert feed.load_more() is False
    assert len(cms_session.calls) == 1
