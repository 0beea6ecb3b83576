import logging

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.deps import get_content_cache, get_content_client
from app.schemas import BlogIndexResponse, BlogPostResponse, PageMetadata, PostOut, PostsPageResponse
from cms.cache import VersionedCache
from cms.client import ContentClient, ContentError, ContentErrorKind
from cms.models import Post, PostsPage
from cms.posts import get_all_posts, get_post_by_slug, get_related_posts


logger = logging.getLogger(__name__)
router = APIRouter(tags=['blog'])

BLOG_METADATA = PageMetadata(
    title='Blog - Punti Furbi',
    description='Scopri i nostri articoli su viaggi, punti fedeltà e offerte esclusive.',
    images=[],
)
BLOG_CACHE_CONTROL = 'max-age=300, must-revalidate'

ERROR_MESSAGES = {
    ContentErrorKind.GRAPHQL: (
        'Errore nel caricamento dei contenuti del blog. Stiamo lavorando per risolverlo.',
        "Errore GraphQL: problema nell'API dei contenuti",
    ),
    ContentErrorKind.TRANSPORT: (
        'Problemi di connessione. Controlla la tua connessione internet e riprova.',
        'Errore di rete: impossibile contattare il server',
    ),
    ContentErrorKind.FORMAT: (
        'Errore nel formato dei dati. Il problema è stato segnalato al nostro team tecnico.',
        'Errore parsing: risposta server non valida',
    ),
}
FALLBACK_MESSAGE = 'Il blog non è al momento disponibile. Riprova più tardi.'


def post_out(post: Post) -> PostOut:
    return PostOut.model_validate(post.model_dump())


def page_out(page: PostsPage) -> PostsPageResponse:
    return PostsPageResponse(
        posts=[post_out(p) for p in page.posts],
        has_next_page=page.has_next_page,
        end_cursor=page.end_cursor,
    )


def content_headers(response: Response, cache: VersionedCache) -> None:
    response.headers['Cache-Control'] = BLOG_CACHE_CONTROL
    response.headers['X-Content-Version'] = cache.version


@router.get('/api/blog/posts', response_model=PostsPageResponse)
def list_posts(
    response: Response,
    first: int = Query(default=settings.blog_page_size, ge=1, le=100),
    after: str | None = None,
    client: ContentClient = Depends(get_content_client),
    cache: VersionedCache = Depends(get_content_cache),
):
    try:
        page = get_all_posts(client, first=first, after=after or None)
    except ContentError as exc:
        logger.error('Blog page fetch failed kind=%s: %s', exc.kind.value, exc)
        return JSONResponse(status_code=502, content={'error': exc.message, 'kind': exc.kind.value})
    content_headers(response, cache)
    return page_out(page)


@router.get('/blog', response_model=BlogIndexResponse, response_model_exclude_unset=True)
def blog_index(
    response: Response,
    client: ContentClient = Depends(get_content_client),
    cache: VersionedCache = Depends(get_content_cache),
):
    # Only the fields passed here are rendered; nulls inside the page stay.
    content_headers(response, cache)
    try:
        page = get_all_posts(client, first=settings.blog_page_size)
    except ContentError as exc:
        logger.error('Blog index failed kind=%s: %s', exc.kind.value, exc)
        message, hint = ERROR_MESSAGES.get(exc.kind, (FALLBACK_MESSAGE, ''))
        extra = {'hint': hint} if settings.debug else {}
        return BlogIndexResponse(status='error', metadata=BLOG_METADATA, message=message, **extra)

    logger.info('Blog index loaded posts=%s', len(page.posts))
    if not page.posts:
        return BlogIndexResponse(
            status='empty',
            metadata=BLOG_METADATA,
            page=page_out(page),
            message='Gli articoli del blog saranno disponibili a breve.',
        )
    return BlogIndexResponse(status='ok', metadata=BLOG_METADATA, page=page_out(page))


@router.get('/blog/{slug}', response_model=BlogPostResponse, responses={404: {'description': 'Post not found'}})
def blog_post(
    slug: str,
    response: Response,
    client: ContentClient = Depends(get_content_client),
    cache: VersionedCache = Depends(get_content_cache),
):
    post = get_post_by_slug(client, slug)
    if post is None:
        return JSONResponse(status_code=404, content={'error': 'Post non trovato'})

    related = get_related_posts(client, post.categories)
    content_headers(response, cache)
    return BlogPostResponse(
        post=post_out(post),
        related_posts=[post_out(p) for p in related],
        metadata=PageMetadata(
            title=post.title,
            description=post.excerpt or post.title,
            images=[post.featured_image.source_url] if post.featured_image else [],
        ),
    )
