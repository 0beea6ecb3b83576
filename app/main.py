"""HTTP surface of the Punti Furbi marketing site.

- Pricing plans and Stripe hosted checkout
- Blog backed by the WordPress GraphQL API
- Static SEO pages
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logs import setup_logging
from app.routes import blog, checkout, health, seo


setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version='1.0.0')

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
    allow_headers=['Content-Type', 'Authorization'],
)

app.include_router(health.router)
app.include_router(checkout.router)
app.include_router(blog.router)
app.include_router(seo.router)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = '.'.join(str(p) for p in first.get('loc', ()) if p != 'body')
    message = f"{field}: {first.get('msg', 'invalid request')}" if field else first.get('msg', 'Invalid request')
    logger.info('Rejected request %s %s: %s', request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={'error': message})


@app.on_event('startup')
def announce() -> None:
    if not settings.checkout_enabled:
        logger.warning('STRIPE_SECRET_KEY not configured - Stripe functionality will be disabled')
    logger.info('Content API: %s', settings.wordpress_api_url)
