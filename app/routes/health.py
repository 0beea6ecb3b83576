from urllib.parse import urlparse

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.deps import get_checkout_service
from app.services.checkout import CheckoutService

router = APIRouter(tags=['health'])


@router.get('/healthz')
def healthz(service: CheckoutService = Depends(get_checkout_service)):
    data = {
        'status': 'ok' if service.configured else 'degraded',
        'checkout_configured': service.configured,
        'content_api_host': urlparse(settings.wordpress_api_url).netloc,
        'environment': settings.environment,
        'version': settings.deploy_version,
    }
    if not service.configured:
        data['checkout_error'] = 'STRIPE_SECRET_KEY not configured'
    return data
