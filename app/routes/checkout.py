import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.deps import get_checkout_service, get_pricing
from app.schemas import (
    CheckoutRequest,
    CheckoutSessionResponse,
    CheckoutSuccessResponse,
    ErrorResponse,
    PlanResponse,
    PlansResponse,
    PricePointResponse,
    WebhookResponse,
)
from app.services.checkout import (
    CheckoutError,
    CheckoutNotConfigured,
    CheckoutService,
    WebhookError,
    reconcile_event,
    verify_webhook,
)
from app.services.pricing import MONTHLY, YEARLY, InvalidPlan, Plan, PricingError, PricingTable


logger = logging.getLogger(__name__)
router = APIRouter(prefix='/api/checkout', tags=['checkout'])

DEFAULT_PLAN = 'premium'
ERROR_RESPONSES = {400: {'model': ErrorResponse}, 500: {'model': ErrorResponse}}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': message})


def plan_response(plan: Plan) -> PlanResponse:
    def point(interval: str) -> PricePointResponse:
        price = plan.price(interval)
        return PricePointResponse(price=price.amount, currency=price.currency, price_id=price.price_id)

    return PlanResponse(
        id=plan.id,
        name=plan.name,
        color=plan.color,
        icon=plan.icon,
        features=list(plan.features),
        monthly=point(MONTHLY),
        yearly=point(YEARLY),
    )


def resolve_request(pricing: PricingTable, payload: CheckoutRequest) -> tuple[str, str]:
    if payload.price_id and not (payload.plan or payload.plan_id):
        resolved = pricing.resolve_by_external_id(payload.price_id)
        if resolved is None:
            raise InvalidPlan(f'Unknown price id: {payload.price_id!r}')
        return resolved[0].id, resolved[1]

    plan_id = payload.plan or payload.plan_id
    interval = payload.billing or payload.billing_interval
    if not plan_id or not interval:
        raise PricingError('Plan and billing type are required')
    pricing.price_for(plan_id, interval)
    return plan_id, interval


@router.get('/plans', response_model=PlansResponse)
def list_plans(plan: str | None = None, pricing: PricingTable = Depends(get_pricing)):
    plans = pricing.plans()
    selected = plan if plan in {p.id for p in plans} else DEFAULT_PLAN
    return PlansResponse(plans=[plan_response(p) for p in plans], selected_plan=selected)


@router.post('/create-session', response_model=CheckoutSessionResponse, responses=ERROR_RESPONSES)
def create_session(
    payload: CheckoutRequest,
    request: Request,
    pricing: PricingTable = Depends(get_pricing),
    service: CheckoutService = Depends(get_checkout_service),
):
    try:
        plan_id, interval = resolve_request(pricing, payload)
        session = service.create_session(pricing, plan_id, interval, origin=str(request.base_url))
    except PricingError as exc:
        return error_response(400, exc.reason)
    except CheckoutNotConfigured as exc:
        return error_response(500, str(exc))
    except CheckoutError:
        return error_response(500, 'Internal server error')
    return CheckoutSessionResponse(session_id=session.id, url=session.url)


@router.get('/success', response_model=CheckoutSuccessResponse)
def checkout_success(session_id: str | None = None, service: CheckoutService = Depends(get_checkout_service)):
    if not session_id or not service.configured:
        return CheckoutSuccessResponse(session_id=session_id, verified=False)
    try:
        status = service.session_status(session_id)
    except CheckoutError as exc:
        logger.warning('Could not verify checkout session %s: %s', session_id, exc)
        return CheckoutSuccessResponse(session_id=session_id, verified=False)
    return CheckoutSuccessResponse(
        session_id=session_id,
        verified=status.completed,
        status=status.status,
        plan=status.metadata.get('plan'),
        billing=status.metadata.get('billing'),
    )


@router.post('/webhook', response_model=WebhookResponse, responses=ERROR_RESPONSES)
async def stripe_webhook(request: Request, pricing: PricingTable = Depends(get_pricing)):
    payload = await request.body()
    try:
        event = verify_webhook(payload, request.headers.get('stripe-signature'), settings.stripe_webhook_secret)
    except CheckoutNotConfigured as exc:
        return error_response(500, str(exc))
    except WebhookError as exc:
        logger.warning('Rejected Stripe webhook: %s', exc)
        return error_response(400, str(exc))
    outcome = reconcile_event(pricing, event)
    return WebhookResponse(event_type=outcome.event_type, plan=outcome.plan, billing=outcome.billing)
