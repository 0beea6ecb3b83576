import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import stripe

from app.services.pricing import PricingError, PricingTable


logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    pass


class CheckoutNotConfigured(CheckoutError):
    pass


class CheckoutProviderError(CheckoutError):
    pass


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


@dataclass(frozen=True)
class SessionStatus:
    id: str
    status: str | None
    payment_status: str | None
    metadata: dict

    @property
    def completed(self) -> bool:
        return self.status == 'complete'


class CheckoutService:
    """Thin wrapper around Stripe hosted checkout. Stripe owns all session state."""

    def __init__(self, secret_key: str, base_url: str = ''):
        self.secret_key = (secret_key or '').strip()
        self.base_url = (base_url or '').strip().rstrip('/')
        if not self.configured:
            logger.warning('STRIPE_SECRET_KEY not configured - checkout is disabled')

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def redirect_base(self, origin: str) -> str:
        return self.base_url or origin.rstrip('/')

    def create_session(self, pricing: PricingTable, plan_id: str, interval: str, origin: str) -> CheckoutSession:
        # Validation comes first so bad input is a client error even when Stripe is off.
        plan = pricing.plan(plan_id)
        price = plan.price(interval)
        if not self.configured:
            raise CheckoutNotConfigured(
                'Stripe is not configured. Please add STRIPE_SECRET_KEY to environment variables.'
            )

        base = self.redirect_base(origin)
        try:
            session = stripe.checkout.Session.create(
                api_key=self.secret_key,
                payment_method_types=['card'],
                line_items=[{'price': price.price_id, 'quantity': 1}],
                mode='subscription',
                success_url=f'{base}/success?session_id={{CHECKOUT_SESSION_ID}}',
                cancel_url=f"{base}/checkout?{urlencode({'plan': plan.id, 'billing': interval})}",
                metadata={
                    'plan': plan.id,
                    'billing': interval,
                    'planName': plan.name,
                    'price': str(price.amount),
                },
                subscription_data={
                    'metadata': {'plan': plan.id, 'billing': interval, 'planName': plan.name},
                },
            )
        except stripe.StripeError as exc:
            logger.error('Stripe checkout session creation failed plan=%s billing=%s: %s', plan.id, interval, exc)
            raise CheckoutProviderError(f'Stripe checkout session creation failed: {exc}') from exc

        logger.info('Checkout session created id=%s plan=%s billing=%s', session.id, plan.id, interval)
        return CheckoutSession(id=session.id, url=session.url)

    def session_status(self, session_id: str) -> SessionStatus:
        if not self.configured:
            raise CheckoutNotConfigured('Stripe is not configured')
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.secret_key)
        except stripe.StripeError as exc:
            logger.error('Stripe session lookup failed id=%s: %s', session_id, exc)
            raise CheckoutProviderError(f'Stripe session lookup failed: {exc}') from exc
        return SessionStatus(
            id=session.id,
            status=getattr(session, 'status', None),
            payment_status=getattr(session, 'payment_status', None),
            metadata=plain_metadata(getattr(session, 'metadata', None)),
        )


def plain_metadata(metadata) -> dict:
    if not metadata:
        return {}
    if hasattr(metadata, 'to_dict'):
        return dict(metadata.to_dict())
    return dict(metadata)


class WebhookError(CheckoutError):
    pass


@dataclass(frozen=True)
class WebhookOutcome:
    event_id: str
    event_type: str
    session_id: str | None = None
    plan: str | None = None
    billing: str | None = None


def verify_webhook(payload: bytes, signature: str | None, webhook_secret: str):
    if not (webhook_secret or '').strip():
        raise CheckoutNotConfigured('STRIPE_WEBHOOK_SECRET not configured')
    if not signature:
        raise WebhookError('Missing Stripe-Signature header')
    try:
        return stripe.Webhook.construct_event(payload, signature, webhook_secret)
    except ValueError as exc:
        raise WebhookError(f'Invalid payload: {exc}') from exc
    except stripe.SignatureVerificationError as exc:
        raise WebhookError(f'Invalid signature: {exc}') from exc


def _field(obj, key):
    # Works for plain dicts and StripeObject alike.
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def reconcile_event(pricing: PricingTable, event) -> WebhookOutcome:
    """Map a checkout.session.completed event back to (plan, billing).

    Session metadata is preferred; the line item price id is the fallback.
    Nothing is stored, the outcome is only logged.
    """
    event_type = _field(event, 'type')
    outcome = WebhookOutcome(event_id=_field(event, 'id'), event_type=event_type)
    if event_type != 'checkout.session.completed':
        logger.info('Ignoring Stripe event id=%s type=%s', outcome.event_id, event_type)
        return outcome

    session = _field(_field(event, 'data'), 'object')
    if session is None:
        logger.warning('Completed checkout event id=%s carries no session', outcome.event_id)
        return outcome
    session_id = _field(session, 'id')
    metadata = plain_metadata(_field(session, 'metadata'))
    plan_id, billing = metadata.get('plan'), metadata.get('billing')
    try:
        pricing.price_for(plan_id, billing)
    except PricingError:
        plan_id = billing = None
        for price_id in _line_item_price_ids(session):
            resolved = pricing.resolve_by_external_id(price_id)
            if resolved:
                plan_id, billing = resolved[0].id, resolved[1]
                break

    if plan_id is None:
        logger.warning('Completed session id=%s matches no known plan', session_id)
    else:
        logger.info('Checkout completed session=%s plan=%s billing=%s', session_id, plan_id, billing)
    return WebhookOutcome(
        event_id=outcome.event_id,
        event_type=event_type,
        session_id=session_id,
        plan=plan_id,
        billing=billing,
    )


def _line_item_price_ids(session) -> list[str]:
    items = _field(_field(session, 'line_items'), 'data') or []
    ids = []
    for item in items:
        price = _field(item, 'price')
        price_id = price if isinstance(price, str) else _field(price, 'id')
        if price_id:
            ids.append(price_id)
    return ids
