"""Plan and price lookup table.

One PricingTable is built at startup and shared by the checkout UI data and
the session-creation endpoint, so both always quote the same prices.
"""

from dataclasses import dataclass
from decimal import Decimal


MONTHLY = 'monthly'
YEARLY = 'yearly'
BILLING_INTERVALS = (MONTHLY, YEARLY)


class PricingError(ValueError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidPlan(PricingError):
    pass


class InvalidInterval(PricingError):
    pass


@dataclass(frozen=True)
class PricePoint:
    amount: Decimal
    currency: str
    price_id: str


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    color: str
    icon: str
    features: tuple[str, ...]
    monthly: PricePoint
    yearly: PricePoint

    def price(self, interval: str) -> PricePoint:
        if interval == MONTHLY:
            return self.monthly
        if interval == YEARLY:
            return self.yearly
        raise InvalidInterval(f'Invalid billing interval: {interval!r}')


class PricingTable:
    def __init__(self, plans: list[Plan]):
        seen: dict[str, str] = {}
        for plan in plans:
            for interval in BILLING_INTERVALS:
                price_id = plan.price(interval).price_id
                if price_id in seen:
                    raise ValueError(f'Duplicate price id {price_id} ({seen[price_id]} and {plan.id}.{interval})')
                seen[price_id] = f'{plan.id}.{interval}'
        self._plans = {plan.id: plan for plan in plans}

    def plans(self) -> list[Plan]:
        return list(self._plans.values())

    def plan(self, plan_id: str) -> Plan:
        plan = self._plans.get(plan_id) if isinstance(plan_id, str) else None
        if plan is None:
            raise InvalidPlan(f'Invalid plan: {plan_id!r}')
        return plan

    def price_for(self, plan_id: str, interval: str) -> PricePoint:
        return self.plan(plan_id).price(interval)

    def features_for(self, plan_id: str) -> tuple[str, ...]:
        return self.plan(plan_id).features

    def resolve_by_external_id(self, price_id: str) -> tuple[Plan, str] | None:
        for plan in self._plans.values():
            for interval in BILLING_INTERVALS:
                if plan.price(interval).price_id == price_id:
                    return plan, interval
        return None


def default_pricing() -> PricingTable:
    return PricingTable(
        [
            Plan(
                id='premium',
                name='Premium',
                color='#483cff',
                icon='Crown',
                features=(
                    'Tutte le offerte Economy e Premium Economy',
                    'Offerte esclusive in Business e First Class',
                    'Segnalazioni di tariffe error fare premium',
                    'Supporto via email prioritario',
                    'Accesso a offerte riservate',
                ),
                monthly=PricePoint(Decimal('4.90'), 'EUR', 'price_Premium_Monthly_490'),
                yearly=PricePoint(Decimal('49.90'), 'EUR', 'price_Premium_Yearly_4990'),
            ),
            Plan(
                id='elite',
                name='Elite',
                color='#483cff',
                icon='Zap',
                features=(
                    'Tutto il piano Premium',
                    'Concierge personale',
                    'Servizi premium di travel hacking',
                    'Ricerca personalizzata con punti e miglia',
                    '1 consulenza personalizzata al mese',
                    'Accesso anticipato a tutte le offerte',
                    'Consigli su status, carte e strategie travel hacking',
                ),
                monthly=PricePoint(Decimal('19.90'), 'EUR', 'price_Elite_Monthly_1990'),
                yearly=PricePoint(Decimal('199.90'), 'EUR', 'price_Elite_Yearly_19990'),
            ),
        ]
    )
