from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CheckoutRequest(CamelModel):
    # Two client revisions exist: {plan, billing} and {planId | priceId, billingInterval}.
    plan: str | None = None
    billing: str | None = None
    plan_id: str | None = Field(default=None, alias='planId')
    price_id: str | None = Field(default=None, alias='priceId')
    billing_interval: str | None = Field(default=None, alias='billingInterval')


class CheckoutSessionResponse(CamelModel):
    session_id: str = Field(alias='sessionId')
    url: str


class ErrorResponse(BaseModel):
    error: str


class PricePointResponse(CamelModel):
    price: Decimal
    currency: str
    price_id: str = Field(alias='priceId')


class PlanResponse(CamelModel):
    id: str
    name: str
    color: str
    icon: str
    features: list[str]
    monthly: PricePointResponse
    yearly: PricePointResponse


class PlansResponse(CamelModel):
    plans: list[PlanResponse]
    selected_plan: str = Field(alias='selectedPlan')


class CheckoutSuccessResponse(CamelModel):
    session_id: str | None = Field(alias='sessionId')
    verified: bool
    status: str | None = None
    plan: str | None = None
    billing: str | None = None


class WebhookResponse(CamelModel):
    received: bool = True
    event_type: str = Field(alias='eventType')
    plan: str | None = None
    billing: str | None = None


class CategoryOut(CamelModel):
    name: str
    slug: str


class TagOut(CamelModel):
    name: str
    slug: str


class FeaturedImageOut(CamelModel):
    source_url: str = Field(alias='sourceUrl')
    alt_text: str = Field(alias='altText')


class PostOut(CamelModel):
    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    date: datetime
    author: str | None
    categories: list[CategoryOut]
    tags: list[TagOut]
    featured_image: FeaturedImageOut | None = Field(alias='featuredImage')


class PostsPageResponse(CamelModel):
    posts: list[PostOut]
    has_next_page: bool = Field(alias='hasNextPage')
    end_cursor: str | None = Field(alias='endCursor')


class PageMetadata(CamelModel):
    title: str
    description: str
    images: list[str] = []


class BlogIndexResponse(CamelModel):
    status: str
    metadata: PageMetadata
    page: PostsPageResponse | None = None
    message: str | None = None
    hint: str | None = None


class BlogPostResponse(CamelModel):
    post: PostOut
    related_posts: list[PostOut] = Field(alias='relatedPosts')
    metadata: PageMetadata
