"""
Payment Endpoints.

Checkout of paid courses through Stripe PaymentIntents, the Stripe webhook
that settles them, and the caller's payment history.
"""

from typing import Optional

from fastapi import APIRouter, Header, Request

from edustack.core.logging_config import get_logger
from edustack.core.models.io import (
    ApiResponse,
    CreateIntentRequest,
    PaymentData,
    PaymentIntentData,
    PaymentListData,
    PaymentRead,
    Pagination,
    WebhookAck,
)
from edustack.server.services.deps import (
    CurrentUser,
    NotificationHubDep,
    PageDep,
    PaymentGatewayDep,
    SessionDep,
    StudentUser,
)
from edustack.server.services.payments import PaymentService

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/create-intent",
    response_model=ApiResponse[PaymentIntentData],
    summary="Create Payment Intent",
    description="Start the purchase of a paid course and return the Stripe client secret for checkout.",
    responses={
        400: {"description": "The course is free or already owned"},
        404: {"description": "Course not found or not available for purchase"},
        502: {"description": "The payment provider rejected the request"},
    },
)
async def create_intent(
    payload: CreateIntentRequest,
    user: StudentUser,
    session: SessionDep,
    gateway: PaymentGatewayDep,
    hub: NotificationHubDep,
) -> ApiResponse[PaymentIntentData]:
    data = await PaymentService(session, gateway, hub).create_intent(user, payload.course_id)
    return ApiResponse[PaymentIntentData](data=data)


@router.post(
    "/webhook",
    response_model=WebhookAck,
    summary="Stripe Webhook",
    description="Receive Stripe events. The raw body is verified against the Stripe-Signature header.",
    responses={400: {"description": "Signature verification failed"}},
)
async def stripe_webhook(
    request: Request,
    session: SessionDep,
    gateway: PaymentGatewayDep,
    hub: NotificationHubDep,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
) -> WebhookAck:
    payload = await request.body()
    event_type = await PaymentService(session, gateway, hub).handle_webhook(payload, stripe_signature)
    logger.debug(f"Webhook event {event_type} processed")
    return WebhookAck()


@router.get(
    "",
    response_model=ApiResponse[PaymentListData],
    summary="List Payments",
    description="The caller's payments, newest first.",
)
async def list_payments(
    user: CurrentUser,
    session: SessionDep,
    gateway: PaymentGatewayDep,
    hub: NotificationHubDep,
    paging: PageDep,
) -> ApiResponse[PaymentListData]:
    page = await PaymentService(session, gateway, hub).list_payments(user, paging.page, paging.limit)
    return ApiResponse[PaymentListData](
        data=PaymentListData(
            payments=[PaymentRead.model_validate(payment) for payment in page.items],
            pagination=Pagination.from_page(page),
        )
    )


@router.get(
    "/{payment_id}",
    response_model=ApiResponse[PaymentData],
    summary="Get Payment",
    responses={404: {"description": "Payment not found"}},
)
async def get_payment(
    payment_id: str,
    user: CurrentUser,
    session: SessionDep,
    gateway: PaymentGatewayDep,
    hub: NotificationHubDep,
) -> ApiResponse[PaymentData]:
    payment = await PaymentService(session, gateway, hub).get_payment(user, payment_id)
    return ApiResponse[PaymentData](data=PaymentData(payment=PaymentRead.model_validate(payment)))
