"""
Course payments through Stripe.

Stripe is reached only through the ``PaymentGateway`` interface so that the
service can be exercised without network access. ``StripePaymentGateway``
wraps the official ``stripe`` SDK; its blocking calls run in the threadpool.

A purchase is two-phase: ``create_intent`` stores a PENDING payment next to
a Stripe PaymentIntent, and the ``payment_intent.succeeded`` webhook settles
it, enrolls the student and books revenue in one transaction. Settling is
idempotent, so redelivered webhook events change nothing.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from edustack.core.database.base import utc_now
from edustack.core.database.entities.payments import Payment
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.base import Page
from edustack.core.database.repositories.courses import CourseRepository
from edustack.core.database.repositories.enrollments import EnrollmentRepository
from edustack.core.database.repositories.payments import PaymentRepository
from edustack.core.database.repositories.users import TutorRepository
from edustack.core.errors import BadRequestError, NotFoundError, PaymentGatewayError
from edustack.core.logging_config import get_logger
from edustack.core.models.domain.enums import NotificationEvent, PaymentMethod, PaymentStatus
from edustack.core.models.io.courses import CourseBrief
from edustack.core.models.io.payments import PaymentIntentData
from edustack.core.monitoring import log_payment_event
from edustack.server.core.config import settings

from .enrollments import ALREADY_ENROLLED, EnrollmentService
from .notifications import NotificationHub

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


class WebhookVerificationError(BadRequestError):
    """The webhook payload or its signature could not be verified."""

    def __init__(self, reason: str):
        super().__init__(f"Webhook Error: {reason}")


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: Optional[str]


class PaymentGateway(ABC):
    """Payment provider operations used by the payment service."""

    @abstractmethod
    async def create_payment_intent(self, amount: int, currency: str, metadata: Dict[str, str]) -> PaymentIntent:
        """Create a payment intent for ``amount`` minor units of ``currency``."""

    @abstractmethod
    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify a webhook delivery and return the event as a plain dict.

        Raises:
            WebhookVerificationError: bad payload or signature
        """


class StripePaymentGateway(PaymentGateway):
    def __init__(self, api_key: Optional[str], webhook_secret: Optional[str]):
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    async def create_payment_intent(self, amount: int, currency: str, metadata: Dict[str, str]) -> PaymentIntent:
        if not self.api_key:
            raise PaymentGatewayError("Payment provider is not configured")
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=currency,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe rejected payment intent creation: {e}")
            raise PaymentGatewayError(f"Payment provider error: {e.user_message or e}") from e
        return PaymentIntent(id=intent.id, client_secret=intent.client_secret)

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not self.webhook_secret:
            raise WebhookVerificationError("webhook secret is not configured")
        try:
            stripe.Webhook.construct_event(payload, signature or "", self.webhook_secret)
        except ValueError as e:
            raise WebhookVerificationError(f"invalid payload ({e})") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationError(str(e)) from e
        return json.loads(payload)


_gateway: Optional[PaymentGateway] = None


def get_payment_gateway() -> PaymentGateway:
    """Process-wide gateway built from the Stripe settings."""
    global _gateway
    if _gateway is None:
        _gateway = StripePaymentGateway(settings.stripe.secret_key, settings.stripe.webhook_secret)
    return _gateway


class PaymentService:
    def __init__(
        self,
        session: AsyncSession,
        gateway: PaymentGateway,
        hub: NotificationHub,
        platform_fee_rate: Optional[float] = None,
    ):
        self.session = session
        self.gateway = gateway
        self.hub = hub
        self.platform_fee_rate = settings.stripe.platform_fee_rate if platform_fee_rate is None else platform_fee_rate
        self.payments = PaymentRepository(session)
        self.courses = CourseRepository(session)
        self.tutors = TutorRepository(session)

    async def create_intent(self, user: User, course_id: str) -> PaymentIntentData:
        """
        Start a purchase of a published, paid course.

        Returns:
            The client secret for the browser checkout and the pending payment id
        """
        course = await self.courses.get_published(course_id)
        if course is None:
            raise NotFoundError("Course not found or not available for purchase")
        if course.price == 0:
            raise BadRequestError("This course is free")
        if await EnrollmentRepository(self.session).get_for(user.id, course.id) is not None:
            raise BadRequestError(ALREADY_ENROLLED)

        intent = await self.gateway.create_payment_intent(
            amount=round(course.price * 100),
            currency=course.currency.lower(),
            metadata={"courseId": course.id, "studentId": user.id, "tutorId": course.tutor_id},
        )
        tutor = await self.tutors.get_with_user(course.tutor_id)
        payment = await self.payments.create(
            Payment(
                user_id=user.id,
                course_id=course.id,
                amount=course.price,
                currency=course.currency,
                payment_method=PaymentMethod.STRIPE,
                status=PaymentStatus.PENDING,
                stripe_payment_id=intent.id,
                stripe_client_secret=intent.client_secret,
                description=f"Course: {course.title}",
                details={
                    "courseTitle": course.title,
                    "tutorName": tutor.user.full_name if tutor and tutor.user else None,
                },
            )
        )
        await self.session.commit()
        log_payment_event("intent_created", payment.id, course_id=course.id, amount=course.price)
        logger.info(f"Payment {payment.id} pending for course {course.id} (intent {intent.id})")
        return PaymentIntentData(
            client_secret=intent.client_secret,
            payment_id=payment.id,
            amount=course.price,
            currency=course.currency,
            course=CourseBrief.model_validate(course),
        )

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> str:
        """Verify and apply one webhook delivery; returns the event type."""
        event = self.gateway.construct_event(payload, signature)
        event_type = event.get("type", "")
        intent = (event.get("data") or {}).get("object") or {}
        if event_type == PAYMENT_SUCCEEDED:
            await self._settle(intent)
        elif event_type == PAYMENT_FAILED:
            await self._fail(intent)
        else:
            logger.info(f"Unhandled webhook event type {event_type}")
        return event_type

    async def _settle(self, intent: Dict[str, Any]) -> None:
        payment = await self.payments.get_by_stripe_id(intent.get("id", ""))
        if payment is None:
            logger.warning(f"Succeeded intent {intent.get('id')} has no payment record")
            return
        if payment.status == PaymentStatus.COMPLETED:
            logger.info(f"Payment {payment.id} already settled, ignoring redelivery")
            return
        course = await self.courses.get_by_id(payment.course_id)
        if course is None:
            logger.error(f"Payment {payment.id} references missing course {payment.course_id}")
            return

        await self.payments.update(payment, {"status": PaymentStatus.COMPLETED, "paid_at": utc_now()})
        enrollments = EnrollmentService(self.session, self.hub)
        if await enrollments.enrollments.get_for(payment.user_id, course.id) is None:
            await enrollments.admit(payment.user_id, course)
        await self.courses.increment(course.id, total_revenue=payment.amount)
        await self.tutors.increment(course.tutor_id, total_earnings=payment.amount * (1 - self.platform_fee_rate))
        await self.session.commit()

        log_payment_event("payment_succeeded", payment.id, course_id=course.id, amount=payment.amount)
        logger.info(f"Payment {payment.id} settled for course {course.id} by user {payment.user_id}")
        self.hub.publish(
            payment.user_id,
            NotificationEvent.payment_succeeded,
            {"courseId": course.id, "courseName": course.title, "paymentId": payment.id},
        )

    async def _fail(self, intent: Dict[str, Any]) -> None:
        payment = await self.payments.get_by_stripe_id(intent.get("id", ""))
        if payment is None:
            logger.warning(f"Failed intent {intent.get('id')} has no payment record")
            return
        if payment.status == PaymentStatus.COMPLETED:
            logger.info(f"Payment {payment.id} already completed, ignoring failure event")
            return
        await self.payments.update(payment, {"status": PaymentStatus.FAILED, "failed_at": utc_now()})
        await self.session.commit()
        log_payment_event("payment_failed", payment.id, course_id=payment.course_id)
        logger.info(f"Payment {payment.id} failed")

    async def list_payments(self, user: User, page: int, limit: int) -> Page[Payment]:
        return await self.payments.list_for_user(user.id, page, limit)

    async def get_payment(self, user: User, payment_id: str) -> Payment:
        payment = await self.payments.get_for_user(payment_id, user.id)
        if payment is None:
            raise NotFoundError("Payment not found")
        return payment
