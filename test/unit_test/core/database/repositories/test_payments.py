"""Unit tests for the payment repository."""

from datetime import timedelta

import pytest

from edustack.core.database import utc_now
from edustack.core.database.entities.payments import Payment
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.payments import PaymentRepository
from edustack.core.models.domain.enums import PaymentStatus


@pytest.fixture
async def buyer(in_memory_session) -> User:
    user = User(email="bob@example.com", username="bob", first_name="Bob", last_name="Buyer", password_hash="x")
    in_memory_session.add(user)
    await in_memory_session.commit()
    return user


@pytest.fixture
def add_payment(in_memory_session, buyer):
    async def _add(course, amount, status=PaymentStatus.COMPLETED, **fields) -> Payment:
        payment = Payment(user_id=buyer.id, course_id=course.id, amount=amount, status=status, **fields)
        in_memory_session.add(payment)
        await in_memory_session.commit()
        return payment

    return _add


@pytest.mark.asyncio
async def test_lookup_by_stripe_id(in_memory_session, add_course, add_payment):
    payment = await add_payment(await add_course("Alpha"), 10.0, stripe_payment_id="pi_123")
    repo = PaymentRepository(in_memory_session)

    assert (await repo.get_by_stripe_id("pi_123")).id == payment.id
    assert await repo.get_by_stripe_id("pi_other") is None


@pytest.mark.asyncio
async def test_get_for_user_is_scoped_to_owner(in_memory_session, add_course, add_payment, buyer):
    payment = await add_payment(await add_course("Alpha"), 10.0)
    repo = PaymentRepository(in_memory_session)

    found = await repo.get_for_user(payment.id, buyer.id)
    assert found.course.title == "Alpha"
    assert await repo.get_for_user(payment.id, "someone-else") is None


@pytest.mark.asyncio
async def test_list_for_user_newest_first(in_memory_session, add_course, add_payment, buyer):
    course = await add_course("Alpha")
    older = await add_payment(course, 5.0, created_at=utc_now() - timedelta(days=2))
    newer = await add_payment(course, 7.0)

    page = await PaymentRepository(in_memory_session).list_for_user(buyer.id, page=1, limit=10)

    assert [payment.id for payment in page.items] == [newer.id, older.id]
    assert page.total == 2


@pytest.mark.asyncio
async def test_completed_revenue(in_memory_session, add_course, add_payment):
    alpha = await add_course("Alpha")
    beta = await add_course("Beta")
    await add_payment(alpha, 10.0)
    await add_payment(beta, 20.0)
    await add_payment(beta, 99.0, status=PaymentStatus.FAILED)
    await add_payment(alpha, 5.0, created_at=utc_now() - timedelta(days=40))
    repo = PaymentRepository(in_memory_session)

    assert await repo.completed_revenue() == pytest.approx(35.0)
    assert await repo.completed_revenue(course_ids=[beta.id]) == pytest.approx(20.0)
    assert await repo.completed_revenue(course_ids=[]) == 0.0
    assert await repo.completed_revenue(since=utc_now() - timedelta(days=30)) == pytest.approx(30.0)
