import uuid
from datetime import timedelta
import pytest
from unittest.mock import MagicMock, patch

from app.models.base import utcnow
from app.models.subscription_model import Subscription
from app.tasks.subscription_tasks import expire_lapsed_subscriptions, expire_lapsed_subscriptions_async


@pytest.mark.asyncio
async def test_expire_lapsed_subscriptions_async(session_factory, db_session):
    now = utcnow()
    lapsed = Subscription(
        user_id=uuid.uuid4(), plan="premium", status="active", payment_id="bill_old",
        starts_at=now - timedelta(days=400), expires_at=now - timedelta(days=35),
    )
    current = Subscription(
        user_id=uuid.uuid4(), plan="family", status="active", payment_id="bill_new",
        starts_at=now, expires_at=now + timedelta(days=365),
    )
    db_session.add_all([lapsed, current])
    await db_session.commit()

    expired = await expire_lapsed_subscriptions_async(session_factory)

    assert expired == 1
    await db_session.refresh(lapsed)
    await db_session.refresh(current)
    assert lapsed.status == "expired"
    assert current.status == "active"


def test_expire_lapsed_subscriptions_task_logs_count():
    with patch("app.tasks.subscription_tasks.expire_lapsed_subscriptions_async", new=MagicMock()) as mock_job, \
         patch("app.tasks.subscription_tasks.asyncio.run", return_value=3) as mock_run, \
         patch("app.tasks.subscription_tasks.logger") as mock_logger:
        result = expire_lapsed_subscriptions.run()

    assert result == 3
    mock_job.assert_called_once_with()
    mock_run.assert_called_once()
    mock_logger.info.assert_any_call("Expired 3 lapsed subscription(s).")


def test_beat_schedule_runs_expiry_daily():
    from app.core.celery_app import celery_app

    entry = celery_app.conf.beat_schedule["expire-lapsed-subscriptions"]
    assert entry["task"] == "tasks.expire_lapsed_subscriptions"
    assert entry["schedule"].hour == {0}
    assert entry["schedule"].minute == {5}
    assert "tasks.expire_lapsed_subscriptions" in celery_app.tasks
