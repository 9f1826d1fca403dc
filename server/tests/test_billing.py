# server/tests/test_billing.py
"""Tests for billing webhook processing."""
from unittest.mock import patch

import pytest

from askbudi.billing import determine_plan, process_webhook_event
from askbudi.models import UserProfile

WEBHOOK_URL = "/v1/billing/webhook"


def profile_of(db, user):
    db.expire_all()
    return db.query(UserProfile).filter(UserProfile.id == user.id).one()


@pytest.mark.parametrize("data,expected", [
    ({"product_id": "pro_monthly"}, ("pro", 10000)),
    ({"plan_id": "enterprise_plan"}, ("enterprise", 100000)),
    ({"monthly_quota": 10000}, ("pro", 10000)),
    ({"monthly_quota": 250000}, ("enterprise", 100000)),
    ({"product_id": "hobby", "monthly_quota": 50}, ("free", 100)),
    ({}, ("free", 100)),
    ({"monthly_quota": "lots"}, ("free", 100)),
])
def test_determine_plan(data, expected):
    assert determine_plan(data) == expected


class TestWebhookEndpoint:
    def test_subscription_created(self, client, db, user):
        response = client.post(WEBHOOK_URL, json={
            "event_type": "subscription.created",
            "customer_id": user.id,
            "data": {"product_id": "pro", "stripe_customer_id": "cus_123"},
        })

        assert response.status_code == 200
        assert response.json() == {"received": True}
        profile = profile_of(db, user)
        assert profile.plan_type == "pro"
        assert profile.monthly_quota == 10000
        assert profile.billing_customer_id == "cus_123"

    def test_subscription_cancelled(self, client, db, make_user):
        user = make_user(plan="enterprise", monthly_quota=100000)
        client.post(WEBHOOK_URL, json={
            "event_type": "subscription.cancelled",
            "customer_id": user.id,
        })

        profile = profile_of(db, user)
        assert profile.plan_type == "free"
        assert profile.monthly_quota == 100

    def test_subscription_deleted_downgrades(self, client, db, make_user):
        user = make_user(plan="pro", monthly_quota=10000)
        client.post(WEBHOOK_URL, json={
            "event_type": "customer.subscription.deleted",
            "customer_id": user.id,
            "data": {},
        })
        assert profile_of(db, user).plan_type == "free"

    def test_payment_succeeded_resets_credits(self, client, db, user):
        profile = profile_of(db, user)
        profile.credits_remaining = 3
        profile.credits_used_this_month = 97
        db.commit()

        client.post(WEBHOOK_URL, json={
            "event_type": "invoice.payment_succeeded",
            "customer_id": user.id,
        })

        profile = profile_of(db, user)
        assert profile.credits_remaining == 100
        assert profile.credits_used_this_month == 0

    def test_unknown_event_leaves_profile_unchanged(self, client, db, user):
        before = profile_of(db, user)
        snapshot = (before.plan_type, before.monthly_quota, before.updated_at)

        response = client.post(WEBHOOK_URL, json={
            "event_type": "customer.updated",
            "customer_id": user.id,
            "data": {"product_id": "enterprise"},
        })

        assert response.status_code == 200
        after = profile_of(db, user)
        assert (after.plan_type, after.monthly_quota, after.updated_at) == snapshot

    def test_unknown_customer_acknowledged(self, client, db):
        response = client.post(WEBHOOK_URL, json={
            "event_type": "subscription.created",
            "customer_id": "usr_nobody",
            "data": {"product_id": "pro"},
        })
        assert response.status_code == 200
        assert db.query(UserProfile).count() == 0

    def test_malformed_body_acknowledged(self, client):
        response = client.post(
            WEBHOOK_URL,
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_non_object_body_acknowledged(self, client):
        response = client.post(WEBHOOK_URL, json=["subscription.created"])
        assert response.status_code == 200

    def test_handler_failure_acknowledged(self, client, db, user):
        with patch("askbudi.billing.determine_plan", side_effect=RuntimeError("boom")):
            response = client.post(WEBHOOK_URL, json={
                "event_type": "subscription.updated",
                "customer_id": user.id,
                "data": {"product_id": "pro"},
            })

        assert response.status_code == 200
        assert profile_of(db, user).plan_type == "free"

    def test_customer_lookup_failure_acknowledged(self, client, db, user):
        with patch("askbudi.billing._known_user", side_effect=RuntimeError("db down")):
            response = client.post(WEBHOOK_URL, json={
                "event_type": "subscription.updated",
                "customer_id": user.id,
                "data": {"product_id": "pro"},
            })

        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert profile_of(db, user).plan_type == "free"


def test_process_returns_outcome(db, user):
    assert process_webhook_event(db, "invoice.payment_failed", user.id, {}) == "processed"
    assert process_webhook_event(db, "something.else", user.id, {}) == "ignored"
    assert process_webhook_event(db, "subscription.created", None, {}) == "unknown_customer"


def test_process_lookup_failure_is_failed_outcome(db, user):
    with patch("askbudi.billing._known_user", side_effect=RuntimeError("db down")):
        assert process_webhook_event(db, "subscription.updated", user.id, {}) == "failed"


def test_subscription_update_creates_missing_profile(db, user):
    db.query(UserProfile).delete()
    db.commit()

    process_webhook_event(db, "subscription.updated", user.id, {"monthly_quota": 100000})

    assert profile_of(db, user).plan_type == "enterprise"
