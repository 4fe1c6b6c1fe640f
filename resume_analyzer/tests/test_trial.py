"""Tests for trial quota and GET /api/trial"""
from datetime import datetime, timedelta

import pytest

from resume_analyzer.app.services.trial_service import (
    TrialExhaustedError,
    can_analyze,
    consume_trial,
    get_trial_status,
    refund_trial,
)


def test_trial_status_fresh_user(test_user):
    status = get_trial_status(test_user)
    assert status.used == 0
    assert status.remaining == 3
    assert status.level == "ok"
    assert status.message == "3 free analyses remaining"
    assert status.show_upgrade is False


def test_trial_status_one_left(test_user):
    test_user.trial_uses = 2
    status = get_trial_status(test_user)
    assert status.remaining == 1
    assert status.level == "low"
    assert status.message == "Only 1 analysis remaining!"
    assert status.show_upgrade is True


def test_trial_status_never_negative(test_user):
    test_user.trial_uses = 7
    status = get_trial_status(test_user)
    assert status.remaining == 0
    assert status.percent_used == 100.0
    assert status.message == "Trial exhausted. Upgrade to continue analyzing resumes."


def test_trial_status_expired(test_user):
    test_user.trial_expires_at = datetime.utcnow() - timedelta(days=1)
    status = get_trial_status(test_user)
    assert status.expired is True
    assert status.remaining == 0


def test_consume_until_exhausted(db_session, test_user):
    for expected_remaining in (2, 1, 0):
        assert consume_trial(db_session, test_user).remaining == expected_remaining
    with pytest.raises(TrialExhaustedError):
        consume_trial(db_session, test_user)
    db_session.refresh(test_user)
    assert test_user.trial_uses == 3
    assert not can_analyze(test_user)


def test_consume_expired_trial_raises(db_session, test_user):
    test_user.trial_expires_at = datetime.utcnow() - timedelta(minutes=1)
    db_session.commit()
    with pytest.raises(TrialExhaustedError, match="expired"):
        consume_trial(db_session, test_user)


def test_paid_user_is_not_charged(db_session, test_user):
    test_user.subscription_tier = "monthly"
    test_user.trial_uses = 3
    db_session.commit()
    consume_trial(db_session, test_user)
    db_session.refresh(test_user)
    assert test_user.trial_uses == 3
    assert can_analyze(test_user)


def test_refund_trial_floors_at_zero(db_session, test_user):
    consume_trial(db_session, test_user)
    refund_trial(db_session, test_user)
    refund_trial(db_session, test_user)
    assert test_user.trial_uses == 0


def test_trial_endpoint_requires_auth(client):
    assert client.get("/api/trial").status_code == 401


def test_trial_endpoint(client, auth_headers, db_session, test_user):
    test_user.trial_uses = 1
    db_session.commit()
    r = client.get("/api/trial", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["used"] == 1
    assert data["max"] == 3
    assert data["remaining"] == 2
    assert data["subscription_tier"] == "free"
