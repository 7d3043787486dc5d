"""Daily Spoonacular quota ledger."""

from datetime import datetime, timedelta

from repositories.cache_repository import QuotaRepository
from services.quota_service import QuotaService
from test_fixtures import Clock


def make_quota(db, clock, limit=150, buffer=10):
    return QuotaService(QuotaRepository(db), limit=limit, buffer=buffer, clock=clock)


def test_fresh_day_allows_requests(mongo_db):
    quota = make_quota(mongo_db, Clock())

    allowance = quota.check_allowance()

    assert allowance.allowed is True
    assert allowance.used == 0
    assert allowance.remaining == 150


def test_buffer_is_kept_in_reserve(mongo_db):
    quota = make_quota(mongo_db, Clock(), limit=12, buffer=10)

    quota.record_usage("complex_search")
    assert quota.check_allowance().allowed is True
    quota.record_usage("complex_search")

    allowance = quota.check_allowance()
    assert allowance.allowed is False
    assert allowance.remaining == 10


def test_api_headers_override_local_count(mongo_db):
    quota = make_quota(mongo_db, Clock())

    doc = quota.record_usage("recipe_information", quota_used=149, quota_left=1)

    assert doc["request_count"] == 149
    assert doc["api_quota_left"] == 1
    assert doc["endpoints"]["recipe_information"] == 1
    assert quota.check_allowance().allowed is False


def test_api_quota_left_caps_local_estimate(mongo_db):
    quota = make_quota(mongo_db, Clock())

    quota.record_usage("complex_search", quota_used=1, quota_left=8)

    allowance = quota.check_allowance()
    assert allowance.used == 1
    assert allowance.remaining == 8
    assert allowance.allowed is False
    assert quota.status()["remaining"] == 8


def test_local_estimate_used_when_api_reports_more(mongo_db):
    quota = make_quota(mongo_db, Clock(), limit=50)

    quota.record_usage("complex_search", quota_used=1, quota_left=500)

    assert quota.check_allowance().remaining == 49


def test_zero_quota_left_marks_exceeded(mongo_db):
    quota = make_quota(mongo_db, Clock())

    quota.record_usage("random", quota_used=20, quota_left=0)

    status = quota.status()
    assert status["is_quota_exceeded"] is True
    assert status["can_make_requests"] is False


def test_new_day_resets_counters(mongo_db):
    clock = Clock()
    quota = make_quota(mongo_db, clock)
    quota.mark_exhausted()
    assert quota.check_allowance().allowed is False

    clock.advance(days=1)
    allowance = quota.check_allowance()

    assert allowance.allowed is True
    assert allowance.used == 0
    assert mongo_db["spoonacular_quota"].count_documents({}) == 2


def test_status_reports_reset_time(mongo_db):
    clock = Clock(datetime(2025, 3, 10, 18, 30))
    quota = make_quota(mongo_db, clock)

    status = quota.status()

    assert status["date"] == "2025-03-10"
    assert status["reset_time"] == datetime(2025, 3, 10) + timedelta(days=1)
    assert status["limit"] == 150
    assert status["buffer"] == 10
    assert set(status["endpoints"]) >= {"complex_search", "recipe_information", "nutrition"}
