"""Tests for lumin.utils helpers"""
import pytest
from datetime import date, datetime, timedelta, timezone

from lumin.exceptions import AuthenticationError, AuthorizationError, RecordNotFoundError
from lumin.utils.ai_cache import AICache
from lumin.utils.clock import FixedClock, SystemClock, day_window, yesterday
from lumin.utils.ids import ensure_owner, parse_record_id
from lumin.utils.sanitize import sanitize_fields, sanitize_list, sanitize_text
from lumin.utils.security import (
    create_access_token,
    create_refresh_token,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)


# ============================================================================
# Sanitization
# ============================================================================

def test_sanitize_strips_script_blocks():
    assert sanitize_text("<script>alert('x')</script>Hello") == "Hello"


def test_sanitize_strips_tags_and_handlers():
    assert sanitize_text('<b onclick="steal()">bold</b>') == "bold"
    assert sanitize_text("javascript:alert(1)") == "alert(1)"


def test_sanitize_keeps_plain_text_literal():
    assert sanitize_text("fish & chips") == "fish & chips"
    assert sanitize_text("Tom's \"list\"") == "Tom's \"list\""
    assert sanitize_text(None) is None


def test_sanitize_never_lengthens():
    """Test entity-heavy text stays within the length it was validated at"""
    title = ("Tom & Jerry's " * 7).strip()

    assert len(sanitize_text(title)) <= len(title)


def test_sanitize_list_drops_empty():
    assert sanitize_list(["work", "<i></i>", " family "]) == ["work", "family"]


def test_sanitize_fields_only_touches_named_strings():
    data = {"notes": "<b>hi</b>", "title": "<b>t</b>", "mood_intensity": 5}
    result = sanitize_fields(data, ("notes", "mood_intensity"))

    assert result["notes"] == "hi"
    assert result["title"] == "<b>t</b>"
    assert result["mood_intensity"] == 5


# ============================================================================
# AI Cache
# ============================================================================

def test_ai_cache_roundtrip():
    cache = AICache(max_size=2)
    key = AICache.make_key("prompt", {"b": 1, "a": 2})

    cache.set(key, "reply")

    assert cache.get(key) == "reply"
    assert key in cache
    assert cache.get("missing") is None


def test_ai_cache_key_ignores_context_order():
    assert AICache.make_key("p", {"a": 1, "b": 2}) == AICache.make_key("p", {"b": 2, "a": 1})
    assert AICache.make_key("p", {"a": 1}) != AICache.make_key("p", {"a": 2})


def test_ai_cache_evicts_least_recently_used():
    """Test a read refreshes recency so the other entry is evicted"""
    cache = AICache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)

    assert "a" in cache
    assert "b" not in cache
    assert len(cache) == 2


def test_ai_cache_rejects_zero_size():
    with pytest.raises(ValueError):
        AICache(max_size=0)


# ============================================================================
# Clock
# ============================================================================

def test_fixed_clock_advance():
    clock = FixedClock(datetime(2024, 3, 15, 23, 59, 30, tzinfo=timezone.utc))
    assert clock.today() == date(2024, 3, 15)

    clock.advance(seconds=60)
    assert clock.today() == date(2024, 3, 16)

    clock.advance(days=2)
    assert clock.today() == date(2024, 3, 18)


def test_fixed_clock_assumes_utc_for_naive():
    clock = FixedClock(datetime(2024, 3, 15, 12, 0))
    assert clock.now().tzinfo == timezone.utc


def test_yesterday_and_day_window(clock):
    assert yesterday(clock) == date(2024, 3, 14)
    assert day_window(clock, 7) == (date(2024, 3, 9), date(2024, 3, 15))


def test_system_clock_timezone_aware():
    now = SystemClock("UTC").now()
    assert now.utcoffset() == timedelta(0)


# ============================================================================
# Identifiers
# ============================================================================

def test_parse_record_id_normalizes():
    raw = "6F1C2B3A-4D5E-4F60-8A7B-9C0D1E2F3A4B"
    assert parse_record_id(raw, "Entry") == raw.lower()


def test_parse_record_id_malformed_is_not_found():
    with pytest.raises(RecordNotFoundError) as exc_info:
        parse_record_id("not-a-uuid", "Goal")

    assert exc_info.value.status_code == 404


def test_ensure_owner(test_user_id):
    record = {"id": "g1", "user_id": test_user_id}
    ensure_owner(record, test_user_id, "Goal")

    with pytest.raises(AuthorizationError):
        ensure_owner(record, "someone-else", "Goal")


# ============================================================================
# Security
# ============================================================================

def test_password_hash_roundtrip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


def test_token_pair_decodes(test_user_id):
    tokens = create_token_pair(test_user_id)

    assert tokens["token_type"] == "bearer"
    assert decode_token(tokens["access_token"])["sub"] == test_user_id
    assert decode_token(tokens["refresh_token"], expected_type="refresh")["sub"] == test_user_id


def test_refresh_token_rejected_as_access(test_user_id):
    token = create_refresh_token(test_user_id)

    with pytest.raises(AuthenticationError):
        decode_token(token)


def test_expired_token_rejected(test_user_id):
    token = create_access_token(test_user_id, expires_delta=timedelta(seconds=-10))

    with pytest.raises(AuthenticationError):
        decode_token(token)


def test_garbage_token_rejected():
    with pytest.raises(AuthenticationError):
        decode_token("not.a.token")
