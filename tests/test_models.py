from __future__ import annotations

from datetime import datetime, timedelta, timezone

from vilanow.models import PropertyFilters, RequestFilters
from vilanow.models.credits import DEFAULT_BUNDLES


def test_registry_seeds_bundles_and_settings_once(settings, registry):
    from vilanow.registry import build_registry

    assert registry.credit_bundles.count() == len(DEFAULT_BUNDLES)
    assert registry.app_settings.get_value("interest_unlock_cost") == 5
    again = build_registry(settings)
    assert again.credit_bundles.count() == len(DEFAULT_BUNDLES)
    assert set(registry.backends().values()) == {"json"}


def test_users_by_email_and_credits(registry):
    users = registry.users
    users.create({"id": "a1", "email": "Agent@Vila.io", "role": "agent", "credits": 3, "active": True})
    users.create({"id": "s1", "email": "seek@vila.io", "role": "seeker", "active": False})

    assert users.find_by_email("agent@vila.IO")["id"] == "a1"
    assert users.find_by_email("") is None
    assert [u["id"] for u in users.find_agents()] == ["a1"]
    assert [u["id"] for u in users.find_active_users()] == ["a1"]
    assert users.adjust_credits("a1", -2)["credits"] == 1
    assert users.credits_of("a1") == 1
    assert users.credits_of("ghost") == 0


def test_property_search_filters(registry):
    props = registry.properties
    props.create({"id": "p1", "title": "Flat", "type": "apartment", "price": 900, "location": "Lekki", "area": "Phase 1", "status": "available", "agentId": "a1", "bedrooms": 2})
    props.create({"id": "p2", "title": "House", "type": "house", "price": 5000, "location": "Ikoyi", "status": "available", "agentId": "a2", "featured": True})
    props.create({"id": "p3", "title": "Old flat", "type": "apartment", "price": 700, "location": "Lekki", "status": "rented", "agentId": "a1"})

    assert [p["id"] for p in props.search(PropertyFilters(location="lekki", status="available"))] == ["p1"]
    assert [p["id"] for p in props.find_by_location("phase")] == ["p1"]
    assert [p["id"] for p in props.find_by_price_range(800, 6000)] == ["p1", "p2"]
    assert [p["id"] for p in props.find_featured()] == ["p2"]
    assert [p["id"] for p in props.find_by_agent("a1")] == ["p1", "p3"]
    assert props.increment_views("p1")["views"] == 1
    assert props.increment_views("p1")["views"] == 2
    assert props.increment_views("missing") is None



def test_search_skips_listings_with_non_numeric_values(registry):
    props = registry.properties
    props.create({"id": "p1", "type": "house", "price": "negotiable", "location": "Lekki", "status": "available", "bedrooms": "3"})
    props.create({"id": "p2", "type": "house", "price": 900, "location": "Lekki", "status": "available", "bedrooms": 3})

    assert [p["id"] for p in props.search(PropertyFilters(min_price=100, max_price=1000))] == ["p2"]
    assert [p["id"] for p in props.search(PropertyFilters(location="lekki"))] == ["p1", "p2"]

    requests = registry.property_requests
    requests.create({"id": "r1", "location": "Lekki", "maxBudget": "a lot", "status": "active"})
    requests.create({"id": "r2", "location": "Lekki", "maxBudget": 1000, "status": "active"})
    assert [r["id"] for r in requests.find_matching(props.find_by_id("p1"))] == ["r1"]
    assert [r["id"] for r in requests.find_matching(props.find_by_id("p2"))] == ["r1", "r2"]
    assert [r["id"] for r in requests.search(RequestFilters(min_budget=500))] == ["r2"]


def test_request_matching(registry):
    requests = registry.property_requests
    requests.create({"id": "r1", "location": "Lekki", "type": "apartment", "minBudget": 500, "maxBudget": 1000, "status": "active"})
    requests.create({"id": "r2", "location": "Ikoyi", "status": "active"})
    requests.create({"id": "r3", "location": "Lekki", "status": "fulfilled"})
    requests.create({"id": "r4", "location": "Lekki", "bedrooms": 3, "status": "active"})

    listing = {"type": "apartment", "price": 900, "location": "Lekki", "bedrooms": 2}
    assert [r["id"] for r in requests.find_matching(listing)] == ["r1"]
    assert [r["id"] for r in requests.search(RequestFilters(min_budget=800))] == ["r1"]
    assert requests.increment_matches("r1")["matches"] == 1


def test_sessions_expiry(registry):
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    sessions = registry.sessions
    sessions.create({"id": "s1", "userId": "u1", "token": "t1", "expiresAt": (now + timedelta(hours=1)).isoformat()})
    sessions.create({"id": "s2", "userId": "u1", "token": "t2", "expiresAt": (now - timedelta(hours=1)).isoformat()})
    sessions.create({"id": "s3", "userId": "u2", "token": "t3", "expiresAt": "garbage"})

    assert [s["id"] for s in sessions.find_active(now)] == ["s1"]
    assert sessions.find_by_token("t1")["id"] == "s1"
    assert sessions.clean_expired(now) == 2
    assert sessions.delete_by_user("u1") == 1
    assert sessions.count() == 0


def test_chat_messages_sorted_and_marked(registry):
    messages = registry.chat_messages
    messages.create({"id": "m2", "sessionId": "c1", "senderId": "a", "timestamp": "2024-01-02T00:00:00", "read": False})
    messages.create({"id": "m1", "sessionId": "c1", "senderId": "b", "timestamp": "2024-01-01T00:00:00", "read": False})
    messages.create({"id": "m3", "sessionId": "c2", "senderId": "a", "timestamp": "2024-01-01T00:00:00", "read": False})

    assert [m["id"] for m in messages.find_by_session("c1")] == ["m1", "m2"]
    assert messages.mark_as_read("m1") is True
    assert messages.mark_as_read("nope") is False
    assert [m["id"] for m in messages.find_unread("b")] == ["m2", "m3"]


def test_notifications_newest_first(registry):
    notes = registry.notifications
    notes.create({"id": "n1", "userId": "u1", "createdAt": "2024-01-01", "read": False})
    notes.create({"id": "n2", "userId": "u1", "createdAt": "2024-01-03", "read": False})
    notes.create({"id": "n3", "userId": "u2", "createdAt": "2024-01-02", "read": False})

    assert [n["id"] for n in notes.find_by_user("u1")] == ["n2", "n1"]
    assert notes.mark_all_read("u1") == 2
    assert notes.find_unread("u1") == []
    assert notes.delete_by_user("u1") == 2
    assert [n["id"] for n in notes.find_all()] == ["n3"]


def test_settings_values(registry):
    settings = registry.app_settings
    assert settings.get_value("missing", "fallback") == "fallback"
    assert settings.set_value("interest_unlock_cost", 7, updated_by="admin")["value"] == 7
    assert settings.get_value("interest_unlock_cost") == 7
    assert settings.set_value("missing", 1) is None


def test_gamification_and_marketplace_queries(registry):
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    registry.quests.create({"id": "q1", "userId": "a1", "completed": False, "expiresAt": "2024-06-01T00:00:00+00:00"})
    registry.quests.create({"id": "q2", "userId": "a1", "completed": True, "expiresAt": "2024-06-01T00:00:00+00:00"})
    registry.badges.create({"id": "b1", "agentId": "a1", "badge": "top_seller"})

    assert [q["id"] for q in registry.quests.find_active("a1", now)] == ["q1"]
    assert [q["id"] for q in registry.quests.find_completed("a1")] == ["q2"]
    assert registry.badges.has_badge("a1", "top_seller")
    assert not registry.badges.has_badge("a1", "rookie")


def test_inspections_upcoming_by_date(registry):
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    inspections = registry.inspections
    inspections.create({"id": "i1", "agentId": "a1", "scheduledDate": "2024-05-10", "status": "confirmed"})
    inspections.create({"id": "i2", "agentId": "a1", "scheduledDate": "2024-05-03", "status": "pending"})
    inspections.create({"id": "i3", "agentId": "a1", "scheduledDate": "2024-04-01", "status": "pending"})
    inspections.create({"id": "i4", "agentId": "a1", "scheduledDate": "2024-05-04", "status": "cancelled"})

    assert [i["id"] for i in inspections.find_upcoming("a1", now)] == ["i2", "i1"]
    assert [i["id"] for i in inspections.find_pending("a1")] == ["i2", "i3"]


def test_groups_and_collaborations(registry):
    registry.groups.create({"id": "g1", "createdBy": "a1", "members": [{"id": "a1"}, {"id": "a2"}]})
    registry.collaborations.create({"id": "c1", "initiatorId": "a1", "partnerId": "a2", "status": "pending"})

    assert [g["id"] for g in registry.groups.find_by_member("a2")] == ["g1"]
    assert [c["id"] for c in registry.collaborations.find_pending("a2")] == ["c1"]
    assert registry.collaborations.find_active("a1") == []
