from __future__ import annotations

import pytest

from vilanow.models.properties import PropertyFilters
from vilanow.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)
from vilanow.services.admin_service import AdminService
from vilanow.services.community_service import CommunityService
from vilanow.services.credit_service import CreditService
from vilanow.services.errors import (
    ConflictError,
    InvalidRequestError,
    NotAuthorizedError,
    NotFoundError,
    ServiceUnavailableError,
)
from vilanow.services.gamification_service import GamificationService
from vilanow.services.inspection_service import InspectionService
from vilanow.services.interest_service import InsufficientCreditsError, InterestService, mask_phone
from vilanow.services.notification_service import NotificationService
from vilanow.services.property_service import PropertyService
from vilanow.services.request_service import RequestService


@pytest.fixture()
def auth(registry, settings):
    return AuthService(registry, settings)


@pytest.fixture()
def notifier(registry):
    return NotificationService(registry.notifications)


@pytest.fixture()
def agent(auth):
    return auth.register("Agent Ada", "ada@vila.io", "s3cret-pass", phone="08011112222", role="agent").user


@pytest.fixture()
def seeker(auth):
    return auth.register("Seeker Sam", "sam@vila.io", "s3cret-pass", phone="08033334444").user


@pytest.fixture()
def listing(registry, notifier, agent):
    return PropertyService(registry, notifier).publish(
        agent, {"title": "Sea view flat", "type": "apartment", "price": 900, "location": "Lekki"}
    )


# -------------------------------------- auth --------------------------------------
def test_register_login_and_resolve_session(auth, registry):
    result = auth.register("Ada", " Ada@Vila.io ", "s3cret-pass", role="agent")
    assert "passwordHash" not in result.user
    assert result.user["email"] == "ada@vila.io"
    assert result.user["credits"] == 10

    login = auth.login("ada@vila.io", "s3cret-pass")
    user = auth.current_user(login.session_token)
    assert user["id"] == result.user["id"]
    assert registry.users.find_by_id(user["id"])["lastLoginAt"]

    assert auth.logout(login.session_token) is True
    assert auth.current_user(login.session_token) is None


def test_register_rejects_bad_input(auth):
    with pytest.raises(RegistrationError):
        auth.register("Ada", "not-an-email", "s3cret-pass")
    with pytest.raises(RegistrationError):
        auth.register("Ada", "ada@vila.io", "short")
    with pytest.raises(RegistrationError):
        auth.register("Ada", "ada@vila.io", "s3cret-pass", role="admin")
    auth.register("Ada", "ada@vila.io", "s3cret-pass")
    with pytest.raises(AccountExistsError):
        auth.register("Other", "ADA@vila.io", "s3cret-pass")


def test_login_rejects_wrong_password(auth):
    auth.register("Ada", "ada@vila.io", "s3cret-pass")
    with pytest.raises(InvalidCredentialsError):
        auth.login("ada@vila.io", "wrong-pass")
    with pytest.raises(InvalidCredentialsError):
        auth.login("nobody@vila.io", "s3cret-pass")


def test_change_password(auth):
    user = auth.register("Ada", "ada@vila.io", "s3cret-pass").user
    auth.change_password(user["id"], "s3cret-pass", "an0ther-pass")
    assert auth.login("ada@vila.io", "an0ther-pass").user["id"] == user["id"]
    with pytest.raises(InvalidCredentialsError):
        auth.change_password(user["id"], "s3cret-pass", "whatever-pass")


# -------------------------------------- properties --------------------------------------
def test_publish_counts_listing_and_matches_requests(registry, notifier, agent, seeker):
    requests = RequestService(registry)
    wanted = requests.post(seeker, {"location": "lekki", "type": "apartment", "maxBudget": 1000})
    elsewhere = requests.post(seeker, {"location": "Ikoyi"})

    prop = PropertyService(registry, notifier).publish(
        agent, {"title": "Flat", "type": "apartment", "price": 900, "location": "Lekki", "views": 99}
    )

    assert prop["status"] == "available"
    assert prop["views"] == 0
    assert registry.users.find_by_id(agent["id"])["totalListings"] == 1
    assert registry.property_requests.find_by_id(wanted["id"])["matches"] == 1
    assert registry.property_requests.find_by_id(elsewhere["id"])["matches"] == 0
    titles = [n["title"] for n in registry.notifications.find_by_user(seeker["id"])]
    assert "A new listing matches your request" in titles


def test_publish_validation_and_ownership(registry, notifier, agent, seeker, listing):
    svc = PropertyService(registry, notifier)
    with pytest.raises(NotAuthorizedError):
        svc.publish(seeker, {"title": "x", "type": "house", "price": 1, "location": "y"})
    with pytest.raises(InvalidRequestError):
        svc.publish(agent, {"title": "x"})
    with pytest.raises(NotAuthorizedError):
        svc.edit(seeker, listing["id"], {"price": 1})
    assert svc.edit(agent, listing["id"], {"price": 950, "agentId": "hijack"})["agentId"] == agent["id"]
    assert svc.get(listing["id"], count_view=True)["views"] == 1
    assert svc.remove(agent, listing["id"]) is True
    with pytest.raises(NotFoundError):
        svc.get(listing["id"])



def test_non_numeric_price_is_rejected_on_publish_and_edit(registry, notifier, agent, listing):
    svc = PropertyService(registry, notifier)
    with pytest.raises(InvalidRequestError):
        svc.publish(agent, {"title": "x", "type": "house", "price": "negotiable", "location": "y"})
    with pytest.raises(InvalidRequestError):
        svc.edit(agent, listing["id"], {"price": "negotiable"})
    with pytest.raises(InvalidRequestError):
        svc.edit(agent, listing["id"], {"price": -5})
    with pytest.raises(InvalidRequestError):
        svc.edit(agent, listing["id"], {"bedrooms": "three"})
    assert registry.properties.find_by_id(listing["id"])["price"] == 900
    assert svc.search(PropertyFilters(min_price=100))[0]["id"] == listing["id"]


def test_request_budget_validation(registry, seeker):
    with pytest.raises(InvalidRequestError):
        RequestService(registry).post(seeker, {"location": "Lekki", "minBudget": 10, "maxBudget": 5})
    with pytest.raises(InvalidRequestError):
        RequestService(registry).post(seeker, {"location": " "})


# -------------------------------------- interests --------------------------------------
def test_express_interest_opens_chat(registry, settings, notifier, agent, seeker, listing):
    svc = InterestService(registry, settings, notifier)
    result = svc.express(seeker["id"], listing["id"], "Is it still available?", 8)

    assert result.interest["status"] == "pending"
    assert result.chat_session["participantIds"] == [seeker["id"], agent["id"]]
    assert registry.chat_messages.find_by_session(result.chat_session["id"])[0]["message"] == "Is it still available?"
    assert registry.users.find_by_id(agent["id"])["totalInterests"] == 1
    with pytest.raises(ConflictError):
        svc.express(seeker["id"], listing["id"])

    seen_by_agent = svc.list_for(registry.users.find_by_id(agent["id"]))
    assert seen_by_agent[0]["seekerPhone"] == "******4444"
    assert seen_by_agent[0]["chatSessionId"] == result.chat_session["id"]
    assert svc.list_for(registry.users.find_by_id(seeker["id"]))[0]["seekerPhone"] == "08033334444"


def test_agent_cannot_express_interest_in_own_listing(registry, settings, notifier, agent, listing):
    with pytest.raises(InvalidRequestError):
        InterestService(registry, settings, notifier).express(agent["id"], listing["id"])


def test_unlock_spends_credits_and_records_transaction(registry, settings, notifier, agent, seeker, listing):
    svc = InterestService(registry, settings, notifier)
    interest = svc.express(seeker["id"], listing["id"]).interest

    result = svc.unlock(agent["id"], interest["id"])

    assert result.interest["unlocked"] is True
    assert result.interest["status"] == "contacted"
    assert result.credits_remaining == 5
    spent = registry.transactions.find_by_type("credit_spent")
    assert len(spent) == 1 and spent[0]["credits"] == 5
    with pytest.raises(ConflictError):
        svc.unlock(agent["id"], interest["id"])
    with pytest.raises(NotAuthorizedError):
        svc.unlock(seeker["id"], interest["id"])


def test_unlock_uses_runtime_cost_and_checks_balance(registry, settings, notifier, agent, seeker, listing):
    registry.app_settings.set_value("interest_unlock_cost", 50)
    svc = InterestService(registry, settings, notifier)
    interest = svc.express(seeker["id"], listing["id"]).interest

    with pytest.raises(InsufficientCreditsError):
        svc.unlock(agent["id"], interest["id"])
    assert registry.users.credits_of(agent["id"]) == 10
    assert registry.interests.find_by_id(interest["id"])["unlocked"] is False


def test_mask_phone():
    assert mask_phone("08012345678") == "******5678"
    assert mask_phone(None) == "******"


# -------------------------------------- credits --------------------------------------
def test_purchase_stays_pending_until_payment_is_confirmed(registry, agent, payments):
    svc = CreditService(registry, payments)
    opened = svc.purchase(agent["id"], "bundle-2")

    assert opened.transaction["status"] == "pending"
    assert opened.reference.startswith("CREDIT_")
    assert svc.balance(agent["id"]) == 10
    with pytest.raises(InvalidRequestError):
        svc.confirm(agent["id"], opened.reference)
    assert svc.balance(agent["id"]) == 10

    payments.pay(opened.reference, 2000)
    confirmed = svc.confirm(agent["id"], opened.reference)
    assert confirmed.credited is True
    assert confirmed.new_balance == 10 + 25 + 5
    assert confirmed.transaction["status"] == "completed"

    again = svc.confirm(agent["id"], opened.reference)
    assert again.credited is False
    assert svc.balance(agent["id"]) == 40
    assert svc.history(agent["id"])[0]["id"] == opened.transaction["id"]
    with pytest.raises(NotFoundError):
        svc.purchase(agent["id"], "bundle-99")


def test_failed_or_short_payment_adds_no_credits(registry, agent, seeker, payments):
    svc = CreditService(registry, payments)
    failed = svc.purchase(agent["id"], "bundle-1")
    payments.pay(failed.reference, 1000, status="failed")
    with pytest.raises(InvalidRequestError):
        svc.confirm(agent["id"], failed.reference)
    assert registry.transactions.find_by_reference(failed.reference)["status"] == "failed"
    with pytest.raises(InvalidRequestError):
        svc.confirm(agent["id"], failed.reference)

    short = svc.purchase(agent["id"], "bundle-1")
    payments.pay(short.reference, 10)
    with pytest.raises(InvalidRequestError):
        svc.confirm(agent["id"], short.reference)
    with pytest.raises(NotFoundError):
        svc.confirm(seeker["id"], short.reference)
    assert svc.balance(agent["id"]) == 10


def test_concurrent_confirmations_credit_once(registry, agent, payments):
    import threading

    svc = CreditService(registry, payments)
    opened = svc.purchase(agent["id"], "bundle-1")
    payments.pay(opened.reference, 1000)
    threads = [threading.Thread(target=svc.confirm, args=(agent["id"], opened.reference)) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert svc.balance(agent["id"]) == 20
    assert payments.calls == [opened.reference]


def test_purchases_need_a_payment_gateway(registry, agent):
    with pytest.raises(ServiceUnavailableError):
        CreditService(registry).purchase(agent["id"], "bundle-1")

# -------------------------------------- notifications --------------------------------------
def test_notifications_are_best_effort(registry, monkeypatch):
    from vilanow.repositories.base import StorageUnavailableError

    notifier = NotificationService(registry.notifications)

    def _fail(record):
        raise StorageUnavailableError("notifications", "disk full")

    monkeypatch.setattr(registry.notifications, "create", _fail)
    assert notifier.send("u1", "Hi", "there") is None
    with pytest.raises(ValueError):
        notifier.send("u1", "Hi", "there", "bogus")


def test_new_message_preview_is_truncated(registry):
    notifier = NotificationService(registry.notifications)
    note = notifier.new_message(recipient_id="u1", sender_name="Ada", chat_session_id="c1", text="x" * 150)
    assert note["message"] == "x" * 100 + "..."


# -------------------------------------- inspections --------------------------------------
def test_inspection_lifecycle(registry, settings, notifier, agent, seeker, listing):
    interest = InterestService(registry, settings, notifier).express(seeker["id"], listing["id"]).interest
    svc = InspectionService(registry, notifier)

    with pytest.raises(InvalidRequestError):
        svc.schedule(seeker, interest["id"], "2000-01-01", "10:00")
    with pytest.raises(InvalidRequestError):
        svc.schedule(seeker, interest["id"], "01/05/2099", "10:00")
    with pytest.raises(InvalidRequestError):
        svc.schedule(seeker, interest["id"], "2099-05-01", "25:00")
    with pytest.raises(NotAuthorizedError):
        svc.schedule(agent, interest["id"], "2099-05-01", "10:30")

    booked = svc.schedule(seeker, interest["id"], "2099-05-01", "10:30", "Bring keys")
    assert booked["status"] == "pending"
    assert booked["agentId"] == agent["id"]
    assert registry.interests.find_by_id(interest["id"])["status"] == "viewing-scheduled"
    assert registry.notifications.find_by_user(agent["id"])[0]["title"] == "Inspection scheduled"
    with pytest.raises(ConflictError):
        svc.schedule(seeker, interest["id"], "2099-06-01", "09:00")

    assert svc.mine(seeker["id"])[0]["property"]["title"] == "Sea view flat"
    upcoming = svc.for_agent(agent["id"], upcoming=True)
    assert [i["id"] for i in upcoming] == [booked["id"]]
    assert upcoming[0]["seeker"]["name"] == "Seeker Sam"
    with pytest.raises(NotAuthorizedError):
        svc.for_property(seeker, listing["id"])
    assert len(svc.for_property(agent, listing["id"])) == 1

    moved = svc.update(seeker, booked["id"], {"scheduledDate": "2099-05-02", "scheduledTime": "11:00", "status": "completed"})
    assert moved["status"] == "rescheduled"
    assert moved["scheduledDate"] == "2099-05-02"
    confirmed = svc.update(agent, booked["id"], {"status": "confirmed", "agentNotes": "Gate code 42"})
    assert confirmed["status"] == "confirmed"
    assert registry.notifications.find_by_user(seeker["id"])[0]["title"] == "Inspection confirmed"

    cancelled = svc.cancel(seeker, booked["id"])
    assert cancelled["status"] == "cancelled"
    assert registry.inspections.count() == 1
    assert registry.interests.find_by_id(interest["id"])["status"] == "contacted"
    assert registry.notifications.find_by_user(agent["id"])[0]["title"] == "Inspection cancelled"
    assert svc.for_agent(agent["id"], upcoming=True) == []


def test_strangers_cannot_touch_an_inspection(registry, settings, notifier, auth, seeker, listing):
    interest = InterestService(registry, settings, notifier).express(seeker["id"], listing["id"]).interest
    svc = InspectionService(registry, notifier)
    booked = svc.schedule(seeker, interest["id"], "2099-05-01", "10:30")
    stranger = auth.register("Nosy", "nosy@vila.io", "s3cret-pass").user

    with pytest.raises(NotAuthorizedError):
        svc.update(stranger, booked["id"], {"status": "cancelled"})
    with pytest.raises(NotAuthorizedError):
        svc.cancel(stranger, booked["id"])
    with pytest.raises(NotFoundError):
        svc.cancel(seeker, "missing")


# -------------------------------------- gamification & community --------------------------------------
def test_leaderboard_ranks_active_agents_without_secrets(registry, auth, agent, seeker):
    rival = auth.register("Agent Bo", "bo@vila.io", "s3cret-pass", role="agent").user
    retired = auth.register("Agent Cy", "cy@vila.io", "s3cret-pass", role="agent").user
    registry.users.update(agent["id"], {"xp": 120})
    registry.users.update(rival["id"], {"xp": 300})
    registry.users.update(retired["id"], {"xp": 999, "active": False})

    board = GamificationService(registry).leaderboard()
    assert [entry["id"] for entry in board] == [rival["id"], agent["id"]]
    assert all("passwordHash" not in entry for entry in board)
    assert len(GamificationService(registry).leaderboard("passwordHash", limit=1)) == 1


def test_gamification_reads_default_to_the_caller(registry, agent, seeker):
    registry.quests.create({"id": "q1", "userId": seeker["id"], "type": "daily", "completed": False})
    registry.quests.create({"id": "q2", "userId": seeker["id"], "type": "weekly", "completed": True})
    registry.challenges.create({"id": "c1", "agentId": agent["id"], "completed": False})
    registry.challenges.create({"id": "c2", "agentId": "someone-else", "completed": True})
    registry.territories.create({"id": "t1", "agentId": "someone-else", "area": "Lekki Phase 1"})
    svc = GamificationService(registry)

    assert [q["id"] for q in svc.quests(seeker, completed=False)] == ["q1"]
    assert [q["id"] for q in svc.quests(seeker, type_="weekly")] == ["q2"]
    assert [c["id"] for c in svc.challenges(agent)] == ["c1"]
    assert [c["id"] for c in svc.challenges(seeker, completed=True)] == ["c2"]
    assert [t["id"] for t in svc.territories(seeker, area="lekki")] == ["t1"]
    assert svc.territories(agent) == []


def test_group_messages_are_for_members_only(registry, agent, seeker):
    registry.groups.create({"id": "g1", "name": "Lekki agents", "createdBy": agent["id"], "members": [{"id": agent["id"]}]})
    registry.group_messages.create({"id": "m2", "groupId": "g1", "message": "second", "timestamp": "2024-05-02T00:00:00+00:00"})
    registry.group_messages.create({"id": "m1", "groupId": "g1", "message": "first", "timestamp": "2024-05-01T00:00:00+00:00"})
    registry.marketplace_offers.create({"id": "o1", "agentId": agent["id"], "type": "lead", "status": "active"})
    registry.marketplace_offers.create({"id": "o2", "agentId": agent["id"], "type": "lead", "status": "sold"})
    svc = CommunityService(registry)

    assert [g["id"] for g in svc.my_groups(agent)] == ["g1"]
    assert [m["id"] for m in svc.group_messages(agent, "g1")] == ["m1", "m2"]
    with pytest.raises(NotAuthorizedError):
        svc.group_messages(seeker, "g1")
    with pytest.raises(NotFoundError):
        svc.group_messages(agent, "missing")
    assert [o["id"] for o in svc.offers(type_="lead")] == ["o1"]
    assert [o["id"] for o in svc.offers(agent_id=agent["id"])] == ["o1", "o2"]


def test_setting_change_is_audited(registry, agent):
    svc = AdminService(registry)
    updated = svc.set_setting(agent, "interest_unlock_cost", 7)

    assert updated["value"] == 7
    action = svc.recent_actions()[0]
    assert action["details"] == {"key": "interest_unlock_cost", "from": 5, "to": 7}
    with pytest.raises(NotFoundError):
        svc.set_setting(agent, "no_such_setting", 1)
    assert len(svc.recent_actions()) == 1
