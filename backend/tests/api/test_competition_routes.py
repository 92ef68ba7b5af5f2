"""Competition and invitation routes: membership rules over the document store."""

import pytest


@pytest.fixture
def private_competition(store):
    return store.seed("competitions", "comp-1", {
        "name": "March Madness", "isPublic": False, "ownerId": "user-1",
        "participants": ["user-1"], "startDate": "2025-03-01",
    })


async def test_create_competition_makes_creator_owner(client):
    res = await client.post("/api/competitions", json={
        "name": "Spring Sleep-off", "startDate": "2025-04-01", "endDate": "2025-04-30",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["ownerId"] == "user-1"
    assert body["participants"] == ["user-1"]
    assert body["isPublic"] is False


async def test_end_before_start_rejected(client):
    res = await client.post("/api/competitions", json={
        "name": "Backwards", "startDate": "2025-04-30", "endDate": "2025-04-01",
    })
    assert res.status_code == 400


async def test_list_my_competitions(client, store, private_competition):
    store.seed("competitions", "comp-2", {
        "name": "Other", "participants": ["user-9"], "startDate": "2025-01-01",
    })
    res = await client.get("/api/competitions")
    assert [c["id"] for c in res.json()["competitions"]] == ["comp-1"]


async def test_join_public_competition(client, store):
    store.seed("competitions", "open", {
        "name": "Open", "isPublic": True, "participants": ["user-9"],
    })
    res = await client.post("/api/competitions/open/join")
    assert res.status_code == 200
    assert res.json()["participants"] == ["user-9", "user-1"]


async def test_join_twice_conflicts(client, store):
    store.seed("competitions", "open", {
        "name": "Open", "isPublic": True, "participants": ["user-1"],
    })
    res = await client.post("/api/competitions/open/join")
    assert res.status_code == 409


async def test_join_private_forbidden(client, store):
    store.seed("competitions", "closed", {
        "name": "Closed", "isPublic": False, "participants": ["user-9"],
    })
    res = await client.post("/api/competitions/closed/join")
    assert res.status_code == 403


async def test_missing_competition_404(client):
    res = await client.get("/api/competitions/nope")
    assert res.status_code == 404
    assert res.json()["error"] == "Competition 'nope' not found"


async def test_invitation_creates_notification(client, store, private_competition):
    store.seed("users", "user-2", {"displayName": "Grace"})
    res = await client.post("/api/invitations", json={
        "competitionId": "comp-1", "inviteeId": "user-2",
    })
    assert res.status_code == 201
    invitation = res.json()
    assert invitation["status"] == "pending"
    assert invitation["inviterId"] == "user-1"

    notifications = list(store.collections["notifications"].values())
    assert len(notifications) == 1
    assert notifications[0]["userId"] == "user-2"
    assert notifications[0]["invitationId"] == invitation["id"]


async def test_non_participant_cannot_invite(client, store):
    store.seed("competitions", "comp-x", {"name": "X", "participants": ["user-9"]})
    store.seed("users", "user-2", {})
    res = await client.post("/api/invitations", json={
        "competitionId": "comp-x", "inviteeId": "user-2",
    })
    assert res.status_code == 403


async def test_accepting_invitation_joins_competition(client, store):
    store.seed("competitions", "comp-9", {"name": "Nine", "participants": ["user-9"]})
    store.seed("invitations", "inv-1", {
        "competitionId": "comp-9", "inviteeId": "user-1", "status": "pending",
    })
    res = await client.post("/api/invitations/inv-1/respond", json={"accept": True})
    assert res.status_code == 200
    assert res.json()["status"] == "accepted"
    assert store.collections["competitions"]["comp-9"]["participants"] == ["user-9", "user-1"]


async def test_answered_invitation_conflicts(client, store):
    store.seed("invitations", "inv-1", {
        "competitionId": "comp-9", "inviteeId": "user-1", "status": "declined",
    })
    res = await client.post("/api/invitations/inv-1/respond", json={"accept": True})
    assert res.status_code == 409


async def test_list_pending_invitations(client, store):
    store.seed("invitations", "inv-1", {
        "inviteeId": "user-1", "status": "pending", "createdAt": "2025-03-01T00:00:00Z",
    })
    store.seed("invitations", "inv-2", {
        "inviteeId": "user-1", "status": "accepted", "createdAt": "2025-03-02T00:00:00Z",
    })
    res = await client.get("/api/invitations")
    assert [i["id"] for i in res.json()["invitations"]] == ["inv-1"]
