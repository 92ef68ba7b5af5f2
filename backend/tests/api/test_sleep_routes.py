"""Sleep routes: one record per night, own records only."""


async def test_submit_record_keys_by_user_and_date(client, store):
    res = await client.post("/api/sleep", json={
        "date": "2025-03-01", "totalSleepMinutes": 420, "deepSleepMinutes": 90,
    })
    assert res.status_code == 201
    body = res.json()
    assert body["id"] == "user-1_2025-03-01"
    assert body["userId"] == "user-1"
    assert body["totalSleepMinutes"] == 420
    assert "user-1_2025-03-01" in store.collections["sleepRecords"]


async def test_resubmitting_a_night_overwrites_it(client, store):
    await client.post("/api/sleep", json={"date": "2025-03-01", "totalSleepMinutes": 400})
    await client.post("/api/sleep", json={"date": "2025-03-01", "totalSleepMinutes": 450})
    assert len(store.collections["sleepRecords"]) == 1
    assert store.collections["sleepRecords"]["user-1_2025-03-01"]["totalSleepMinutes"] == 450


async def test_form_encoded_submission_accepted(client):
    res = await client.post(
        "/api/sleep", data={"date": "2025-03-02", "totalSleepMinutes": "380"},
    )
    assert res.status_code == 201
    assert res.json()["totalSleepMinutes"] == 380


async def test_stages_exceeding_total_rejected(client, store):
    res = await client.post("/api/sleep", json={
        "date": "2025-03-01", "totalSleepMinutes": 60, "deepSleepMinutes": 90,
    })
    assert res.status_code == 400
    assert "totalSleepMinutes" in res.json()["error"]
    assert "sleepRecords" not in store.collections


async def test_list_returns_only_own_records_newest_first(client, store):
    store.seed("sleepRecords", "user-1_2025-03-01", {"userId": "user-1", "date": "2025-03-01"})
    store.seed("sleepRecords", "user-1_2025-03-03", {"userId": "user-1", "date": "2025-03-03"})
    store.seed("sleepRecords", "user-2_2025-03-02", {"userId": "user-2", "date": "2025-03-02"})

    res = await client.get("/api/sleep", params={"limit": 5})
    assert res.status_code == 200
    body = res.json()
    assert body["count"] == 2
    assert [r["date"] for r in body["records"]] == ["2025-03-03", "2025-03-01"]


async def test_foreign_record_reads_as_404(client, store):
    store.seed("sleepRecords", "user-2_2025-03-02", {"userId": "user-2", "date": "2025-03-02"})
    res = await client.get("/api/sleep/user-2_2025-03-02")
    assert res.status_code == 404


async def test_delete_own_record(client, store):
    store.seed("sleepRecords", "user-1_2025-03-01", {"userId": "user-1", "date": "2025-03-01"})
    res = await client.delete("/api/sleep/user-1_2025-03-01")
    assert res.status_code == 204
    assert store.collections["sleepRecords"] == {}
