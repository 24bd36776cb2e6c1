import pytest


@pytest.mark.asyncio
async def test_profile_update_applies_partial_changes(api_client, register):
    user, headers = await register("Ada", bio="Original bio", location="Paris", interests=["Chess"])

    resp = await api_client.put(
        "/api/users/profile",
        headers=headers,
        json={"name": "", "bio": "New bio", "skills": ["SQL"], "privacy_settings": {"show_email": True}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Profile updated successfully"
    updated = body["user"]
    assert updated["name"] == "Ada"
    assert updated["bio"] == "New bio"
    assert updated["location"] == "Paris"
    assert updated["interests"] == ["Chess"]
    assert updated["skills"] == ["SQL"]
    assert updated["privacy_settings"]["show_email"] is True

    profile = await api_client.get("/api/users/profile", headers=headers)
    assert profile.json()["bio"] == "New bio"


@pytest.mark.asyncio
async def test_public_profile_honours_privacy(api_client, register):
    viewer, viewer_headers = await register("Viewer")
    target, target_headers = await register("Target", age=28, location="Lisbon")

    resp = await api_client.get(f"/api/users/{target['id']}", headers=viewer_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert "email" not in body
    assert body["age"] == 28
    assert body["location"] == "Lisbon"
    assert "privacy_settings" not in body

    await api_client.put(
        "/api/users/profile",
        headers=target_headers,
        json={"privacy_settings": {"show_email": True, "show_age": False, "show_location": False}},
    )
    body = (await api_client.get(f"/api/users/{target['id']}", headers=viewer_headers)).json()
    assert body["email"] == target["email"]
    assert "age" not in body
    assert "location" not in body

    missing = await api_client.get("/api/users/does-not-exist", headers=viewer_headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "user_not_found"


@pytest.mark.asyncio
async def test_search_filters_and_never_lists_emails(api_client, register):
    _, headers = await register("Me", interests=["Chess"])
    ada, ada_headers = await register("Ada", interests=["Chess", "Math"], user_type="professional")
    bob, _ = await register("Bob", interests=["Hiking"])
    await api_client.put("/api/users/profile", headers=ada_headers, json={"privacy_settings": {"show_email": True}})

    resp = await api_client.get("/api/users/search", headers=headers)
    assert resp.status_code == 200
    listed = resp.json()
    assert [u["id"] for u in listed] == [ada["id"], bob["id"]]
    assert all("email" not in u for u in listed)

    resp = await api_client.get("/api/users/search", params={"query": "chess"}, headers=headers)
    assert [u["id"] for u in resp.json()] == [ada["id"]]

    resp = await api_client.get("/api/users/search", params={"query": "hiking MATH"}, headers=headers)
    assert [u["id"] for u in resp.json()] == [ada["id"], bob["id"]]

    resp = await api_client.get("/api/users/search", params={"query": "sailing knitting"}, headers=headers)
    assert resp.json() == []

    resp = await api_client.get("/api/users/search", params={"user_type": "professional"}, headers=headers)
    assert [u["id"] for u in resp.json()] == [ada["id"]]

    resp = await api_client.get("/api/users/search", params={"interests": "Hiking,Sailing"}, headers=headers)
    assert [u["id"] for u in resp.json()] == [bob["id"]]

    resp = await api_client.get("/api/users/search", params={"user_type": "wizard"}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_matches_are_ranked_with_common_terms(api_client, register):
    _, headers = await register("Me", interests=["Chess", "Music"], skills=["Python"])
    best, _ = await register("Best", interests=["chess", "music"], skills=["python"])
    okay, _ = await register("Okay", interests=["Music"], user_type="hobbyist")
    await register("None", interests=["Knitting"], user_type="hobbyist")

    resp = await api_client.get("/api/users/matches", headers=headers)
    assert resp.status_code == 200
    results = resp.json()
    assert [r["user"]["id"] for r in results] == [best["id"], okay["id"]]
    assert results[0]["match_score"] == 20 + 10 + 15
    assert results[0]["common_interests"] == ["Chess", "Music"]
    assert results[0]["common_skills"] == ["Python"]
    assert results[1]["match_score"] == 10
    assert "email" not in results[0]["user"]


@pytest.mark.asyncio
async def test_blocking_hides_users_both_ways(api_client, register):
    me, headers = await register("Me", interests=["Chess"])
    other, other_headers = await register("Other", interests=["Chess"])

    resp = await api_client.post(f"/api/users/block/{other['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "User blocked successfully"}

    assert (await api_client.get("/api/users/search", headers=headers)).json() == []
    assert (await api_client.get("/api/users/matches", headers=headers)).json() == []
    assert (await api_client.get("/api/users/search", headers=other_headers)).json() == []
    assert (await api_client.get("/api/users/matches", headers=other_headers)).json() == []

    resp = await api_client.post("/api/users/block/unknown-user", headers=headers)
    assert resp.status_code == 404
