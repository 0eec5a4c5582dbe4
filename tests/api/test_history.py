from conftest import auth_headers, signup


def test_history_lists_own_entries_newest_first(client):
    token = signup(client, "me@example.com")
    other = signup(client, "you@example.com")
    client.get("/api/files", headers=auth_headers(other))

    response = client.get("/api/history", headers=auth_headers(token))

    assert response.status_code == 200
    actions = [entry["action"] for entry in response.json()["history"]]
    # The history request itself is logged before the listing is read.
    assert actions == [
        "GET /api/history",
        "User logged in: me@example.com",
        "User Registered: me@example.com",
    ]


def test_history_requires_authentication(client):
    assert client.get("/api/history").status_code == 401
