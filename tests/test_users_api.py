from __future__ import annotations


def _create_user(client, **overrides):
    payload = {"id": "user-1", "email": "alice@example.com", "firstName": "Alice", "lastName": "Martin", **overrides}
    return client.post("/api/users", json=payload)


class TestUsers:
    def test_create_user_applies_defaults(self, client):
        r = _create_user(client)
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["user"]["id"] == "user-1"
        assert body["user"]["role"] == "mother"
        assert body["user"]["timezone"] == "Europe/Paris"
        assert body["user"]["language"] == "fr"

    def test_upsert_updates_fields_but_keeps_email(self, client):
        _create_user(client)
        r = _create_user(client, email="changed@example.com", firstName="Alicia")
        assert r.status_code == 200
        user = r.json()["user"]
        assert user["firstName"] == "Alicia"
        assert user["email"] == "alice@example.com"

    def test_missing_fields_are_rejected(self, client):
        r = client.post("/api/users", json={"id": "user-1"})
        assert r.status_code == 400
        error = r.json()["error"]
        assert error.startswith("Missing required fields")
        assert "firstName" in error

    def test_duplicate_email(self, client):
        _create_user(client)
        r = _create_user(client, id="user-2")
        assert r.status_code == 400
        assert r.json() == {"error": "Email already in use"}

    def test_list_users_with_babies(self, client, baby):
        r = client.get("/api/users")
        assert r.status_code == 200
        users = r.json()["users"]
        assert len(users) == 1
        assert [b["id"] for b in users[0]["babies"]] == ["baby-1"]
        assert users[0]["settings"] is None


class TestLookup:
    def test_existing_user(self, client, user):
        r = client.post("/api/user/lookup", json={"email": "alice@example.com"})
        body = r.json()
        assert body["isExistingUser"] is True
        assert body["user"]["id"] == "user-1"

    def test_email_moved_to_legacy_account(self, client, user):
        r = client.post("/api/user/lookup", json={"email": "new@example.com", "oldUserData": {"id": "user-1"}})
        body = r.json()
        assert body["isEmailUpdated"] is True
        assert body["user"]["email"] == "new@example.com"

        again = client.post("/api/user/lookup", json={"email": "new@example.com"}).json()
        assert again["isExistingUser"] is True

    def test_new_user(self, client):
        body = client.post("/api/user/lookup", json={"email": "nobody@example.com"}).json()
        assert body == {"success": True, "user": None, "isNewUser": True}

    def test_email_required(self, client):
        r = client.post("/api/user/lookup", json={})
        assert r.status_code == 400


class TestProfile:
    def test_email_required(self, client):
        r = client.get("/api/user/profile")
        assert r.status_code == 400
        assert "Email" in r.json()["error"]

    def test_unknown_user(self, client):
        r = client.get("/api/user/profile", params={"email": "nobody@example.com"})
        assert r.status_code == 404
        assert r.json() == {"error": "User not found"}

    def test_profile_includes_recent_entries(self, client, baby):
        client.post(
            "/api/babies/baby-1/entries",
            json={"type": "biberon", "amount": 90, "startTime": "2026-03-01T08:00:00Z", "userId": "user-1"},
        )
        r = client.get("/api/user/profile", params={"email": "alice@example.com"})
        assert r.status_code == 200
        profile = r.json()
        assert profile["babies"][0]["name"] == "Léa"
        assert len(profile["babies"][0]["feedingEntries"]) == 1
        assert profile["babies"][0]["sleepEntries"] == []

    def test_update_profile(self, client, user):
        r = client.put("/api/user/profile", json={"id": "user-1", "firstName": "Alicia", "phone": "0601020304"})
        assert r.status_code == 200
        assert r.json()["profile"]["firstName"] == "Alicia"
        assert r.json()["profile"]["phone"] == "0601020304"

    def test_update_email_requires_id(self, client, user):
        r = client.put("/api/user/profile", json={"email": "alice@example.com"})
        assert r.status_code == 400
        assert r.json()["error"] == "User ID is required when updating email"

    def test_update_rejects_unknown_fields(self, client, user):
        r = client.put("/api/user/profile", json={"id": "user-1", "shoeSize": 38})
        assert r.status_code == 400

    def test_update_unknown_user(self, client):
        r = client.put("/api/user/profile", json={"id": "ghost", "firstName": "X"})
        assert r.status_code == 404


class TestSettings:
    def test_defaults_when_nothing_stored(self, client, user):
        r = client.get("/api/user/settings", params={"userId": "user-1"})
        assert r.status_code == 200
        assert r.json()["theme"] == "light"
        assert r.json()["volumeUnit"] == "ml"

    def test_user_id_required(self, client):
        assert client.get("/api/user/settings").status_code == 400
        assert client.put("/api/user/settings", json={"theme": "dark"}).status_code == 400

    def test_sections_are_merged(self, client, user):
        r = client.put(
            "/api/user/settings",
            json={"userId": "user-1", "theme": "dark", "notifications": {"feedingReminders": False}},
        )
        assert r.status_code == 200
        saved = r.json()["settings"]
        assert saved["theme"] == "dark"
        assert saved["notifications"] == {"feedingReminders": False}
        # untouched sections get their defaults
        assert saved["privacy"]["dataSharing"] is False
        assert saved["backup"]["backupFrequency"] == "weekly"

        r = client.put("/api/user/settings", json={"userId": "user-1", "notifications": {"sleepReminders": False}})
        notifications = r.json()["settings"]["notifications"]
        assert notifications == {"feedingReminders": False, "sleepReminders": False}

        stored = client.get("/api/user/settings", params={"userId": "user-1"}).json()
        assert stored["theme"] == "dark"

    def test_unknown_setting(self, client, user):
        r = client.put("/api/user/settings", json={"userId": "user-1", "wallpaper": "cats"})
        assert r.status_code == 400


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
