import json

from linguala.config import settings
from linguala.premium import PREMIUM_LIMITS, LimitType


async def test_register(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "Ana@Example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["name"] == "ana"

    response = await client.post(
        "/api/auth/register",
        json={"email": "ana@example.com", "password": "another1"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "User already exists"}


async def test_register_validation(client):
    cases = [
        ({"email": "ana@example.com"}, "Email and password are required"),
        ({"email": "not-an-email", "password": "secret123"}, "Invalid email format"),
        ({"email": "ana@example.com", "password": "123"}, "Password must be at least 6 characters long"),
    ]
    for payload, error in cases:
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": error}


async def test_login_failure(client, login):
    await login()
    response = await client.post(
        "/api/auth/token",
        data={"username": "ana@example.com", "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_profile(client, auth_headers):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}

    profile = (await client.get("/api/auth/me", headers=auth_headers)).json()
    assert profile["email"] == "ana@example.com"
    assert profile["isPremium"] is False
    assert profile["daysRemaining"] == 0
    assert profile["limits"]["GLOSSARY_ENTRIES"] == 100


async def test_premium_admin(client, auth_headers, monkeypatch):
    user_id = (await client.get("/api/auth/me", headers=auth_headers)).json()["id"]

    response = await client.post("/api/admin/premium/grant", json={"userId": user_id})
    assert response.status_code == 403

    monkeypatch.setattr(settings.auth, "admin_token", "admin-secret")
    admin = {"X-Admin-Token": "admin-secret"}

    response = await client.post("/api/admin/premium/grant", json={"userId": user_id}, headers={"X-Admin-Token": "nope"})
    assert response.status_code == 403

    response = await client.post(
        "/api/admin/premium/grant",
        json={"userId": user_id, "durationDays": 30},
        headers=admin,
    )
    assert response.json() == {"success": True, "isPremium": True, "daysRemaining": 30}

    profile = (await client.get("/api/auth/me", headers=auth_headers)).json()
    assert profile["isPremium"] is True
    assert profile["limits"]["GLOSSARY_ENTRIES"] is None

    response = await client.post("/api/admin/premium/revoke", json={"userId": user_id}, headers=admin)
    assert response.json() == {"success": True, "isPremium": False, "daysRemaining": 0}

    response = await client.post("/api/admin/premium/grant", json={"userId": "missing"}, headers=admin)
    assert response.status_code == 404


async def test_library_requires_auth(client):
    for path in ("/api/translations", "/api/glossary", "/api/settings"):
        assert (await client.get(path)).status_code == 401


async def test_saved_translations(client, auth_headers):
    response = await client.post("/api/translations", json={"sourceText": "Hi"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}

    response = await client.post(
        "/api/translations",
        json={"sourceText": "Hi", "translatedText": "Hola", "sourceLang": "en", "targetLang": "es"},
        headers=auth_headers,
    )
    saved = response.json()["translation"]
    assert saved["domain"] == "general"

    listed = (await client.get("/api/translations", headers=auth_headers)).json()["translations"]
    assert [t["id"] for t in listed] == [saved["id"]]


async def test_translations_are_private(client, login):
    ana = await login()
    ben = await login("ben@example.com")
    await client.post(
        "/api/translations",
        json={"sourceText": "Hi", "translatedText": "Hola", "sourceLang": "en", "targetLang": "es"},
        headers=ana,
    )
    assert (await client.get("/api/translations", headers=ben)).json() == {"translations": []}


async def test_glossary_crud(client, auth_headers):
    response = await client.post("/api/glossary", json={"source": "invoice"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Source and target terms are required"}

    entry = {"source": "invoice", "target": "Rechnung", "domain": "finance", "notes": "billing"}
    created = (await client.post("/api/glossary", json=entry, headers=auth_headers)).json()["glossaryEntry"]
    assert created["domain"] == "finance"

    response = await client.post("/api/glossary", json=entry, headers=auth_headers)
    assert response.status_code == 409
    assert response.json() == {"error": "This glossary entry already exists"}

    listed = (await client.get("/api/glossary", headers=auth_headers)).json()["glossaryEntries"]
    assert [e["source"] for e in listed] == ["invoice"]

    assert (await client.delete("/api/glossary", headers=auth_headers)).json() == {"error": "Entry ID is required"}
    response = await client.delete("/api/glossary", params={"id": "missing"}, headers=auth_headers)
    assert response.status_code == 404

    response = await client.delete("/api/glossary", params={"id": created["id"]}, headers=auth_headers)
    assert response.json() == {"success": True}
    assert (await client.get("/api/glossary", headers=auth_headers)).json() == {"glossaryEntries": []}


async def test_glossary_limit_for_free_tier(client, auth_headers, monkeypatch):
    monkeypatch.setitem(PREMIUM_LIMITS["FREE"], LimitType.GLOSSARY_ENTRIES, 1)
    await client.post("/api/glossary", json={"source": "a", "target": "b"}, headers=auth_headers)

    response = await client.post("/api/glossary", json={"source": "c", "target": "d"}, headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["error"].startswith("Glossary limit of 1 entries reached")


async def test_settings_lifecycle(client, auth_headers):
    defaults = (await client.get("/api/settings", headers=auth_headers)).json()["settings"]
    assert defaults["fontSize"] == "medium"
    assert defaults["saveTranslationHistory"] is True

    response = await client.patch(
        "/api/settings",
        json={"fontSize": "large", "default_target_lang": "de"},
        headers=auth_headers,
    )
    updated = response.json()["settings"]
    assert updated["fontSize"] == "large"
    assert updated["defaultTargetLang"] == "de"

    response = await client.patch("/api/settings", json={"fontSize": "huge"}, headers=auth_headers)
    assert response.status_code == 400

    export = await client.get("/api/settings/export", headers=auth_headers)
    assert "linguala-settings.json" in export.headers["content-disposition"]
    assert json.loads(export.text)["fontSize"] == "large"

    reset = (await client.delete("/api/settings", headers=auth_headers)).json()["settings"]
    assert reset == defaults


async def test_settings_import(client, auth_headers):
    response = await client.post(
        "/api/settings/import",
        json={"data": json.dumps({"compactMode": True, "unknownKey": 1})},
        headers=auth_headers,
    )
    body = response.json()
    assert body["success"] is True
    assert body["settings"]["compactMode"] is True
    assert "unknownKey" not in body["settings"]

    response = await client.post("/api/settings/import", json={"data": "{not json"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid settings data"}


async def test_clear_account_data(client, auth_headers):
    await client.post("/api/glossary", json={"source": "a", "target": "b"}, headers=auth_headers)
    await client.patch("/api/settings", json={"compactMode": True}, headers=auth_headers)
    await client.post(
        "/api/translations",
        json={"sourceText": "Hi", "translatedText": "Hola", "sourceLang": "en", "targetLang": "es"},
        headers=auth_headers,
    )

    response = await client.delete("/api/account/data", headers=auth_headers)
    assert response.json() == {
        "success": True,
        "removed": {"translations": 1, "glossaryEntries": 1, "settings": 1},
    }
