"""
HTTP-level tests: routing, status codes and the {"error": ...} payload.

Run with: pytest tests/test_api.py -v
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest


def llm_json(*items):
    return json.dumps(list(items))


def session_cookie(response) -> str:
    """Token from the Set-Cookie header of a successful code validation."""
    header = response.headers["set-cookie"]
    return header.split(";")[0].split("=", 1)[1]


# ============================================
# Health / themes
# ============================================

class TestBasics:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_themes_in_board_order(self, client):
        from app.models.theme import DEFAULT_THEMES

        response = await client.get("/api/themes")

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == DEFAULT_THEMES


# ============================================
# Analyze
# ============================================

class TestAnalyzeEndpoint:

    @pytest.mark.asyncio
    async def test_extracts_and_stores(self, client, mock_ai):
        mock_ai.complete.return_value = llm_json(
            {"content": "The upload UI is confusing", "suggested_theme": "Mod upload", "suggested_tags": ["ui"]},
            {"content": "Uploads are way too slow", "suggested_theme": "Mod upload", "suggested_tags": ["speed"]},
        )

        response = await client.post(
            "/api/analyze",
            json={"text": "The upload UI is confusing. Uploads are way too slow.", "sourceType": "reddit"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert len(body["insightIds"]) == 2

        listing = (await client.get("/api/insights")).json()
        assert listing["total"] == 2
        for item in listing["items"]:
            assert item["theme_name"] == "Uncategorised"
            assert item["suggested_theme_name"] == "Mod upload"
            assert item["source_type"] == "reddit"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   "}])
    async def test_missing_text_is_400(self, client, mock_ai, payload):
        response = await client.post("/api/analyze", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": 'Request body must include "text" (string)'}
        mock_ai.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_string_text_is_400(self, client):
        response = await client.post("/api/analyze", json={"text": 42})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    @pytest.mark.asyncio
    async def test_malformed_llm_output_is_500_with_raw(self, client, mock_ai):
        mock_ai.complete.return_value = "not json"

        response = await client.post("/api/analyze", json={"text": "Uploads fail"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to parse LLM response as JSON"
        assert body["raw"] == "not json"
        assert (await client.get("/api/insights")).json()["total"] == 0

    @pytest.mark.asyncio
    async def test_missing_llm_key_is_500(self, client, monkeypatch):
        from main import app
        from app.api.routes.analyze import get_extraction_service
        from app.core.config import get_settings

        app.dependency_overrides.pop(get_extraction_service)
        monkeypatch.setattr(get_settings(), "llm_provider", "anthropic")
        monkeypatch.setattr(get_settings(), "anthropic_api_key", "")

        response = await client.post("/api/analyze", json={"text": "Uploads fail"})

        assert response.status_code == 500
        assert response.json() == {"error": "ANTHROPIC_API_KEY is not set"}


# ============================================
# Ask
# ============================================

class TestAskEndpoint:

    @pytest.mark.asyncio
    async def test_answer_with_sources(self, client, db, make_insight, mock_ai):
        matching = await make_insight("Install keeps failing")
        await make_insight("Dark mode please")
        await db.commit()
        mock_ai.complete.return_value = "Installs fail."

        response = await client.post("/api/ask", json={"question": "why does install fail"})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Installs fail."
        assert [s["id"] for s in body["sources"]] == [matching.id]

    @pytest.mark.asyncio
    async def test_missing_question_is_400(self, client):
        response = await client.post("/api/ask", json={})

        assert response.status_code == 400
        assert response.json() == {"error": 'Request body must include "question" (string)'}


# ============================================
# Insights board
# ============================================

class TestInsightsEndpoints:

    @pytest.mark.asyncio
    async def test_move_returns_authoritative_state(self, client, db, themes, make_insight):
        insight = await make_insight("Premium is confusing", suggested_theme="Nexus premium")
        await db.commit()

        response = await client.patch(
            f"/api/insights/{insight.id}", json={"theme_id": themes["Nexus premium"].id}
        )

        assert response.status_code == 200
        assert response.json() == {
            "id": insight.id,
            "theme_id": themes["Nexus premium"].id,
            "suggested_theme_id": None,
        }

    @pytest.mark.asyncio
    async def test_move_errors(self, client, db, themes, make_insight):
        insight = await make_insight("Premium is confusing")
        await db.commit()

        missing = await client.patch(f"/api/insights/{insight.id}", json={})
        unknown_theme = await client.patch(f"/api/insights/{insight.id}", json={"theme_id": "nope"})
        unknown_insight = await client.patch(
            "/api/insights/nope", json={"theme_id": themes["Community"].id}
        )

        assert (missing.status_code, missing.json()) == (400, {"error": "theme_id required"})
        assert (unknown_theme.status_code, unknown_theme.json()) == (400, {"error": "Unknown theme_id"})
        assert (unknown_insight.status_code, unknown_insight.json()) == (404, {"error": "Insight not found"})

    @pytest.mark.asyncio
    async def test_tag_attach_detach_and_filter(self, client, db, make_insight):
        insight = await make_insight("Crash on launch")
        other = await make_insight("Slow search")
        await db.commit()
        tag = (await client.post("/api/tags", json={"name": "Crash"})).json()

        first = await client.put(f"/api/insights/{insight.id}/tags/{tag['id']}")
        second = await client.put(f"/api/insights/{insight.id}/tags/{tag['id']}")
        assert first.status_code == second.status_code == 200
        assert [t["name"] for t in second.json()["tags"]] == ["crash"]

        filtered = (await client.get("/api/insights", params={"tag_id": tag["id"]})).json()
        assert [i["id"] for i in filtered["items"]] == [insight.id]
        assert other.id not in [i["id"] for i in filtered["items"]]

        removed = await client.delete(f"/api/insights/{insight.id}/tags/{tag['id']}")
        assert removed.status_code == 204
        assert (await client.get(f"/api/insights/{insight.id}")).json()["tags"] == []

    @pytest.mark.asyncio
    async def test_delete_insight(self, client, db, make_insight):
        insight = await make_insight("Crash on launch")
        await db.commit()

        assert (await client.delete(f"/api/insights/{insight.id}")).status_code == 204
        assert (await client.get(f"/api/insights/{insight.id}")).status_code == 404
        assert (await client.delete(f"/api/insights/{insight.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_tag_suggestion(self, client, db, make_insight):
        insight = await make_insight("Upload button hidden on mobile")
        await db.commit()

        response = await client.get(f"/api/insights/{insight.id}/tag-suggestion")

        assert response.json() == {"suggestion": "upload button hidden"}

    @pytest.mark.asyncio
    async def test_mod_author(self, client, db, make_insight):
        from main import app
        from app.api.routes.insights import get_nexus_service
        from app.services.nexus_service import ModAuthor

        insight = await make_insight("SkyUI needs an update")
        await db.commit()
        nexus = MagicMock()
        nexus.resolve_mod_author = AsyncMock(return_value=ModAuthor(
            url="https://www.nexusmods.com/profile/schlangster",
            name="schlangster",
            avatar_url="https://avatars.nexusmods.com/1/100",
        ))
        app.dependency_overrides[get_nexus_service] = lambda: nexus

        bad = await client.post(f"/api/insights/{insight.id}/mod-author", json={"profile_url": "https://x.com"})
        assert bad.status_code == 400

        ok = await client.post(
            f"/api/insights/{insight.id}/mod-author",
            json={"profile_url": "https://www.nexusmods.com/profile/schlangster"},
        )
        assert ok.status_code == 200
        assert ok.json()["mod_author_name"] == "schlangster"

        cleared = await client.delete(f"/api/insights/{insight.id}/mod-author")
        assert cleared.json()["mod_author_name"] is None

        nexus.resolve_mod_author.return_value = None
        unresolved = await client.post(
            f"/api/insights/{insight.id}/mod-author",
            json={"profile_url": "https://www.nexusmods.com/profile/ghost"},
        )
        assert unresolved.status_code == 404


# ============================================
# Tags / analytics
# ============================================

class TestTagsEndpoints:

    @pytest.mark.asyncio
    async def test_create_conflict_and_delete(self, client):
        created = await client.post("/api/tags", json={"name": " UI "})
        assert created.status_code == 201
        assert created.json()["name"] == "ui"
        assert created.json()["color_code"] == "#6b7280"

        duplicate = await client.post("/api/tags", json={"name": "ui"})
        assert duplicate.status_code == 409
        assert duplicate.json() == {"error": "A tag with this name already exists."}

        deleted = await client.delete(f"/api/tags/{created.json()['id']}")
        assert deleted.status_code == 204
        assert (await client.get("/api/tags")).json() == []
        assert (await client.delete(f"/api/tags/{created.json()['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_create_validation(self, client):
        blank = await client.post("/api/tags", json={"name": "  "})
        bad_color = await client.post("/api/tags", json={"name": "ui", "color_code": "red"})

        assert (blank.status_code, blank.json()) == (400, {"error": "Enter a tag name."})
        assert bad_color.status_code == 400
        assert bad_color.json()["error"] == "Invalid request body"

    @pytest.mark.asyncio
    async def test_tag_frequency(self, client, db, themes, make_insight):
        insight = await make_insight("Search is slow", theme="Mod Browsing")
        await db.commit()
        tag = (await client.post("/api/tags", json={"name": "search"})).json()
        await client.put(f"/api/insights/{insight.id}/tags/{tag['id']}")

        response = await client.get("/api/analytics/tag-frequency")

        assert response.status_code == 200
        row = response.json()["tags"][0]
        assert row["tag_name"] == "search"
        assert row["count_all"] == 1
        assert row["count_by_theme"][themes["Mod Browsing"].id] == 1
        assert len(row["count_by_theme"]) == len(themes)


# ============================================
# Access-code auth
# ============================================

class TestAuthEndpoints:

    @pytest.fixture
    def auth_on(self, monkeypatch):
        from app.core.config import get_settings

        settings = get_settings()
        monkeypatch.setattr(settings, "require_auth", True)
        monkeypatch.setattr(settings, "session_secret", "s" * 48)
        return settings

    @pytest.mark.asyncio
    async def test_code_exchange_unlocks_api(self, client, db, auth_on):
        from app.services.auth_service import AuthService

        await AuthService.seed_access_codes(db, ["let-me-in"])
        await db.commit()

        locked = await client.get("/api/themes")
        assert (locked.status_code, locked.json()) == (401, {"error": "Not authenticated"})

        wrong = await client.post("/api/auth/validate-code", json={"code": "nope"})
        assert (wrong.status_code, wrong.json()) == (401, {"error": "Invalid access code"})

        blank = await client.post("/api/auth/validate-code", json={"code": " "})
        assert (blank.status_code, blank.json()) == (400, {"error": "Code is required"})

        ok = await client.post("/api/auth/validate-code", json={"code": "let-me-in"})
        assert ok.status_code == 200
        assert ok.json() == {"ok": True}
        assert "httponly" in ok.headers["set-cookie"].lower()
        token = session_cookie(ok)

        client.cookies.clear()
        unlocked = await client.get("/api/themes", headers={"Cookie": f"{auth_on.session_cookie_name}={token}"})
        assert unlocked.status_code == 200

        assert (await client.get("/api/health")).status_code == 200

    @pytest.mark.asyncio
    async def test_guessing_is_rate_limited(self, client, auth_on):
        from app.core.rate_limiter import rate_limiter

        attempts = rate_limiter.configs["access_code_ip"].max_requests
        for _ in range(attempts):
            response = await client.post("/api/auth/validate-code", json={"code": "guess"})
            assert response.status_code == 401

        blocked = await client.post("/api/auth/validate-code", json={"code": "guess"})
        assert blocked.status_code == 429
        assert int(blocked.headers["retry-after"]) >= 1
        assert "error" in blocked.json()

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client):
        response = await client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert "session=" in response.headers["set-cookie"]
