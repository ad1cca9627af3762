"""
Integration tests for the API routes.
Every test runs against a fresh in-memory database (see conftest.py).
"""
import smtplib
import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import create_campaign, login
from meunps.models import Campaign, Contact, NpsResponse
from meunps.routers.webhooks import get_webhook_proxy
from meunps.schemas.blobs import default_automation, default_survey_customization
from meunps.services.affiliate import recalculate_affiliate_stats
from meunps.services.webhook_proxy import WebhookProxy
from meunps.main import app


def submit(client, campaign_id, score, **extra):
    payload = {"campaign_id": campaign_id, "score": score, **extra}
    return client.post("/api/responses/submit", json=payload)


def me(client, headers):
    return client.get("/api/auth/me", headers=headers).json()["user"]


def create_entity(client, headers, kind, **payload):
    payload.setdefault("name", f"{kind} 1")
    response = client.post(f"/api/entities/{kind}", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCoreRoutes:
    """Test core routes defined in main.py"""

    def test_api_info(self, client):
        response = client.get("/api")
        assert response.status_code == 200
        assert response.json() == {"message": "Meu NPS API", "version": "1.0.0"}

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data

    def test_unknown_route(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}

    def test_validation_error_is_400(self, client):
        response = submit(client, "not-a-uuid", 5)
        assert response.status_code == 400
        assert response.json()["error"].startswith("campaign_id")


class TestAuthRoutes:
    def test_register_and_login(self, client):
        response = client.post("/api/auth/register", json={
            "email": "ana@example.com", "password": "secret123", "name": "Ana",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User created successfully"
        assert body["user"]["email"] == "ana@example.com"

        response = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "user"
        assert response.json()["token"]

    def test_register_requires_fields(self, client):
        response = client.post("/api/auth/register", json={"email": "ana@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "Email, password and name are required"

    def test_register_duplicate(self, client, auth_headers):
        response = client.post("/api/auth/register", json={
            "email": "ana@example.com", "password": "x", "name": "Outra",
        })
        assert response.status_code == 400
        assert response.json()["error"] == "User already exists"

    def test_register_creates_profile_and_affiliate(self, client, auth_headers):
        profile = client.get("/api/profile", headers=auth_headers).json()["data"]
        affiliate = client.get("/api/affiliate", headers=auth_headers).json()["data"]

        assert profile["name"] == "Ana"
        assert profile["email"] == "ana@example.com"
        assert len(affiliate["affiliate_code"]) == 8

    @pytest.mark.parametrize("payload,status,error", [
        ({"email": "ana@example.com"}, 400, "Email and password are required"),
        ({"email": "ana@example.com", "password": "wrong"}, 401, "Invalid credentials"),
        ({"email": "nobody@example.com", "password": "secret123"}, 401, "Invalid credentials"),
    ])
    def test_login_errors(self, client, auth_headers, payload, status, error):
        response = client.post("/api/auth/login", json=payload)
        assert response.status_code == status
        assert response.json()["error"] == error

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "Access token required"

    def test_me_with_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 403
        assert response.json()["error"] == "Invalid token"

    def test_me(self, client, auth_headers):
        user = me(client, auth_headers)
        assert user["email"] == "ana@example.com"
        assert user["name"] == "Ana"
        assert "password_hash" not in user

    def test_change_password(self, client, auth_headers):
        response = client.post("/api/auth/change-password", headers=auth_headers, json={
            "currentPassword": "wrong", "newPassword": "novaSenha1",
        })
        assert response.status_code == 401
        assert response.json()["error"] == "Current password is incorrect"

        response = client.post("/api/auth/change-password", headers=auth_headers, json={
            "currentPassword": "secret123", "newPassword": "novaSenha1",
        })
        assert response.status_code == 200
        assert response.json()["message"] == "Password changed successfully"

        login(client, "ana@example.com", "novaSenha1")
        response = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret123"})
        assert response.status_code == 401

    def test_delete_account_requires_matching_email(self, client, auth_headers):
        response = client.request(
            "DELETE", "/api/auth/account", headers=auth_headers,
            json={"confirmationEmail": "other@example.com"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Email confirmation does not match"

    def test_delete_account_cascades(self, client, auth_headers, db_session):
        campaign = create_campaign(client, auth_headers)
        assert submit(client, campaign["id"], 9).status_code == 201
        client.post("/api/contacts", headers=auth_headers, json={
            "name": "Maria", "email": "maria@example.com", "phone": "11999990000",
        })

        response = client.request(
            "DELETE", "/api/auth/account", headers=auth_headers,
            json={"confirmationEmail": "ana@example.com"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Account deleted successfully"

        assert db_session.query(Campaign).count() == 0
        assert db_session.query(NpsResponse).count() == 0
        assert db_session.query(Contact).count() == 0
        response = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret123"})
        assert response.status_code == 401

    def test_delete_account_refreshes_referrer_totals(self, client, auth_headers, other_headers):
        code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]
        client.post("/api/affiliate/referrals", headers=other_headers, json={
            "affiliate_code": code, "commission_amount": 40,
        })

        response = client.request(
            "DELETE", "/api/auth/account", headers=other_headers,
            json={"confirmationEmail": "bruno@example.com"},
        )
        assert response.status_code == 200

        affiliate = client.get("/api/affiliate", headers=auth_headers).json()["data"]
        assert affiliate["total_referrals"] == 0
        assert affiliate["total_earnings"] == 0.0
        assert affiliate["total_pending"] == 0.0
        assert client.get("/api/affiliate/referrals", headers=auth_headers).json()["data"] == []

    def test_register_race_on_same_email(self, client, auth_headers, monkeypatch):
        """A sign-up that loses the insert race gets the duplicate error, not a 500."""
        from meunps.routers import auth as auth_routes

        real_email_taken = auth_routes.email_taken
        calls = []

        def stale_first_check(db, email):
            calls.append(email)
            if len(calls) == 1:
                return False
            return real_email_taken(db, email)

        monkeypatch.setattr(auth_routes, "email_taken", stale_first_check)

        response = client.post("/api/auth/register", json={
            "email": "ana@example.com", "password": "x", "name": "Outra",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "User already exists"
        assert len(calls) == 2
        monkeypatch.undo()
        login(client, "ana@example.com")


class TestCampaignRoutes:
    def test_requires_auth(self, client):
        assert client.get("/api/campaigns").status_code == 401

    def test_create_requires_name_and_start_date(self, client, auth_headers):
        response = client.post("/api/campaigns", headers=auth_headers, json={"name": "Sem data"})
        assert response.status_code == 400
        assert response.json()["error"] == "Name and start date are required"

    def test_create_applies_blob_defaults(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)

        assert campaign["active"] is True
        assert campaign["survey_customization"] == default_survey_customization()
        assert campaign["automation"] == default_automation()

    def test_blobs_round_trip_with_unknown_keys(self, client, auth_headers):
        customization = {"primaryColor": "#111111", "fontFamily": "Inter"}
        automation = {
            "enabled": True,
            "action": "webhook_redirect",
            "webhookUrl": "https://hooks.example.com/nps",
            "redirectUrl": "https://example.com/obrigado",
        }
        campaign = create_campaign(
            client, auth_headers,
            survey_customization=customization, automation=automation,
        )

        fetched = client.get(f"/api/campaigns/{campaign['id']}", headers=auth_headers).json()["data"]
        assert fetched["survey_customization"] == customization
        assert fetched["automation"] == automation

    def test_invalid_automation_action(self, client, auth_headers):
        response = client.post("/api/campaigns", headers=auth_headers, json={
            "name": "X", "start_date": "2020-01-01T00:00:00Z", "automation": {"action": "explode"},
        })
        assert response.status_code == 400

    def test_list_only_own_campaigns(self, client, auth_headers, other_headers):
        create_campaign(client, auth_headers, name="Primeira")
        create_campaign(client, auth_headers, name="Segunda")
        create_campaign(client, other_headers, name="Alheia")

        data = client.get("/api/campaigns", headers=auth_headers).json()["data"]
        assert sorted(c["name"] for c in data) == ["Primeira", "Segunda"]

    def test_other_tenant_sees_404(self, client, auth_headers, other_headers):
        campaign = create_campaign(client, auth_headers)
        url = f"/api/campaigns/{campaign['id']}"

        for response in (
            client.get(url, headers=other_headers),
            client.put(url, headers=other_headers, json={"name": "Roubada"}),
            client.delete(url, headers=other_headers),
        ):
            assert response.status_code == 404
            assert response.json()["error"] == "Campaign not found"

        assert client.get(url, headers=auth_headers).json()["data"]["name"] == campaign["name"]

    def test_partial_update(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers, description="Original", automation={
            "enabled": True, "action": "redirect_only", "redirectUrl": "https://example.com",
        })
        url = f"/api/campaigns/{campaign['id']}"

        data = client.put(url, headers=auth_headers, json={"active": False}).json()["data"]
        assert data["active"] is False
        assert data["description"] == "Original"
        assert data["automation"]["action"] == "redirect_only"

        data = client.put(url, headers=auth_headers, json={"automation": None}).json()["data"]
        assert data["automation"] == default_automation()

        response = client.put(url, headers=auth_headers, json={"name": ""})
        assert response.status_code == 400
        assert response.json()["error"] == "Name is required"

    def test_default_source_must_be_owned(self, client, auth_headers, other_headers):
        foreign = create_entity(client, other_headers, "sources")

        response = client.post("/api/campaigns", headers=auth_headers, json={
            "name": "X", "start_date": "2020-01-01T00:00:00Z", "default_source_id": foreign["id"],
        })
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid default source"

    def test_delete(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)
        assert submit(client, campaign["id"], 10).status_code == 201

        response = client.delete(f"/api/campaigns/{campaign['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Campaign deleted successfully"}
        assert client.get(f"/api/campaigns/{campaign['id']}", headers=auth_headers).status_code == 404

    def test_stats(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)
        for score in (10, 9, 3, 7):
            assert submit(client, campaign["id"], score).status_code == 201

        response = client.get(f"/api/campaigns/{campaign['id']}/stats", headers=auth_headers)
        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["nps"] == 25
        assert stats["categories"] == {"promoters": 2, "passives": 1, "detractors": 1, "total": 4}
        assert stats["by_score"]["10"] == 1
        assert stats["by_score"]["0"] == 0
        assert len(stats["over_time"]) == 8
        assert stats["over_time"][0]["nps"] == 25


class TestEntityRoutes:
    @pytest.mark.parametrize("kind,label", [
        ("sources", "Source"),
        ("situations", "Situation"),
        ("groups", "Group"),
    ])
    def test_crud(self, client, auth_headers, kind, label):
        entity = create_entity(client, auth_headers, kind, name="Loja Física", description="Balcão")

        listed = client.get(f"/api/entities/{kind}", headers=auth_headers).json()["data"]
        assert [e["id"] for e in listed] == [entity["id"]]

        url = f"/api/entities/{kind}/{entity['id']}"
        updated = client.put(url, headers=auth_headers, json={"name": "Online"}).json()["data"]
        assert updated["name"] == "Online"
        assert updated["description"] == "Balcão"

        response = client.delete(url, headers=auth_headers)
        assert response.json()["message"] == f"{label} deleted successfully"
        assert client.get(f"/api/entities/{kind}", headers=auth_headers).json()["data"] == []

    def test_colors(self, client, auth_headers):
        assert create_entity(client, auth_headers, "sources", color=None)["color"] == "#3B82F6"
        assert create_entity(client, auth_headers, "situations")["color"] == "#10B981"
        assert create_entity(client, auth_headers, "sources", color="#000000")["color"] == "#000000"
        assert create_entity(client, auth_headers, "groups", color="#000000")["color"] is None

    def test_name_is_required(self, client, auth_headers):
        response = client.post("/api/entities/sources", headers=auth_headers, json={"name": ""})
        assert response.status_code == 400
        assert response.json()["error"] == "Name is required"

    def test_other_tenant_cannot_modify(self, client, auth_headers, other_headers):
        source = create_entity(client, auth_headers, "sources")
        url = f"/api/entities/sources/{source['id']}"

        response = client.put(url, headers=other_headers, json={"name": "Hack"})
        assert response.status_code == 404
        assert response.json()["error"] == "Source not found"
        assert client.delete(url, headers=other_headers).status_code == 404
        assert client.get("/api/entities/sources", headers=other_headers).json()["data"] == []

    def test_deleting_source_clears_campaign_default(self, client, auth_headers):
        source = create_entity(client, auth_headers, "sources")
        campaign = create_campaign(client, auth_headers, default_source_id=source["id"])
        assert campaign["default_source_id"] == source["id"]

        client.delete(f"/api/entities/sources/{source['id']}", headers=auth_headers)

        fetched = client.get(f"/api/campaigns/{campaign['id']}", headers=auth_headers).json()["data"]
        assert fetched["default_source_id"] is None


class TestContactRoutes:
    def _create(self, client, headers, **payload):
        body = {"name": "Maria Silva", "email": "maria@example.com", "phone": "11999990000"}
        body.update(payload)
        response = client.post("/api/contacts", headers=headers, json=body)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    def test_create_requires_fields(self, client, auth_headers):
        response = client.post("/api/contacts", headers=auth_headers, json={"name": "Maria"})
        assert response.status_code == 400
        assert response.json()["error"] == "Name, email and phone are required"

    def test_crud(self, client, auth_headers):
        contact = self._create(client, auth_headers, tags=["vip"], group_ids=["g1"])
        assert contact["tags"] == ["vip"]
        url = f"/api/contacts/{contact['id']}"

        updated = client.put(url, headers=auth_headers, json={"company": "ACME", "tags": None}).json()["data"]
        assert updated["company"] == "ACME"
        assert updated["tags"] == []
        assert updated["group_ids"] == ["g1"]

        response = client.put(url, headers=auth_headers, json={"email": ""})
        assert response.status_code == 400

        assert client.delete(url, headers=auth_headers).json()["message"] == "Contact deleted successfully"
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_list_sorted_by_name(self, client, auth_headers, other_headers):
        self._create(client, auth_headers, name="Zeca")
        self._create(client, auth_headers, name="Alice")
        self._create(client, other_headers, name="Bia")

        data = client.get("/api/contacts", headers=auth_headers).json()["data"]
        assert [c["name"] for c in data] == ["Alice", "Zeca"]

    def test_search(self, client, auth_headers, other_headers):
        self._create(client, auth_headers, name="Maria", company="ACME Ltda")
        self._create(client, auth_headers, name="João", email="joao@example.com", phone="2133334444")
        self._create(client, other_headers, name="Outra", company="acme")

        data = client.get("/api/contacts/search", params={"q": "acme"}, headers=auth_headers).json()["data"]
        assert [c["name"] for c in data] == ["Maria"]

        data = client.get("/api/contacts/search", params={"q": "3333"}, headers=auth_headers).json()["data"]
        assert [c["name"] for c in data] == ["João"]

    def test_search_requires_query(self, client, auth_headers):
        response = client.get("/api/contacts/search", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Search query is required"


class TestFormRoutes:
    def test_default_form(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)

        response = client.get(f"/api/forms/campaign/{campaign['id']}")
        assert response.status_code == 200
        form = response.json()["data"]
        assert form["id"] == "default-form"
        assert [f["type"] for f in form["fields"]] == ["nps", "text"]

    def test_save_and_replace(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)
        url = f"/api/forms/campaign/{campaign['id']}"
        fields = [
            {"id": "nps", "type": "nps", "label": "Nota", "required": True, "order": 0},
            {"id": "canal", "type": "select", "label": "Canal", "options": ["Loja", "Site"]},
        ]

        saved = client.post(url, headers=auth_headers, json={"fields": fields}).json()["data"]
        assert saved["fields"] == fields

        response = client.post(url, headers=auth_headers, json={"fields": fields[:1]})
        assert response.json()["data"]["id"] == saved["id"]

        public = client.get(url).json()["data"]
        assert public["id"] == saved["id"]
        assert public["fields"] == fields[:1]

    def test_save_requires_fields(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)
        response = client.post(f"/api/forms/campaign/{campaign['id']}", headers=auth_headers, json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Fields array is required"

    def test_save_on_other_tenant_campaign(self, client, auth_headers, other_headers):
        campaign = create_campaign(client, auth_headers)
        response = client.post(
            f"/api/forms/campaign/{campaign['id']}", headers=other_headers,
            json={"fields": []},
        )
        assert response.status_code == 404

    def test_inactive_and_unknown(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers, active=False)

        response = client.get(f"/api/forms/campaign/{campaign['id']}")
        assert response.status_code == 400
        assert response.json()["error"] == "Campaign is not active"

        response = client.get(f"/api/forms/campaign/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "Campaign not found"


class TestResponseRoutes:
    def test_submit_returns_receipt_only(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)

        response = submit(client, campaign["id"], 9, feedback="Ótimo", form_responses={"canal": "Loja"})
        assert response.status_code == 201
        assert set(response.json()["data"]) == {"id", "created_at"}

        stored = client.get(f"/api/responses/campaign/{campaign['id']}", headers=auth_headers).json()["data"]
        assert len(stored) == 1
        assert stored[0]["feedback"] == "Ótimo"
        assert stored[0]["form_responses"] == {"canal": "Loja"}

    @pytest.mark.parametrize("score", [-1, 11])
    def test_score_out_of_range(self, client, auth_headers, score):
        campaign = create_campaign(client, auth_headers)

        response = submit(client, campaign["id"], score)
        assert response.status_code == 400
        assert response.json()["error"] == "Score must be between 0 and 10"
        assert client.get("/api/responses", headers=auth_headers).json()["data"] == []

    def test_missing_fields(self, client):
        response = client.post("/api/responses/submit", json={"score": 5})
        assert response.status_code == 400
        assert response.json()["error"] == "Campaign ID and score are required"

    def test_unknown_campaign(self, client):
        response = submit(client, str(uuid.uuid4()), 5)
        assert response.status_code == 404
        assert response.json()["error"] == "Campaign not found"

    @pytest.mark.parametrize("overrides,error", [
        ({"active": False}, "Campaign is not active"),
        ({"start_date": "2999-01-01T00:00:00Z"}, "Campaign is not currently accepting responses"),
        ({"end_date": "2020-06-01T00:00:00Z"}, "Campaign is not currently accepting responses"),
    ])
    def test_closed_campaign_rejects(self, client, auth_headers, overrides, error):
        campaign = create_campaign(client, auth_headers, **overrides)

        response = submit(client, campaign["id"], 8)
        assert response.status_code == 400
        assert response.json()["error"] == error
        assert client.get("/api/responses", headers=auth_headers).json()["data"] == []

    def test_foreign_classification_is_rejected(self, client, auth_headers, other_headers):
        campaign = create_campaign(client, auth_headers)
        foreign = create_entity(client, other_headers, "situations")

        response = submit(client, campaign["id"], 8, situation_id=foreign["id"])
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid situation"

    def test_campaign_defaults_apply(self, client, auth_headers):
        source = create_entity(client, auth_headers, "sources")
        group = create_entity(client, auth_headers, "groups")
        other_source = create_entity(client, auth_headers, "sources", name="Outra")
        campaign = create_campaign(
            client, auth_headers,
            default_source_id=source["id"], default_group_id=group["id"],
        )

        submit(client, campaign["id"], 10)
        submit(client, campaign["id"], 6, source_id=other_source["id"])

        stored = client.get(f"/api/responses/campaign/{campaign['id']}", headers=auth_headers).json()["data"]
        by_score = {r["score"]: r for r in stored}
        assert by_score[10]["source_id"] == source["id"]
        assert by_score[10]["group_id"] == group["id"]
        assert by_score[6]["source_id"] == other_source["id"]
        assert by_score[6]["situation_id"] is None

    def test_listing_is_scoped_to_owner(self, client, auth_headers, other_headers):
        mine = create_campaign(client, auth_headers)
        theirs = create_campaign(client, other_headers)
        submit(client, mine["id"], 9)
        submit(client, theirs["id"], 2)

        data = client.get("/api/responses", headers=auth_headers).json()["data"]
        assert [r["score"] for r in data] == [9]

        response = client.get(f"/api/responses/campaign/{theirs['id']}", headers=auth_headers)
        assert response.status_code == 404


class TestProfileAndConfigRoutes:
    def test_profile_update_mirrors_user(self, client, auth_headers):
        response = client.put("/api/profile", headers=auth_headers, json={
            "name": "",
            "phone": "11988887777",
            "company": "ACME",
            "preferences": {"theme": "dark", "language": "en-US"},
        })
        assert response.status_code == 200
        profile = response.json()["data"]
        assert profile["name"] == "Ana"
        assert profile["phone"] == "11988887777"
        assert profile["preferences"] == {"theme": "dark", "language": "en-US"}

        user = me(client, auth_headers)
        assert user["phone"] == "11988887777"
        assert user["company"] == "ACME"
        assert user["name"] == "Ana"

    def test_profile_preferences_reset(self, client, auth_headers):
        data = client.put("/api/profile", headers=auth_headers, json={"preferences": None}).json()["data"]
        assert data["preferences"]["emailNotifications"]["newResponses"] is True

    def test_config_defaults(self, client, auth_headers):
        config = client.get("/api/config", headers=auth_headers).json()["data"]

        assert config["theme_color"] == "#00ac75"
        assert config["language"] == "pt-BR"
        assert config["integrations"]["smtp"]["enabled"] is False
        assert config["integrations"]["zenvia"]["whatsapp"]["from"] == ""

    def test_config_update(self, client, auth_headers):
        config = client.put("/api/config", headers=auth_headers, json={
            "theme_color": "",
            "language": "en-US",
            "company": {"name": "ACME", "document": "12.345.678/0001-90"},
        }).json()["data"]

        assert config["theme_color"] == "#00ac75"
        assert config["language"] == "en-US"
        assert config["company"] == {"name": "ACME", "document": "12.345.678/0001-90"}
        assert client.get("/api/config", headers=auth_headers).json()["data"]["id"] == config["id"]


class TestAffiliateRoutes:
    def test_bank_account(self, client, auth_headers):
        data = client.put("/api/affiliate", headers=auth_headers, json={
            "bank_account": {"pixKey": "ana@pix", "pixType": "email"},
        }).json()["data"]
        assert data["bank_account"] == {"pixKey": "ana@pix", "pixType": "email"}
        assert data["total_referrals"] == 0

    def test_referral_updates_totals(self, client, auth_headers, other_headers):
        code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]

        response = client.post("/api/affiliate/referrals", headers=other_headers, json={
            "affiliate_code": code, "commission_amount": 40,
        })
        assert response.status_code == 201
        assert "id" in response.json()["data"]

        affiliate = client.get("/api/affiliate", headers=auth_headers).json()["data"]
        assert affiliate["total_referrals"] == 1
        assert affiliate["total_earnings"] == 40.0
        assert affiliate["total_pending"] == 40.0
        assert affiliate["total_received"] == 0.0

        referrals = client.get("/api/affiliate/referrals", headers=auth_headers).json()["data"]
        assert referrals[0]["referred_name"] == "Bruno"
        assert referrals[0]["referred_email"] == "bruno@example.com"
        assert referrals[0]["commission_status"] == "pending"

    def test_default_commission(self, client, auth_headers, other_headers):
        code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]
        client.post("/api/affiliate/referrals", headers=other_headers, json={"affiliate_code": code})

        referrals = client.get("/api/affiliate/referrals", headers=auth_headers).json()["data"]
        assert referrals[0]["commission_amount"] == 25.0

    def test_referral_errors(self, client, auth_headers):
        own_code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]

        for payload, status, error in (
            ({}, 400, "Affiliate code is required"),
            ({"affiliate_code": "NOPE0000"}, 404, "Affiliate code not found"),
            ({"affiliate_code": own_code}, 400, "Cannot create self-referral"),
        ):
            response = client.post("/api/affiliate/referrals", headers=auth_headers, json=payload)
            assert response.status_code == status
            assert response.json()["error"] == error

    def test_recalculation_is_idempotent(self, client, auth_headers, other_headers, db_session):
        code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]
        client.post("/api/affiliate/referrals", headers=other_headers, json={
            "affiliate_code": code, "commission_amount": 40,
        })
        ana_id = uuid.UUID(me(client, auth_headers)["id"])

        first = recalculate_affiliate_stats(db_session, ana_id)
        db_session.commit()
        totals = (first.total_referrals, first.total_earnings, first.total_pending)
        second = recalculate_affiliate_stats(db_session, ana_id)
        db_session.commit()

        assert (second.total_referrals, second.total_earnings, second.total_pending) == totals
        assert second.total_earnings == Decimal("40")
        assert recalculate_affiliate_stats(db_session, uuid.uuid4()) is None


class TestAdminRoutes:
    def test_requires_admin(self, client, auth_headers):
        response = client.get("/api/admin/users", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Admin privileges required"

    def test_list_users(self, client, admin_headers, auth_headers):
        client.put("/api/profile", headers=auth_headers, json={"preferences": {"theme": "dark"}})

        users = client.get("/api/admin/users", headers=admin_headers).json()["data"]
        by_email = {u["email"]: u for u in users}
        assert set(by_email) == {"admin@meunps.com", "ana@example.com"}
        assert by_email["admin@meunps.com"]["role"] == "admin"
        assert by_email["ana@example.com"]["preferences"] == {"theme": "dark"}

    def test_cannot_deactivate_or_delete_self(self, client, admin_headers):
        admin_id = me(client, admin_headers)["id"]

        response = client.post(f"/api/admin/users/{admin_id}/deactivate", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Cannot deactivate your own account"

        response = client.delete(f"/api/admin/users/{admin_id}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete your own account"

    def test_deactivate_and_reactivate(self, client, admin_headers, auth_headers):
        campaign = create_campaign(client, auth_headers)
        ana_id = me(client, auth_headers)["id"]

        response = client.post(f"/api/admin/users/{ana_id}/deactivate", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "User deactivated successfully"

        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 401
        assert response.json()["error"] == "Account deactivated"
        response = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret123"})
        assert response.status_code == 401
        assert response.json()["error"] == "Account deactivated"
        assert submit(client, campaign["id"], 10).json()["error"] == "Campaign is not active"

        response = client.post(f"/api/admin/users/{ana_id}/reactivate", headers=admin_headers)
        assert response.status_code == 200
        login(client, "ana@example.com")
        # Campaigns stay closed after reactivation
        assert client.get(f"/api/forms/campaign/{campaign['id']}").status_code == 400

    def test_delete_user(self, client, admin_headers, other_headers):
        bruno_id = me(client, other_headers)["id"]

        response = client.delete(f"/api/admin/users/{bruno_id}", headers=admin_headers)
        assert response.status_code == 200

        response = client.delete(f"/api/admin/users/{bruno_id}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_delete_referred_user_refreshes_referrer_totals(
        self, client, admin_headers, auth_headers, other_headers,
    ):
        code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]
        client.post("/api/affiliate/referrals", headers=other_headers, json={
            "affiliate_code": code, "commission_amount": 40,
        })
        assert client.get("/api/affiliate", headers=auth_headers).json()["data"]["total_referrals"] == 1
        bruno_id = me(client, other_headers)["id"]

        assert client.delete(f"/api/admin/users/{bruno_id}", headers=admin_headers).status_code == 200

        affiliate = client.get("/api/affiliate", headers=auth_headers).json()["data"]
        assert affiliate["total_referrals"] == 0
        assert affiliate["total_earnings"] == 0.0
        assert affiliate["total_pending"] == 0.0

    def test_unknown_user(self, client, admin_headers):
        response = client.post(f"/api/admin/users/{uuid.uuid4()}/reactivate", headers=admin_headers)
        assert response.status_code == 404

    def test_referral_status(self, client, admin_headers, auth_headers, other_headers):
        code = client.get("/api/affiliate", headers=auth_headers).json()["data"]["affiliate_code"]
        referral_id = client.post("/api/affiliate/referrals", headers=other_headers, json={
            "affiliate_code": code, "commission_amount": 40,
        }).json()["data"]["id"]

        listed = client.get("/api/admin/affiliate/referrals", headers=admin_headers).json()["data"]
        assert listed[0]["affiliate_code"] == code
        assert listed[0]["affiliate_name"] == "Ana"
        assert listed[0]["referred_name"] == "Bruno"

        url = f"/api/admin/affiliate/referrals/{referral_id}/status"
        response = client.put(url, headers=admin_headers, json={"status": "approved"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid status"

        response = client.put(url, headers=admin_headers, json={"status": "paid"})
        assert response.status_code == 200

        affiliate = client.get("/api/affiliate", headers=auth_headers).json()["data"]
        assert affiliate["total_received"] == 40.0
        assert affiliate["total_pending"] == 0.0
        assert affiliate["total_earnings"] == 40.0
        referral = client.get("/api/affiliate/referrals", headers=auth_headers).json()["data"][0]
        assert referral["commission_status"] == "paid"
        assert referral["paid_at"] is not None

        response = client.put(
            f"/api/admin/affiliate/referrals/{uuid.uuid4()}/status",
            headers=admin_headers, json={"status": "paid"},
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Referral not found"


SMTP_CONFIG = {
    "enabled": True,
    "host": "smtp.example.com",
    "port": 587,
    "username": "user",
    "password": "pass",
    "fromName": "Loja da Ana",
    "fromEmail": "ana@example.com",
}


class TestEmailRoutes:
    @pytest.fixture
    def smtp_class(self, monkeypatch):
        smtp_class = MagicMock()
        monkeypatch.setattr(smtplib, "SMTP", smtp_class)
        return smtp_class

    def test_test_email(self, client, auth_headers, smtp_class):
        response = client.post("/api/email/test", headers=auth_headers, json={"smtpConfig": SMTP_CONFIG})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Test email sent successfully"
        assert body["messageId"]
        sent = smtp_class.return_value.send_message.call_args.args[0]
        assert "ana@example.com" in str(sent["To"])

    def test_test_email_incomplete(self, client, auth_headers):
        response = client.post("/api/email/test", headers=auth_headers, json={
            "smtpConfig": {"host": "smtp.example.com"},
        })
        assert response.status_code == 400
        assert response.json()["error"] == "SMTP configuration is incomplete"

    def test_test_email_failure(self, client, auth_headers, smtp_class):
        smtp_class.side_effect = OSError("Connection refused")

        response = client.post("/api/email/test", headers=auth_headers, json={"smtpConfig": SMTP_CONFIG})
        assert response.status_code == 500
        assert response.json()["error"] == "Connection refused"

    def test_campaign_requires_smtp(self, client, auth_headers):
        campaign = create_campaign(client, auth_headers)
        payload = {"campaignId": campaign["id"], "contactIds": [str(uuid.uuid4())]}

        response = client.post("/api/email/campaign", headers=auth_headers, json=payload)
        assert response.json()["error"] == "SMTP not configured"

        client.get("/api/config", headers=auth_headers)
        response = client.post("/api/email/campaign", headers=auth_headers, json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "SMTP not enabled"

    def test_campaign_emails(self, client, auth_headers, smtp_class):
        client.put("/api/config", headers=auth_headers, json={"integrations": {"smtp": SMTP_CONFIG}})
        campaign = create_campaign(client, auth_headers, name="Q3")
        ids = []
        for name, email in (("Alice", "alice@example.com"), ("Zeca", "fail@example.com")):
            ids.append(client.post("/api/contacts", headers=auth_headers, json={
                "name": name, "email": email, "phone": "11999990000",
            }).json()["data"]["id"])

        def send_message(message):
            if "fail@example.com" in str(message["To"]):
                raise smtplib.SMTPDataError(550, "Mailbox unavailable")

        smtp_class.return_value.send_message.side_effect = send_message

        response = client.post(
            "/api/email/campaign",
            headers={**auth_headers, "Origin": "https://app.meunps.com.br"},
            json={
                "campaignId": campaign["id"],
                "contactIds": ids,
                "subject": "Olá {{nome}}",
                "message": "Pesquisa {{campanha}}",
                "includeLink": True,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Emails enviados: 1 sucessos, 1 falhas"
        assert body["summary"] == {"total": 2, "successful": 1, "failed": 1}
        assert body["results"][0]["contact"] == "alice@example.com"
        assert body["results"][0]["success"] is True
        assert body["results"][1]["success"] is False
        assert body["results"][1]["error"]

        first = smtp_class.return_value.send_message.call_args_list[0].args[0]
        assert first["Subject"] == "Olá Alice"
        html = first.get_body(preferencelist=("html",)).get_content()
        assert f"https://app.meunps.com.br/survey/{campaign['id']}" in html
        assert "Pesquisa Q3" in html

    def test_campaign_without_valid_contacts(self, client, auth_headers, other_headers):
        client.put("/api/config", headers=auth_headers, json={"integrations": {"smtp": SMTP_CONFIG}})
        campaign = create_campaign(client, auth_headers)
        foreign = client.post("/api/contacts", headers=other_headers, json={
            "name": "Bia", "email": "bia@example.com", "phone": "1",
        }).json()["data"]

        response = client.post("/api/email/campaign", headers=auth_headers, json={
            "campaignId": campaign["id"], "contactIds": [foreign["id"]],
        })
        assert response.status_code == 404
        assert response.json()["error"] == "No valid contacts found"


class TestWebhookRoutes:
    def _use_target(self, handler):
        app.dependency_overrides[get_webhook_proxy] = lambda: WebhookProxy(
            transport=httpx.MockTransport(handler),
        )

    def test_requires_auth(self, client):
        response = client.post("/api/webhooks/proxy", json={"url": "https://hooks.example.com"})
        assert response.status_code == 401

    def test_success(self, client, auth_headers):
        self._use_target(lambda request: httpx.Response(200, json={"received": True}))

        response = client.post("/api/webhooks/proxy", headers=auth_headers, json={
            "url": "https://hooks.example.com/nps", "payload": {"score": 9},
        })
        assert response.status_code == 200
        assert response.json() == {
            "success": True, "status": 200, "statusText": "OK", "data": {"received": True},
        }

    def test_target_error_status_is_passed_through(self, client, auth_headers):
        self._use_target(lambda request: httpx.Response(502, text="Bad gateway"))

        response = client.post("/api/webhooks/proxy", headers=auth_headers, json={
            "url": "https://hooks.example.com/nps", "payload": {},
        })
        assert response.status_code == 502
        body = response.json()
        assert body["success"] is False
        assert body["status"] == 502
        assert body["data"] == {"message": "Bad gateway"}

    def test_timeout(self, client, auth_headers):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        self._use_target(handler)

        response = client.post("/api/webhooks/proxy", headers=auth_headers, json={
            "url": "https://hooks.example.com/nps",
        })
        assert response.status_code == 408
        assert response.json() == {"error": "Webhook request timed out (30s)"}

    @pytest.mark.parametrize("url,error", [
        (None, "Webhook URL is required"),
        ("javascript:alert(1)", "Invalid webhook URL format"),
    ])
    def test_invalid_url(self, client, auth_headers, url, error):
        response = client.post("/api/webhooks/proxy", headers=auth_headers, json={"url": url})
        assert response.status_code == 400
        assert response.json()["error"] == error
