"""
Tests for /api/emails endpoints.
"""

from conftest import imap_entry, make_raw_email


def _load(mail_service):
    mail_service.messages = [
        (21, imap_entry(make_raw_email(subject="Devis Freebox", sender="client@example.com"))),
        (20, imap_entry(make_raw_email(
            subject="Suivi RDV",
            sender="recrutement@synergiemarketingroup.fr",
            to="prospect@example.com",
        ), flags=(b"\\Seen",))),
    ]


class TestListEmails:
    """Tests for GET /api/emails and /stats."""

    def test_list(self, client, mail_service):
        _load(mail_service)
        response = client.get("/api/emails")

        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data["emails"]] == [21, 20]
        assert data["pagination"] == {"page": 1, "limit": 50, "total": 2, "pages": 1}
        assert data["sync"] == {"status": "ok", "reason": None}

        email = data["emails"][0]
        assert email["fromEmail"] == "client@example.com"
        assert email["direction"] == "inbound"
        assert email["isRead"] is False
        assert "htmlContent" in email
        assert "textContent" in email

    def test_filters(self, client, mail_service):
        _load(mail_service)
        data = client.get("/api/emails", params={"direction": "outbound"}).json()
        assert [e["id"] for e in data["emails"]] == [20]
        assert data["pagination"]["total"] == 1

        data = client.get("/api/emails", params={"search": "devis"}).json()
        assert [e["id"] for e in data["emails"]] == [21]

    def test_degraded_listing(self, client, mail_service):
        mail_service.fetch_error = OSError("Connection refused")
        response = client.get("/api/emails")

        assert response.status_code == 200
        data = response.json()
        assert data["sync"]["status"] == "degraded"
        assert data["sync"]["reason"] == "Connection refused"
        assert len(data["emails"]) == 1
        assert data["emails"][0]["isPlaceholder"] is True

    def test_list_served_from_cache(self, client, mail_service):
        _load(mail_service)
        client.get("/api/emails")
        client.get("/api/emails", params={"direction": "inbound"})
        client.get("/api/emails/stats")
        assert mail_service.fetch_calls == 1

    def test_stats(self, client, mail_service):
        _load(mail_service)
        response = client.get("/api/emails/stats")

        assert response.status_code == 200
        assert response.json() == {
            "total": 2,
            "nonLus": 1,
            "favoris": 0,
            "important": 0,
            "recus": 1,
            "envoyes": 1,
        }

    def test_unhandled_error(self, client, inbox, mocker):
        mocker.patch.object(inbox, "stats", side_effect=RuntimeError("boom"))
        response = client.get("/api/emails/stats")

        assert response.status_code == 500
        assert response.json() == {"error": "Erreur serveur"}


class TestSingleEmail:
    """Tests for GET/PUT /api/emails/{id}."""

    def test_get_marks_read(self, client, mail_service):
        _load(mail_service)
        response = client.get("/api/emails/21")

        assert response.status_code == 200
        assert response.json()["isRead"] is True
        assert client.get("/api/emails/stats").json()["nonLus"] == 0

    def test_get_not_found(self, client, mail_service):
        _load(mail_service)
        response = client.get("/api/emails/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Email non trouvé"}

    def test_put(self, client, mail_service):
        _load(mail_service)
        response = client.put("/api/emails/21", json={"isStarred": True, "id": 3, "inconnu": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["isStarred"] is True
        assert data["id"] == 21
        assert "inconnu" not in data
        assert client.get("/api/emails/stats").json()["favoris"] == 1

    def test_put_null_images_rejected(self, client, mail_service):
        _load(mail_service)
        response = client.put("/api/emails/21", json={"images": None})

        assert response.status_code == 422
        assert client.get("/api/emails/21").json()["images"] == []

    def test_put_null_subject_keeps_search_working(self, client, mail_service):
        _load(mail_service)
        response = client.put("/api/emails/21", json={"subject": None})
        assert response.status_code == 422

        response = client.get("/api/emails", params={"search": "devis"})
        assert response.status_code == 200
        assert [e["id"] for e in response.json()["emails"]] == [21]

    def test_put_wrong_types_rejected(self, client, mail_service):
        _load(mail_service)
        assert client.put("/api/emails/21", json={"images": "logo.png"}).status_code == 422
        assert client.put("/api/emails/21", json={"subject": ["a"]}).status_code == 422
        assert client.put("/api/emails/21", json={"direction": "sideways"}).status_code == 422

    def test_put_images_list(self, client, mail_service):
        _load(mail_service)
        data = client.put("/api/emails/21", json={"images": ["https://cdn.example.com/a.png"]}).json()
        assert data["images"] == ["https://cdn.example.com/a.png"]

    def test_put_not_found(self, client, mail_service):
        _load(mail_service)
        response = client.put("/api/emails/999", json={"isRead": True})
        assert response.status_code == 404


class TestSendEmail:
    """Tests for POST /api/emails/send."""

    def test_send_ok(self, client, mail_service):
        response = client.post("/api/emails/send", json={
            "to": "prospect@example.com",
            "subject": "Votre offre",
            "htmlContent": "<p>Bonjour</p>",
        })

        assert response.status_code == 200
        data = response.json()
        assert data == {
            "success": True,
            "messageId": "<abc@synergiemarketingroup.fr>",
            "note": "✅ Email envoyé via Hostinger",
            "status": "ok",
        }
        sent = mail_service.sent[0]
        assert sent["to"] == "prospect@example.com"
        assert sent["html"] == "<p>Bonjour</p>"
        assert "Bonjour" in sent["text"]
        assert "<p>" not in sent["text"]

    def test_send_invalidates_cache(self, client, mail_service):
        _load(mail_service)
        client.get("/api/emails")
        client.post("/api/emails/send", json={"to": "a@example.com", "subject": "x", "textContent": "x"})
        client.get("/api/emails")
        assert mail_service.fetch_calls == 2

    def test_send_failure_is_degraded(self, client, mail_service):
        _load(mail_service)
        client.get("/api/emails")
        mail_service.send_error = "Connection refused"

        response = client.post("/api/emails/send", json={
            "to": "prospect@example.com",
            "subject": "Votre offre",
            "textContent": "Bonjour",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "degraded"
        assert data["messageId"].startswith("simulated-")
        assert data["note"] == "Email simulé - configuration Hostinger en cours"
        assert data["error"] == "Connection refused"

        client.get("/api/emails")
        assert mail_service.fetch_calls == 1

    def test_missing_recipient(self, client, mail_service):
        response = client.post("/api/emails/send", json={"subject": "x"})

        assert response.status_code == 400
        assert response.json() == {"error": "Destinataire et sujet requis"}
        assert mail_service.sent == []

    def test_missing_subject(self, client):
        response = client.post("/api/emails/send", json={"to": "a@example.com"})
        assert response.status_code == 400

    def test_invalid_recipient(self, client, mail_service):
        response = client.post("/api/emails/send", json={"to": "pas-un-email", "subject": "x", "textContent": "x"})

        assert response.status_code == 400
        assert response.json() == {"error": "Adresse email du destinataire invalide"}
        assert mail_service.sent == []

    def test_send_with_template(self, client, mail_service):
        response = client.post("/api/emails/send", json={
            "to": "prospect@example.com",
            "templateId": "relance-prospect-chaud",
            "variables": {"nom": "Dupont", "produit": "Freebox Pop"},
        })

        assert response.status_code == 200
        sent = mail_service.sent[0]
        assert sent["subject"] == "Dernière chance - Offre Free Freebox Pop expire bientôt"
        assert "Dupont" in sent["html"]
        assert "Bonjour Dupont" in sent["text"]

    def test_template_ignored_without_variables(self, client, mail_service):
        response = client.post("/api/emails/send", json={
            "to": "prospect@example.com",
            "templateId": "relance-prospect-chaud",
        })
        assert response.status_code == 400
        assert mail_service.sent == []

    def test_unknown_template_keeps_request_fields(self, client, mail_service):
        response = client.post("/api/emails/send", json={
            "to": "prospect@example.com",
            "subject": "Sujet libre",
            "textContent": "Texte libre",
            "templateId": "inconnu",
            "variables": {},
        })
        assert response.status_code == 200
        assert mail_service.sent[0]["subject"] == "Sujet libre"

    def test_inactive_account(self, client):
        response = client.post("/api/emails/send", json={
            "to": "a@example.com",
            "subject": "x",
            "textContent": "x",
            "accountId": "commercial-ventes",
        })

        assert response.status_code == 400
        assert response.json() == {"error": "Compte email commercial-ventes non disponible"}


class TestRefreshAndConnection:
    """Tests for POST /refresh and /test-connection."""

    def test_refresh(self, client, mail_service):
        _load(mail_service)
        client.get("/api/emails")
        response = client.post("/api/emails/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["emailCount"] == 2
        assert data["status"] == "ok"
        assert data["lastUpdate"]
        assert mail_service.fetch_calls == 2

    def test_refresh_degraded(self, client, mail_service):
        mail_service.fetch_error = OSError("Network is unreachable")
        data = client.post("/api/emails/refresh").json()

        assert data["success"] is False
        assert data["status"] == "degraded"
        assert data["emailCount"] == 1
        assert "Network is unreachable" in data["message"]

    def test_connection(self, client, mail_service):
        assert client.post("/api/emails/test-connection").json() == {"success": True}
        mail_service.connection_ok = False
        assert client.post("/api/emails/test-connection").json() == {"success": False}
