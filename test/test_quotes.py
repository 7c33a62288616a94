from revops.models import Quote


class TestCreateQuote:
    """Public quote capture."""

    def test_creates_draft_quote(self, client):
        response = client.post(
            "/api/quotes",
            json={
                "userEmail": "  Buyer@Acme.IO ",
                "companyName": "Acme",
                "scopingInputs": {"team_size": 40},
                "calculatedPrice": 18000,
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Quote created successfully"
        assert body["data"]["userEmail"] == "buyer@acme.io"
        assert body["data"]["status"] == "draft"
        assert body["data"]["scopingInputs"] == {"team_size": 40}

    def test_requires_email_or_company(self, client):
        response = client.post("/api/quotes", json={"firstName": "Sam"})

        assert response.status_code == 400
        assert response.json()["error"] == "Either userEmail or companyName is required"

    def test_rejects_malformed_email(self, client):
        response = client.post("/api/quotes", json={"userEmail": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_rejects_unknown_status(self, client):
        response = client.post("/api/quotes", json={"companyName": "Acme", "status": "won"})

        assert response.status_code == 400


class TestQuoteAdmin:
    """Admin quote review."""

    def test_list_requires_admin(self, client):
        assert client.get("/api/quotes").status_code == 401

    def test_filters_by_email_and_status(self, client, db_session, admin_headers):
        db_session.add_all(
            [
                Quote(user_email="a@acme.io", status="draft"),
                Quote(user_email="a@acme.io", status="sent"),
                Quote(user_email="b@beta.io", status="sent"),
            ]
        )
        db_session.commit()

        by_email = client.get("/api/quotes", headers=admin_headers, params={"email": "a@acme.io"}).json()
        assert by_email["meta"]["count"] == 2

        by_status = client.get("/api/quotes", headers=admin_headers, params={"status": "sent"}).json()
        assert {q["userEmail"] for q in by_status["data"]} == {"a@acme.io", "b@beta.io"}

    def test_invalid_status_filter(self, client, admin_headers):
        response = client.get("/api/quotes", headers=admin_headers, params={"status": "lost"})

        assert response.status_code == 400

    def test_update_quote_status(self, client, db_session, admin_headers):
        quote = Quote(company_name="Acme")
        db_session.add(quote)
        db_session.commit()

        response = client.patch(
            f"/api/quotes/{quote.id}",
            headers=admin_headers,
            json={"status": "sent", "pdfUrl": "https://files.example.com/q.pdf"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "sent"
        assert data["pdfUrl"] == "https://files.example.com/q.pdf"

    def test_missing_quote_is_404(self, client, admin_headers):
        response = client.get("/api/quotes/missing", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Quote not found"
