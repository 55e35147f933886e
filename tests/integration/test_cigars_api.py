import pytest
from fastapi.testclient import TestClient


def _submit(client: TestClient, **fields):
    payload = {"brand": "Cohiba", "name": "Siglo II", **fields}
    return client.post("/api/v1/cigars/recognitions", json=payload)


class TestSubmitRecognition:

    def test_creates_record(self, client: TestClient):
        response = _submit(client, origin="Cuba", rating=85, contributorId="u1", contributorName="Ana")

        assert response.status_code == 201
        data = response.json()
        assert data["key"] == "cohibasigloii"
        assert data["created"] is True
        assert data["malformed_fields"] == []

    def test_second_submission_updates(self, client: TestClient):
        _submit(client, origin="Cuba")
        response = _submit(client, origin="Cuba")

        assert response.status_code == 201
        assert response.json()["created"] is False

    def test_missing_name_is_rejected(self, client: TestClient):
        response = client.post("/api/v1/cigars/recognitions", json={"brand": "Cohiba"})

        assert response.status_code == 422
        assert response.json()["detail"] == "name is required"

    def test_reports_malformed_fields(self, client: TestClient):
        response = _submit(client, rating="excellent", flavorProfile=["Earth", 5])

        assert response.status_code == 201
        fields = sorted(item["field"] for item in response.json()["malformed_fields"])
        assert fields == ["flavor_profile", "rating"]


class TestReadConsensus:

    def test_reference_scenario(self, client: TestClient):
        _submit(client, origin="Cuba", rating=85)
        _submit(client, origin="Cuba", rating=95)
        _submit(client, origin="Dominican Republic")

        response = client.get("/api/v1/cigars/cohibasigloii")

        assert response.status_code == 200
        data = response.json()
        assert data["origin"] == "Cuba"
        assert data["origin_consistency"] == pytest.approx(66.667, rel=1e-3)
        assert data["rating"] == pytest.approx(90.0)
        assert data["rating_count"] == 2
        assert data["total_recognitions"] == 3
        assert data["brand"] == "Cohiba"

    def test_unknown_key(self, client: TestClient):
        response = client.get("/api/v1/cigars/nothing")
        assert response.status_code == 404

    def test_lookup_by_product_name(self, client: TestClient):
        _submit(client, flavorProfile=["Cedar", "Cedar", "Honey"])

        response = client.get("/api/v1/cigars/lookup", params={"product_name": "COHIBA siglo-ii"})

        assert response.status_code == 200
        flavors = response.json()["flavor_profile"]
        assert flavors[0]["value"] == "Cedar"
        assert flavors[0]["count"] == 2

    def test_lookup_unknown_product(self, client: TestClient):
        response = client.get("/api/v1/cigars/lookup", params={"product_name": "Unknown Stick"})
        assert response.status_code == 404

    def test_search(self, client: TestClient):
        _submit(client)
        client.post("/api/v1/cigars/recognitions", json={"brand": "Padron", "name": "1964"})

        response = client.get("/api/v1/cigars/search", params={"q": "cohiba"})

        assert response.status_code == 200
        assert response.json() == {"query": "cohiba", "keys": ["cohibasigloii"]}


class TestContributorHistory:

    def test_history_newest_first(self, client: TestClient):
        client.post(
            "/api/v1/cigars/recognitions",
            json={"brand": "Padron", "name": "1964", "contributorId": "u1", "contributorName": "Ana"},
        )
        _submit(client, contributorId="u1", contributorName="Ana")
        _submit(client, contributorId="u2", contributorName="Ben")

        response = client.get("/api/v1/cigars/contributors/u1/history")

        assert response.status_code == 200
        items = response.json()
        assert [item["key"] for item in items] == ["cohibasigloii", "padron1964"]
        assert items[0]["consensus"]["unique_contributors"] == 2

    def test_history_empty(self, client: TestClient):
        response = client.get("/api/v1/cigars/contributors/nobody/history")
        assert response.status_code == 200
        assert response.json() == []


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "healthy"}
