"""
Tally Backend - Variables, DateRecords, Elements and ElementInts API Tests
===========================================================================

What:  The generic CRUD behavior on the resources other than /records,
       plus the health check and the error envelope for unknown routes.
"""

import pytest


class TestVariables:

    @pytest.mark.asyncio
    async def test_create_and_get(self, auth_client):
        created = await auth_client.post("/variables", json={"name": "weight"})
        assert created.status_code == 201

        entity_id = created.json()["data"]["id"]
        response = await auth_client.get(f"/variables/{entity_id}")
        assert response.json() == {"ok": True, "data": {"id": entity_id, "name": "weight"}}

    @pytest.mark.asyncio
    async def test_blank_name_is_missing(self, auth_client):
        response = await auth_client.post("/variables", json={"name": ""})

        assert response.status_code == 400
        assert response.json()["details"]["fields"] == ["name"]

    @pytest.mark.asyncio
    async def test_rename(self, auth_client, variable_id):
        response = await auth_client.patch(f"/variables/{variable_id}", json={"name": "mass"})

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "mass"

    @pytest.mark.asyncio
    async def test_blank_name_on_update_rejected(self, auth_client, variable_id):
        response = await auth_client.patch(f"/variables/{variable_id}", json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["details"]["fields"] == ["name"]

        fetched = await auth_client.get(f"/variables/{variable_id}")
        assert fetched.json()["data"]["name"] == "weight"

    @pytest.mark.asyncio
    async def test_null_name_rejected(self, auth_client, variable_id):
        response = await auth_client.patch(f"/variables/{variable_id}", json={"name": None})
        assert response.status_code == 400


class TestDateRecords:

    @pytest.mark.asyncio
    async def test_date_is_iso_formatted(self, auth_client, date_record_id):
        response = await auth_client.get(f"/date-records/{date_record_id}")
        assert response.json()["data"]["date"] == "2024-01-15"

    @pytest.mark.asyncio
    async def test_same_date_is_noop(self, auth_client, date_record_id):
        response = await auth_client.patch(
            f"/date-records/{date_record_id}", json={"date": "2024-01-15"}
        )
        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_invalid_date_is_bad_request(self, auth_client):
        response = await auth_client.post("/date-records", json={"date": "not-a-date"})
        assert response.status_code == 400


class TestElementInts:

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, auth_client):
        element = await auth_client.post("/elements", json={"name": "steps"})
        element_id = element.json()["data"]["id"]

        created = await auth_client.post(
            "/element-ints", json={"record": 10, "ElementId": element_id}
        )
        assert created.status_code == 201
        url = f"/element-ints/{created.json()['data']['id']}"

        listed = await auth_client.get("/element-ints", params={"ElementId": element_id})
        assert listed.status_code == 200
        assert len(listed.json()["data"]) == 1

        assert (await auth_client.patch(url, json={"record": 10})).status_code == 204
        updated = await auth_client.patch(url, json={"record": 11})
        assert updated.status_code == 201
        assert updated.json()["data"]["record"] == 11

        assert (await auth_client.delete(url)).status_code == 204
        assert (await auth_client.get(url)).status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_element_is_not_found(self, auth_client):
        response = await auth_client.post("/element-ints", json={"record": 1, "ElementId": 42})

        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "Element"

    @pytest.mark.asyncio
    async def test_unknown_element_filter_is_not_found(self, auth_client):
        response = await auth_client.get("/element-ints", params={"ElementId": 42})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_null_element_rejected(self, auth_client):
        element = await auth_client.post("/elements", json={"name": "steps"})
        created = await auth_client.post(
            "/element-ints",
            json={"record": 1, "ElementId": element.json()["data"]["id"]},
        )

        response = await auth_client.patch(
            f"/element-ints/{created.json()['data']['id']}", json={"ElementId": None}
        )

        assert response.status_code == 400
        assert response.json()["details"]["reason"] == "null_field"


class TestServiceEndpoints:

    @pytest.mark.asyncio
    async def test_health_needs_no_session(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_failure_envelope(self, test_client):
        response = await test_client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["ok"] is False
