"""Tests for the versioned greetings API example."""

from wren.testing import TestClient, assert_error, assert_json


class TestGreetingsAPI:
    async def test_version_root(self, example_app) -> None:
        async with TestClient(example_app) as client:
            body = assert_json(await client.get("/api/v1"))
            assert body["version"] == "v1"

    async def test_v1_greeting(self, example_app) -> None:
        async with TestClient(example_app) as client:
            body = assert_json(await client.get("/api/v1/greetings/ada"))
            assert body == {"greeting": "Hello, ada!"}

    async def test_v2_greeting_language(self, example_app) -> None:
        async with TestClient(example_app) as client:
            body = assert_json(await client.get("/api/v2/greetings/ada?lang=fr"))
            assert body["greeting"] == "Bonjour, ada!"

    async def test_v2_unknown_language(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/v2/greetings/ada?lang=xx")
            assert_error(response, status=404, code="NOT_FOUND")

    async def test_create_greeting(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post(
                "/api/v1/greetings", json={"name": "ada", "lang": "es"}
            )
            assert assert_json(response, status=201) == {"greeting": "Hola, ada!"}

    async def test_create_greeting_requires_name(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/api/v1/greetings", json={})
            error = assert_error(response, status=400, code="VALIDATION_ERROR")
            assert error["details"] == {"field": "name"}

    async def test_every_module_discovered(self, example_app) -> None:
        async with TestClient(example_app):
            (report,) = example_app.discovery_reports
            assert report.ok
            assert len(report.succeeded) == 4

    async def test_docs_list_both_versions(self, example_app) -> None:
        async with TestClient(example_app) as client:
            doc = assert_json(await client.get("/api-docs/openapi.json"))
            assert [tag["name"] for tag in doc["tags"]] == ["v1", "v2"]
            assert doc["info"]["title"] == "Greetings API"
