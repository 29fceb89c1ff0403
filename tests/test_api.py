async def test_responses_include_x_request_id(api_client) -> None:
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("x-request-id")


async def test_root_lists_endpoints(api_client) -> None:
    resp = await api_client.get("/")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["message"] == "API Server is running"
    paths = {endpoint["path"]: endpoint for endpoint in payload["endpoints"]}
    assert paths["/customers"]["methods"] == ["GET", "POST"]
    assert paths["/products/:id"]["methods"] == ["GET"]
    assert paths["/metrics"]["description"] == "Prometheus metrics"
    assert "description" not in paths["/customers"]


async def test_create_and_fetch_customers_scenario(api_client) -> None:
    first = await api_client.post("/customers", json={"name": "A"})
    assert first.status_code == 201
    body = first.json()
    assert body["id"] == 1
    assert body["name"] == "A"
    assert body["createdAt"].endswith("Z")

    second = await api_client.post("/customers", json={"name": "B"})
    assert second.status_code == 201
    assert second.json()["id"] == 2
    assert second.json()["name"] == "B"

    fetched = await api_client.get("/customers/2")
    assert fetched.status_code == 200
    assert fetched.json() == second.json()

    missing = await api_client.get("/customers/99")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Customer not found"}


async def test_ids_follow_creation_order(api_client) -> None:
    ids = []
    for i in range(5):
        resp = await api_client.post("/products", json={"sku": f"SKU-{i}"})
        assert resp.status_code == 201
        ids.append(resp.json()["id"])
    assert ids == [1, 2, 3, 4, 5]

    listing = await api_client.get("/products")
    assert listing.status_code == 200
    assert [p["sku"] for p in listing.json()] == [f"SKU-{i}" for i in range(5)]


async def test_client_fields_are_kept_verbatim(api_client) -> None:
    payload = {"name": "Widget", "price": 9.99, "tags": ["a", "b"], "meta": {"color": None}}
    created = await api_client.post("/products", json=payload)
    assert created.status_code == 201

    fetched = await api_client.get(f"/products/{created.json()['id']}")
    body = fetched.json()
    for key, value in payload.items():
        assert body[key] == value
    assert set(body) == set(payload) | {"id", "createdAt"}


async def test_server_assigned_fields_win(api_client) -> None:
    resp = await api_client.post("/customers", json={"id": 42, "createdAt": "yesterday", "name": "X"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == 1
    assert body["createdAt"] != "yesterday"


async def test_empty_body_creates_record_with_server_fields_only(api_client) -> None:
    resp = await api_client.post("/customers")
    assert resp.status_code == 201
    assert set(resp.json()) == {"id", "createdAt"}


async def test_form_body_is_accepted(api_client) -> None:
    resp = await api_client.post("/customers", data={"name": "Form User"})
    assert resp.status_code == 201
    assert resp.json()["name"] == "Form User"


async def test_non_numeric_id_is_not_found(api_client) -> None:
    await api_client.post("/products", json={"name": "P"})
    resp = await api_client.get("/products/abc")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Product not found"}


async def test_non_object_body_is_internal_error(api_client) -> None:
    resp = await api_client.post("/customers", json=[1, 2, 3])
    assert resp.status_code == 500
    assert "error" in resp.json()


async def test_store_failure_returns_500_with_message(app, api_client, monkeypatch) -> None:
    store = app.state.context.store("customers")

    def boom(fields):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(store, "create", boom)
    resp = await api_client.post("/customers", json={"name": "A"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "disk on fire"}


async def test_apps_do_not_share_state(api_client) -> None:
    from httpx import ASGITransport, AsyncClient

    from app.main import create_app

    await api_client.post("/customers", json={"name": "A"})

    other = create_app()
    async with AsyncClient(transport=ASGITransport(app=other), base_url="http://test") as client:
        resp = await client.get("/customers")
    assert resp.json() == []


async def test_cors_headers_are_sent(api_client) -> None:
    resp = await api_client.get("/customers", headers={"Origin": "http://example.com"})
    assert resp.status_code == 200
    assert resp.headers.get("access-control-allow-origin") == "*"


async def test_oversized_numeric_id_is_not_found(api_client, metrics) -> None:
    resp = await api_client.get("/customers/" + "9" * 5000)
    assert resp.status_code == 404
    assert resp.json() == {"message": "Customer not found"}
    assert metrics.sample_value("api_error_total", {"route": "/customers/:id", "method": "GET"}) == 1.0


async def test_non_finite_json_numbers_are_rejected(api_client) -> None:
    resp = await api_client.post(
        "/products",
        content=b'{"score": NaN}',
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 500
    assert "NaN" in resp.json()["error"]

    listing = await api_client.get("/products")
    assert listing.json() == []
