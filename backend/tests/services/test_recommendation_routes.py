"""Recommendation Routes — GET /api/v1/recommendation and GET /api/v1/routes."""

PARAMS = {"from": "USD", "to": "GHS", "sendAmount": "100", "marketRate": "12.35"}


async def test_recommendation(client, catalog):
    res = await client.get("/api/v1/recommendation", params=PARAMS)

    assert res.status_code == 200
    body = res.json()
    ids = {name: str(route.id) for name, route in catalog["routes"].items()}
    assert body["bestValueRouteId"] == ids["ecobank"]
    assert body["cheapestRouteId"] == ids["mtn"]
    assert body["fastestRouteId"] == ids["mtn"]
    assert body["rateSource"] == "manual"
    assert [s["routeId"] for s in body["suggestions"]] == [
        ids["ecobank"], ids["mtn"], ids["access"],
    ]
    mtn = next(r for r in body["routes"] if r["id"] == ids["mtn"])
    assert mtn["recipientGets"] == 1186.18
    assert mtn["totalFee"] == 2.49


async def test_recommendation_unknown_corridor(client):
    res = await client.get(
        "/api/v1/recommendation", params={**PARAMS, "from": "GHS", "to": "USD"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Unknown corridor: GHS->USD"


async def test_recommendation_rate_limited(client, settings):
    settings.recommendation_rate_limit = 2
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

    codes = [
        (await client.get("/api/v1/recommendation", params=PARAMS, headers=headers)).status_code
        for _ in range(3)
    ]

    assert codes == [200, 200, 429]


async def test_list_routes(client):
    res = await client.get("/api/v1/routes", params={"from": "usd", "to": "ghs"})

    assert res.status_code == 200
    body = res.json()
    assert [r["provider"] for r in body["routes"]] == ["MTN MoMo", "AccessBank", "Ecobank"]
    assert body["fromAsset"] == {"code": "USD", "name": "US Dollar", "decimals": 2}


async def test_list_routes_requires_pair(client):
    res = await client.get("/api/v1/routes", params={"from": "USD"})
    assert res.status_code == 400
