# tests/test_recommendations_api.py
import asyncio
from unittest.mock import patch
from conftest import FakeLanguageModel, make_product

def running_on_event_loop():
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True

def request_body(raw_intent="Do you have size 42 basketball shoes under $150?", **extra):
    body = {"merchantId": "merchant_001", "rawIntent": raw_intent}
    body.update(extra)
    return body

def test_size_and_budget_request_finds_matching_shoe(make_client):
    llm = FakeLanguageModel({"category": "Basketball Shoes", "price_min": None, "price_max": 150,
                             "size": "42", "color": None, "confidence": 0.9})
    client = make_client(llm=llm)

    response = client.post("/api/recommendations", json=request_body())

    assert response.status_code == 200
    body = response.json()
    assert body["unmet_demand"] is False
    assert body["confidence"] == 0.9
    assert "message" not in body
    assert body["extracted_intent"]["category"] == "Basketball Shoes"

    assert [p["productId"] for p in body["products"]] == ["air_jordan_13"]
    product = body["products"][0]
    assert product["match_reasons"] == [
        "in_stock",
        "category_exact_match:Basketball Shoes",
        "price_within_max:120",
        "size_match:42",
    ]
    assert product["match_score"] == 280
    assert product["matched_variant"]["attributes"]["size"] == "42"
    assert product["agentSummary"].startswith("Air Jordan 13 Retro.")
    assert "Available sizes: 41, 42, 44." in product["agentSummary"]

def test_generic_category_matches_more_specific_products(make_client):
    llm = FakeLanguageModel({"category": "Shoes", "confidence": 0.7})
    client = make_client(llm=llm)

    response = client.post("/api/recommendations", json=request_body("any shoes?", limit=20))

    products = response.json()["products"]
    assert [p["productId"] for p in products] == ["court_classic", "air_jordan_13", "nike_air_force_1", "pegasus_40"]
    assert "category_hierarchical_match:Shoes->Basketball Shoes" in products[1]["match_reasons"]

def test_limit_is_respected(make_client):
    client = make_client(llm=FakeLanguageModel({"category": "Shoes", "confidence": 0.7}))

    response = client.post("/api/recommendations", json=request_body("shoes", limit=2))

    assert len(response.json()["products"]) == 2

def test_unmatched_category_is_unmet_demand(make_client):
    client = make_client(llm=FakeLanguageModel({"category": "Hiking Boots", "confidence": 0.8}))

    response = client.post("/api/recommendations", json=request_body("hiking boots"))

    body = response.json()
    assert response.status_code == 200
    assert body["unmet_demand"] is True
    assert body["products"] == []
    assert body["message"]

def test_empty_catalog_query_is_unmet_demand(make_client):
    client = make_client(llm=FakeLanguageModel({"category": "Shoes", "price_max": 10, "confidence": 0.8}))

    response = client.post("/api/recommendations", json=request_body("shoes under 10"))

    body = response.json()
    assert body["unmet_demand"] is True
    assert body["products"] == []

def test_extraction_failure_searches_broadly(make_client):
    client = make_client(llm=FakeLanguageModel(error=RuntimeError("model unavailable")))

    response = client.post("/api/recommendations", json=request_body("something nice"))

    body = response.json()
    assert response.status_code == 200
    assert body["confidence"] == 0.0
    assert body["unmet_demand"] is False
    assert len(body["products"]) == 4

def test_api_key_is_required_when_configured(make_client):
    client = make_client(llm=FakeLanguageModel({"category": "Shoes"}), RECOMMENDATION_API_KEY="rk_live")

    missing = client.post("/api/recommendations", json=request_body())
    wrong = client.post("/api/recommendations", json=request_body(), headers={"X-API-Key": "nope"})
    valid = client.post("/api/recommendations", json=request_body(), headers={"X-API-Key": "rk_live"})

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert valid.status_code == 200

def test_request_validation(make_client):
    client = make_client()

    too_long_merchant = client.post("/api/recommendations", json=request_body(merchantId="m" * 101))
    too_long_intent = client.post("/api/recommendations", json=request_body(raw_intent="x" * 10001))
    missing_intent = client.post("/api/recommendations", json={"merchantId": "merchant_001"})
    not_json = client.post("/api/recommendations", content=b"merchantId=1",
                           headers={"Content-Type": "application/json"})

    for response in (too_long_merchant, too_long_intent, missing_intent, not_json):
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"
    assert too_long_merchant.json()["message"].startswith("merchantId")

def test_internal_error_returns_500(make_client, memory_store):
    client = make_client(llm=FakeLanguageModel({"category": "Shoes"}))

    with patch.object(memory_store, "query_products", side_effect=RuntimeError("index closed")):
        response = client.post("/api/recommendations", json=request_body())

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "message": "index closed"}

def test_internal_error_detail_hidden_in_production(make_client, memory_store):
    client = make_client(llm=FakeLanguageModel({"category": "Shoes"}), ENVIRONMENT="production")

    with patch.object(memory_store, "query_products", side_effect=RuntimeError("index closed")):
        response = client.post("/api/recommendations", json=request_body())

    assert response.status_code == 500
    assert response.json()["message"] == "Internal server error"

def test_max_recommendations_setting_keeps_ceiling_of_five(make_client, memory_store):
    memory_store.save_products("m_many", [make_product(f"shoe_{i}", "Shoes", 40 + i) for i in range(8)])
    client = make_client(llm=FakeLanguageModel({"category": "Shoes", "confidence": 0.8}), MAX_RECOMMENDATIONS=20)

    response = client.post("/api/recommendations", json={"merchantId": "m_many", "rawIntent": "shoes", "limit": 20})

    assert response.status_code == 200
    assert len(response.json()["products"]) == 5

def test_catalog_query_runs_off_the_event_loop_thread(make_client, memory_store):
    on_loop = []
    original = memory_store.query_products

    def recording_query(*args, **kwargs):
        on_loop.append(running_on_event_loop())
        return original(*args, **kwargs)

    client = make_client(llm=FakeLanguageModel({"category": "Shoes", "confidence": 0.8}))

    with patch.object(memory_store, "query_products", side_effect=recording_query):
        response = client.post("/api/recommendations", json=request_body("shoes"))

    assert response.status_code == 200
    assert on_loop == [False]
