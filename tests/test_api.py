from decimal import Decimal

from conftest import auth_headers, client_with_db

from app.models import PricingTier, UserPricingTier, UserRole


def _create_rule(client, user, **overrides):
    body = {"name": "Standard", "markup_type": "PERCENTAGE", "markup_value": "20", "priority": 1}
    body.update(overrides)
    return client.post("/api/v1/markup-rules", json=body, headers=auth_headers(user))


def test_health_endpoints(db):
    with client_with_db(db) as client:
        assert client.get("/healthz").json()["status"] == "ok"
        assert client.get("/readyz").json()["status"] == "ready"


def test_pricing_requires_authentication(db):
    with client_with_db(db) as client:
        res = client.post("/api/v1/pricing/calculate", json={"volume": 10})
    assert res.status_code == 401


def test_pricing_rejects_invalid_token(db):
    with client_with_db(db) as client:
        res = client.post(
            "/api/v1/pricing/calculate",
            json={"volume": 10},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
    assert res.status_code == 401


def test_pricing_requires_reseller_role(db, make_user):
    customer = make_user(UserRole.USER)
    with client_with_db(db) as client:
        res = client.post("/api/v1/pricing/calculate", json={"volume": 10}, headers=auth_headers(customer))
    assert res.status_code == 403


def test_inactive_user_is_rejected(db, make_user):
    dormant = make_user(UserRole.RESELLER, is_active=False)
    with client_with_db(db) as client:
        res = client.get("/api/v1/markup-rules", headers=auth_headers(dormant))
    assert res.status_code == 401


def test_calculate_with_rule(db, reseller):
    with client_with_db(db) as client:
        assert _create_rule(client, reseller).status_code == 201
        res = client.post(
            "/api/v1/pricing/calculate",
            json={"volume": 500, "base_cost": "0.01"},
            headers=auth_headers(reseller),
        )
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["client_price"]) == Decimal("0.012")
    assert Decimal(body["profit"]) == Decimal("0.002")
    assert body["markup_type"] == "PERCENTAGE"
    assert body["markup_rule_name"] == "Standard"


def test_calculate_rejects_non_positive_volume(db, reseller):
    with client_with_db(db) as client:
        res = client.post("/api/v1/pricing/calculate", json={"volume": 0}, headers=auth_headers(reseller))
    assert res.status_code == 400


def test_pricing_test_echoes_parameters(db, reseller):
    with client_with_db(db) as client:
        res = client.post(
            "/api/v1/pricing/test",
            json={"volume": 20, "country_code": "GH"},
            headers=auth_headers(reseller),
        )
    assert res.status_code == 200
    body = res.json()
    assert body["test_parameters"]["country_code"] == "GH"
    assert body["result"]["markup_rule_id"] is None


def test_bulk_calculate(db, reseller):
    with client_with_db(db) as client:
        res = client.post(
            "/api/v1/pricing/bulk-calculate",
            json={"volumes": [100, 200]},
            headers=auth_headers(reseller),
        )
        empty = client.post("/api/v1/pricing/bulk-calculate", json={"volumes": []}, headers=auth_headers(reseller))
    assert res.status_code == 200
    assert res.json()["total_volume"] == 300
    assert len(res.json()["bulk_pricing"]) == 2
    assert empty.status_code == 400


def test_markup_rule_crud(db, reseller):
    headers = auth_headers(reseller)
    with client_with_db(db) as client:
        created = _create_rule(client, reseller)
        rule_id = created.json()["id"]
        assert created.json()["kind"] == "MARKUP"

        duplicate = _create_rule(client, reseller)
        assert duplicate.status_code == 409

        updated = client.put(f"/api/v1/markup-rules/{rule_id}", json={"priority": 8}, headers=headers)
        assert updated.status_code == 200
        assert updated.json()["priority"] == 8
        assert updated.json()["name"] == "Standard"

        listed = client.get("/api/v1/markup-rules", headers=headers)
        assert [item["id"] for item in listed.json()] == [rule_id]

        deleted = client.delete(f"/api/v1/markup-rules/{rule_id}", headers=headers)
        assert deleted.json()["success"] is True
        missing = client.delete(f"/api/v1/markup-rules/{rule_id}", headers=headers)
        assert missing.status_code == 404


def test_markup_rule_validation(db, reseller):
    with client_with_db(db) as client:
        res = _create_rule(client, reseller, markup_value="1500")
    assert res.status_code == 400


def test_pricing_tiers_endpoint(db, reseller):
    headers = auth_headers(reseller)
    with client_with_db(db) as client:
        created = client.post(
            "/api/v1/pricing/tiers",
            json={"name": "Gold", "min_volume": 1000, "discount_percentage": "10"},
            headers=headers,
        )
        _create_rule(client, reseller)
        tiers = client.get("/api/v1/pricing/tiers", headers=headers)
    assert created.status_code == 201
    assert created.json()["kind"] == "VOLUME_TIER"
    assert [tier["name"] for tier in tiers.json()] == ["Gold"]


def test_distribute_endpoint_credits_wallet(db, reseller):
    headers = auth_headers(reseller)
    with client_with_db(db) as client:
        _create_rule(client, reseller)
        res = client.post(
            "/api/v1/balance/distribute",
            json={"arkesel_credits": "1000", "distribution_type": "MANUAL"},
            headers=headers,
        )
        wallet = client.get("/api/v1/wallet/me", headers=headers)
        history = client.get("/api/v1/balance/distributions", headers=headers)
        transactions = client.get("/api/v1/wallet/transactions", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["reseller_credits"]) == Decimal("800")
    assert Decimal(body["conversion_rate"]) == Decimal("0.8")
    assert body["transaction"]["entry_type"] == "credit"
    assert Decimal(wallet.json()["balance"]) == Decimal("800")
    assert history.json()["total"] == 1
    assert len(transactions.json()) == 1


def test_distribute_endpoint_rejects_zero(db, reseller):
    with client_with_db(db) as client:
        res = client.post(
            "/api/v1/balance/distribute",
            json={"upstream_credits": "0"},
            headers=auth_headers(reseller),
        )
    assert res.status_code == 400


def test_distribute_endpoint_accepts_camel_case_body(db, reseller):
    with client_with_db(db) as client:
        res = client.post(
            "/api/v1/balance/distribute",
            json={"arkeselCredits": "200", "distributionType": "AUTOMATIC"},
            headers=auth_headers(reseller),
        )
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["reseller_credits"]) == Decimal("170")
    assert body["transaction"]["details"]["distribution_type"] == "AUTOMATIC"


def test_upstream_balance_in_test_mode(db, reseller):
    with client_with_db(db) as client:
        res = client.get("/api/v1/balance/upstream", headers=auth_headers(reseller))
    assert res.status_code == 200
    assert Decimal(res.json()["balance"]) == Decimal("1000")


def test_auto_recharge_and_auto_distribute(db, reseller):
    headers = auth_headers(reseller)
    with client_with_db(db) as client:
        default = client.get("/api/v1/balance/auto-recharge", headers=headers)
        assert default.json()["auto_recharge"] is False

        skipped = client.post("/api/v1/balance/auto-distribute", headers=headers)
        assert skipped.json() == {
            "performed": False,
            "reason": "Auto-distribution not enabled",
            "upstream_balance": None,
            "upstream_credits": None,
            "reseller_credits": None,
            "conversion_rate": None,
            "transaction": None,
        }

        saved = client.put(
            "/api/v1/balance/auto-recharge",
            json={"auto_recharge": True, "auto_recharge_amount": "100", "auto_recharge_threshold": "500"},
            headers=headers,
        )
        assert saved.status_code == 200

        performed = client.post("/api/v1/balance/auto-distribute", headers=headers)
    body = performed.json()
    assert body["performed"] is True
    # Simulated upstream balance of 1000 clears the threshold; default markup 15%.
    assert Decimal(body["reseller_credits"]) == Decimal("85")


def test_analytics_and_recommendations(db, reseller):
    headers = auth_headers(reseller)
    with client_with_db(db) as client:
        analytics = client.get("/api/v1/pricing/analytics?days=7", headers=headers)
        recommendations = client.get("/api/v1/pricing/recommendations", headers=headers)
    assert analytics.json()["period"] == "7 days"
    assert Decimal(analytics.json()["total_profit"]) == Decimal("0")
    types = [item["type"] for item in recommendations.json()["recommendations"]]
    assert "SETUP" in types


def test_analytics_window_is_bounded(db, reseller):
    with client_with_db(db) as client:
        res = client.get("/api/v1/pricing/analytics?days=1000000", headers=auth_headers(reseller))
    assert res.status_code == 400


def test_admin_assigns_pricing_tier(db, make_user, reseller):
    admin = make_user(UserRole.ADMIN)
    with client_with_db(db) as client:
        forbidden = client.put(
            f"/api/v1/admin/users/{reseller.id}/pricing-tier",
            json={"tier": "PREMIUM"},
            headers=auth_headers(reseller),
        )
        res = client.put(
            f"/api/v1/admin/users/{reseller.id}/pricing-tier",
            json={"tier": "PREMIUM"},
            headers=auth_headers(admin),
        )
        priced = client.post(
            "/api/v1/pricing/calculate",
            json={"volume": 10, "base_cost": "0.01"},
            headers=auth_headers(reseller),
        )
    assert forbidden.status_code == 403
    assert res.status_code == 200
    assert res.json()["tier"] == "PREMIUM"
    assert db.query(UserPricingTier).filter(UserPricingTier.user_id == reseller.id).one().tier == PricingTier.PREMIUM
    assert Decimal(priced.json()["client_price"]) == Decimal("0.0125")


def test_admin_custom_markup_requires_custom_tier(db, make_user, reseller):
    admin = make_user(UserRole.ADMIN)
    with client_with_db(db) as client:
        res = client.put(
            f"/api/v1/admin/users/{reseller.id}/pricing-tier",
            json={"tier": "STANDARD", "custom_default_markup": "12"},
            headers=auth_headers(admin),
        )
    assert res.status_code == 400
