"""Tests for team, portfolio and trading endpoints."""

from __future__ import annotations

from fastapi import status
from fastapi.testclient import TestClient

from conftest import login_as_admin, login_as_team


class TestTeamReads:
    def test_access_codes_hidden_from_public(self, client: TestClient):
        teams = client.get("/teams").json()

        assert len(teams) == 32
        assert all("accessCode" not in team for team in teams)

    def test_access_codes_visible_to_admin(self, admin_client: TestClient):
        teams = admin_client.get("/teams").json()
        assert teams[0]["accessCode"] == "123456"

    def test_team_session_does_not_see_access_code(self, team_client: TestClient):
        assert "accessCode" not in team_client.get("/teams/1").json()

    def test_unknown_team(self, client: TestClient):
        assert client.get("/teams/999").status_code == status.HTTP_404_NOT_FOUND

    def test_empty_portfolio(self, client: TestClient):
        data = client.get("/teams/1/portfolio").json()

        assert data["stocks"] == []
        assert data["currencies"] == []
        assert data["startup"] is None
        assert data["totalPortfolioValue"] == "100000.00"

    def test_all_portfolios_admin_only(self, client: TestClient):
        assert client.get("/teams/portfolios").status_code == status.HTTP_401_UNAUTHORIZED

        login_as_admin(client)
        portfolios = client.get("/teams/portfolios").json()
        assert len(portfolios) == 32
        assert portfolios[0]["team"]["accessCode"] == "123456"


class TestTeamWrites:
    def test_create_team_with_default_cash(self, admin_client: TestClient):
        response = admin_client.post("/teams", json={"name": "Yeni Takım", "accessCode": "yeni1234"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["cashBalance"] == "50000.00"
        assert response.json()["accessCode"] == "yeni1234"

    def test_create_team_duplicate_code(self, admin_client: TestClient):
        response = admin_client.post("/teams", json={"name": "Kopya", "accessCode": "123456"})
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_create_team_short_code(self, admin_client: TestClient):
        response = admin_client.post("/teams", json={"name": "Kısa", "accessCode": "abc"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_team_name_trimmed(self, admin_client: TestClient):
        response = admin_client.post(
            "/teams", json={"name": "  Kartallar  ", "accessCode": "kartal99"}
        )
        assert response.json()["name"] == "Kartallar"

    def test_blank_team_name_rejected(self, admin_client: TestClient):
        created = admin_client.post("/teams", json={"name": "   ", "accessCode": "bos12345"})
        patched = admin_client.patch("/teams/2", json={"name": " "})

        assert created.status_code == status.HTTP_400_BAD_REQUEST
        assert patched.status_code == status.HTTP_400_BAD_REQUEST
        assert admin_client.get("/teams/2").json()["name"] != ""

    def test_cash_balance_beyond_limit(self, admin_client: TestClient):
        patched = admin_client.patch("/teams/2", json={"cashBalance": "1e20"})
        put = admin_client.put("/teams/2", data={"cashBalance": "1e20"})

        assert patched.status_code == status.HTTP_400_BAD_REQUEST
        assert put.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_requires_admin(self, team_client: TestClient):
        response = team_client.post("/teams", json={"name": "X", "accessCode": "xxxx"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_put_form_update(self, admin_client: TestClient):
        response = admin_client.put(
            "/teams/2", data={"name": "Ayılar", "cashBalance": "1234.5"}
        )

        data = response.json()
        assert data["name"] == "Ayılar"
        assert data["cashBalance"] == "1234.50"

    def test_patch_team(self, admin_client: TestClient):
        response = admin_client.patch("/teams/2", json={"profilePicUrl": "/uploads/p.png"})
        assert response.json()["profilePicUrl"] == "/uploads/p.png"

    def test_delete_team(self, admin_client: TestClient):
        assert admin_client.delete("/teams/32").status_code == status.HTTP_204_NO_CONTENT
        assert admin_client.get("/teams/32").status_code == status.HTTP_404_NOT_FOUND
        assert admin_client.delete("/teams/32").status_code == status.HTTP_404_NOT_FOUND


class TestStockTrading:
    """Self-service stock trades."""

    def test_buy_then_sell(self, team_client: TestClient):
        bought = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 10, "action": "buy"}
        )

        assert bought.status_code == status.HTTP_201_CREATED
        assert bought.json()["total"] == "1700.00"
        assert bought.json()["team"]["cashBalance"] == "98300.00"

        portfolio = team_client.get("/teams/1/portfolio").json()
        assert portfolio["stocks"][0]["shares"] == 10
        assert portfolio["stocks"][0]["marketValue"] == "1620.00"

        sold = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 10, "action": "sell"}
        )
        assert sold.json()["team"]["cashBalance"] == "99920.00"
        assert team_client.get("/teams/1/portfolio").json()["stocks"] == []

    def test_negative_share_count_uses_absolute_value(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": -2, "action": "buy"}
        )
        assert response.json()["shares"] == 2

    def test_zero_shares(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 0, "action": "buy"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_insufficient_funds(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 4, "shares": 30, "action": "buy"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "INSUFFICIENT_FUNDS"

    def test_insufficient_shares(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 1, "action": "sell"}
        )
        assert response.json()["error"] == "INSUFFICIENT_HOLDINGS"

    def test_trade_requires_session(self, client: TestClient):
        response = client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 1, "action": "buy"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_other_team_forbidden(self, client: TestClient):
        login_as_team(client, 2)
        response = client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 1, "action": "buy"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "TEAM_MISMATCH"

    def test_admin_may_trade_for_any_team(self, admin_client: TestClient):
        response = admin_client.post(
            "/teams/5/stocks/trade", json={"companyId": 8, "shares": 1, "action": "buy"}
        )
        assert response.status_code == status.HTTP_201_CREATED

    def test_invalid_action(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 1, "action": "hold"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_share_count_beyond_limit(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade", json={"companyId": 1, "shares": 10**27, "action": "buy"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "VALUE_OUT_OF_RANGE"

    def test_trade_value_beyond_limit(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/stocks/trade",
            json={"companyId": 1, "shares": 2_000_000_000, "action": "buy"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "VALUE_OUT_OF_RANGE"
        assert team_client.get("/teams/1").json()["cashBalance"] == "100000.00"


class TestCurrencyTrading:
    def test_buy_and_sell_currency(self, team_client: TestClient):
        bought = team_client.post(
            "/teams/1/currencies/trade", json={"currencyId": 1, "amount": "100", "action": "buy"}
        )

        assert bought.status_code == status.HTTP_201_CREATED
        assert bought.json()["total"] == "3420.00"

        sold = team_client.post(
            "/teams/1/currencies/trade", json={"currencyId": 1, "amount": "100", "action": "sell"}
        )
        assert sold.json()["team"]["cashBalance"] == "99860.00"

    def test_sell_unheld_currency(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/currencies/trade", json={"currencyId": 2, "amount": "1", "action": "sell"}
        )
        assert response.json()["error"] == "INSUFFICIENT_HOLDINGS"

    def test_amount_beyond_limit(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/currencies/trade", json={"currencyId": 1, "amount": "1e30", "action": "buy"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "VALUE_OUT_OF_RANGE"


class TestLegacyTrade:
    """Original dashboard trade endpoint."""

    def test_buy_returns_portfolio_and_summary(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/trade", json={"companyId": 2, "shares": 3, "type": "buy"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["transaction"] == {
            "type": "buy",
            "companyName": "Microsoft Corp.",
            "shares": 3,
            "price": "340.00",
            "total": "1020.00",
        }
        assert data["portfolio"]["team"]["cashBalance"] == "98980.00"
        assert data["portfolio"]["stocks"][0]["shares"] == 3

    def test_non_positive_shares_rejected(self, team_client: TestClient):
        response = team_client.post(
            "/teams/1/trade", json={"companyId": 2, "shares": 0, "type": "buy"}
        )
        assert response.json()["error"] == "VALIDATION_ERROR"
