"""Unit tests for the ledger HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from dex import __version__
from dex.api.endpoints import get_ledger, get_token_bank
from dex.api.main import ERROR_STATUS, app
from dex.errors import InvariantViolation, LedgerError, ReentrancyError
from tests.helpers import ALICE, BOB, TOKEN_A, TOKEN_B, TOKEN_C

# Account the bank never funded
NOBODY = "0x" + "dd" * 20


@pytest.fixture
def client(ledger, bank):
    """Test client wired to the test ledger and bank."""
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_token_bank] = lambda: bank
    yield TestClient(app)
    app.dependency_overrides.clear()


def add_liquidity(client, amount_a="100", amount_b="400", provider=ALICE, asset_a=TOKEN_A, asset_b=TOKEN_B):
    return client.post(
        "/liquidity/add",
        json={
            "assetA": asset_a,
            "assetB": asset_b,
            "amountA": amount_a,
            "amountB": amount_b,
            "provider": provider,
        },
    )


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestLiquidityEndpoints:
    """Tests for deposits and withdrawals over HTTP."""

    def test_add_liquidity(self, client, ledger):
        response = add_liquidity(client)

        assert response.status_code == 200
        assert response.json() == {"shares": "200"}
        assert ledger.get_reserves(TOKEN_A, TOKEN_B) == (100, 400)

    def test_get_pool(self, client):
        add_liquidity(client)

        response = client.get(f"/pools/{TOKEN_B}/{TOKEN_A}")

        assert response.status_code == 200
        assert response.json() == {
            "token0": TOKEN_A,
            "token1": TOKEN_B,
            "reserve0": "100",
            "reserve1": "400",
            "totalShares": "200",
        }

    def test_get_unknown_pool_is_empty(self, client):
        response = client.get(f"/pools/{TOKEN_A}/{TOKEN_C}")

        assert response.status_code == 200
        assert response.json()["reserve0"] == "0"
        assert response.json()["totalShares"] == "0"

    def test_list_pools(self, client):
        add_liquidity(client)
        add_liquidity(client, "9", "16", asset_b=TOKEN_C)

        pools = client.get("/pools").json()["pools"]

        assert [(pool["token0"], pool["token1"]) for pool in pools] == [(TOKEN_A, TOKEN_B), (TOKEN_A, TOKEN_C)]

    def test_get_share(self, client):
        add_liquidity(client)

        response = client.get(f"/pools/{TOKEN_A}/{TOKEN_B}/shares/{ALICE}")

        assert response.json() == {"provider": ALICE, "shares": "200"}

    def test_remove_liquidity(self, client):
        add_liquidity(client)

        response = client.post(
            "/liquidity/remove",
            json={"assetA": TOKEN_B, "assetB": TOKEN_A, "shares": "50", "provider": ALICE},
        )

        assert response.status_code == 200
        assert response.json() == {"amountA": "100", "amountB": "25"}


class TestSwapEndpoints:
    """Tests for quoting and swapping over HTTP."""

    def test_quote(self, client):
        add_liquidity(client)

        response = client.get("/quote", params={"asset_in": TOKEN_A, "asset_out": TOKEN_B, "amount_in": 10})

        assert response.status_code == 200
        assert response.json() == {"amountOut": "36"}

    def test_swap(self, client, bank):
        add_liquidity(client)

        response = client.post(
            "/swap",
            json={"assetIn": TOKEN_A, "assetOut": TOKEN_B, "amountIn": "10", "minAmountOut": "30", "trader": BOB},
        )

        assert response.status_code == 200
        assert response.json() == {"amountOut": "36"}
        assert client.get(f"/pools/{TOKEN_A}/{TOKEN_B}").json()["reserve1"] == "364"


class TestTokenEndpoints:
    """Tests for the development faucet."""

    def test_mint_and_balance(self, client):
        response = client.post(f"/tokens/{TOKEN_A}/mint", json={"account": NOBODY, "amount": "1000"})

        assert response.status_code == 200
        assert response.json() == {"asset": TOKEN_A, "account": NOBODY, "balance": "1000"}
        assert client.get(f"/tokens/{TOKEN_A}/balances/{NOBODY}").json()["balance"] == "1000"

    def test_minted_funds_are_usable(self, client):
        client.post(f"/tokens/{TOKEN_A}/mint", json={"account": NOBODY, "amount": "100"})
        client.post(f"/tokens/{TOKEN_B}/mint", json={"account": NOBODY, "amount": "400"})

        assert add_liquidity(client, provider=NOBODY).json() == {"shares": "200"}


class TestErrorResponses:
    """Tests for mapping ledger errors to HTTP statuses."""

    def test_identical_assets_400(self, client):
        response = add_liquidity(client, asset_b=TOKEN_A)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"

    def test_zero_amount_400(self, client):
        assert add_liquidity(client, amount_a="0").status_code == 400

    def test_ratio_mismatch_409(self, client):
        add_liquidity(client)

        response = add_liquidity(client, "50", "150", provider=BOB)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "RatioMismatch"
        assert body["detail"]

    def test_swap_without_pool_409(self, client):
        response = client.post(
            "/swap", json={"assetIn": TOKEN_A, "assetOut": TOKEN_B, "amountIn": "10", "trader": BOB}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "InsufficientLiquidity"

    def test_slippage_409(self, client):
        add_liquidity(client)

        response = client.post(
            "/swap",
            json={"assetIn": TOKEN_A, "assetOut": TOKEN_B, "amountIn": "10", "minAmountOut": "37", "trader": BOB},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "SlippageExceeded"

    def test_redeem_without_shares_409(self, client):
        response = client.post(
            "/liquidity/remove",
            json={"assetA": TOKEN_A, "assetB": TOKEN_B, "shares": "1", "provider": BOB},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "InsufficientShares"

    def test_unfunded_provider_502(self, client):
        response = add_liquidity(client, provider=NOBODY)

        assert response.status_code == 502
        assert response.json()["error"] == "TransferFailure"

    @pytest.mark.parametrize("amount", ["-5", "abc", str(2**256)])
    def test_malformed_amount_422(self, client, amount):
        assert add_liquidity(client, amount_a=amount).status_code == 422

    def test_malformed_identifier_422(self, client):
        assert add_liquidity(client, asset_a="not-an-asset").status_code == 422

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [(InvariantViolation("shares drifted"), 500), (ReentrancyError("pool locked"), 409)],
    )
    def test_error_from_ledger(self, client, error, status_code):
        """Errors raised anywhere in the ledger use the shared mapping."""

        class BrokenLedger:
            def list_pools(self):
                raise error

        app.dependency_overrides[get_ledger] = lambda: BrokenLedger()

        response = client.get("/pools")

        assert response.status_code == status_code
        assert response.json() == {"error": type(error).__name__, "detail": str(error)}

    def test_every_error_mapped(self):
        mapped = set(ERROR_STATUS)
        assert mapped == set(LedgerError.__subclasses__())
