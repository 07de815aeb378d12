"""Integration tests for the HTTP service."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from kdex.api.endpoints import get_deployment
from kdex.api.main import app
from kdex.chain import Context
from kdex.deployment import Deployment
from kdex.ilp import encode_perform_data
from kdex.tokens import ERC20
from tests.helpers import E18, OTHER, OWNER, TREASURY, UPKEEP_CALLER, WALLET, add_liquidity


@pytest.fixture
def served(deployment: Deployment, configured_manager, pair) -> Deployment:
    """Deployment with a funded 10/10 pair and 3e18/1e18 of accumulated fees."""
    add_liquidity(pair, WALLET, 10 * E18, 10 * E18)
    configured_manager.set_threshold_value(Context(OWNER), E18)
    as_pair = Context(pair.address)
    for token, amount in ((pair.token0, 3 * E18), (pair.token1, E18)):
        funder = deployment.chain.get(token, ERC20)
        funder.transfer(Context(WALLET), configured_manager.address, amount)
        configured_manager.deposit_fee(as_pair, token, amount)
    return deployment


@pytest.fixture
def client(served: Deployment) -> Iterator[TestClient]:
    """Test client serving the prepared deployment."""
    app.dependency_overrides[get_deployment] = lambda: served
    yield TestClient(app)
    app.dependency_overrides.clear()


def perform_data_hex(address: str) -> str:
    return "0x" + encode_perform_data(address).hex()


class TestReadEndpoints:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_get_pair(self, client, pair):
        response = client.get(f"/pairs/{pair.address}")
        assert response.status_code == 200
        body = response.json()
        assert body["address"] == pair.address
        assert body["reserve0"] == str(10 * E18)
        assert body["reserve1"] == str(10 * E18)
        assert body["totalSupply"] == str(10 * E18)
        assert body["isIlpFeeActive"] is False
        assert body["ilpFeeRateToken0In"] == 0

    def test_get_unknown_pair(self, client):
        response = client.get(f"/pairs/{OTHER}")
        assert response.status_code == 404
        assert "PAIR_NOT_FOUND" in response.json()["detail"]

    def test_get_fees(self, client, pair):
        response = client.get(f"/pairs/{pair.address}/fees")
        assert response.status_code == 200
        assert response.json()["fee0"] == str(3 * E18)
        assert response.json()["fee1"] == str(E18)

    def test_check_upkeep(self, client, pair):
        response = client.get(f"/upkeep/{pair.address}")
        assert response.status_code == 200
        body = response.json()
        assert body["upkeepNeeded"] is True
        assert body["performData"] == perform_data_hex(pair.address)


class TestPerformUpkeep:
    def test_perform_upkeep(self, client, served, pair):
        response = client.post(
            "/upkeep",
            json={"caller": UPKEEP_CALLER, "performData": perform_data_hex(pair.address)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "executed"
        assert body["swapped"] is True
        assert body["liquidity"] == "825000000000000000"
        assert pair.balance_of(TREASURY) == 825000000000000000

        fees = client.get(f"/pairs/{pair.address}/fees").json()
        assert (fees["fee0"], fees["fee1"]) == ("0", "0")

    def test_no_op_upkeep(self, client, pair):
        data = perform_data_hex(pair.address)
        client.post("/upkeep", json={"caller": UPKEEP_CALLER, "performData": data})
        response = client.post("/upkeep", json={"caller": UPKEEP_CALLER, "performData": data})
        assert response.status_code == 200
        assert response.json()["status"] == "no_fees"
        assert response.json()["liquidity"] == "0"

    def test_forbidden_caller(self, client, pair):
        response = client.post(
            "/upkeep",
            json={"caller": OTHER, "performData": perform_data_hex(pair.address)},
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "ILPManager: FORBIDDEN"

    def test_unknown_pair(self, client):
        response = client.post(
            "/upkeep",
            json={"caller": UPKEEP_CALLER, "performData": perform_data_hex(OTHER)},
        )
        assert response.status_code == 404

    def test_undecodable_perform_data(self, client):
        response = client.post("/upkeep", json={"caller": UPKEEP_CALLER, "performData": "0x01"})
        assert response.status_code == 409
        assert "INVALID_PERFORM_DATA" in response.json()["detail"]

    def test_malformed_hex(self, client):
        response = client.post("/upkeep", json={"caller": UPKEEP_CALLER, "performData": "0x123"})
        assert response.status_code == 422

    def test_invalid_caller_address(self, client, pair):
        response = client.post(
            "/upkeep",
            json={"caller": "not-an-address", "performData": perform_data_hex(pair.address)},
        )
        assert response.status_code == 422

    def test_request_too_large(self, client):
        response = client.post(
            "/upkeep",
            content=b" " * (2 * 1024 * 1024),
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 413
