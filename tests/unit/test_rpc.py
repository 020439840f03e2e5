"""Unit tests for JSON-RPC helpers."""

import json

import pytest
import requests
import responses

from game_deployments.exceptions import RpcError
from game_deployments.rpc import contract_exists_on_chain, get_chain_id, get_code, rpc_call

RPC_URL = "http://test-rpc.example.com"
ADDRESS = "0x" + "11" * 20


class TestRpcCall:
    """Test the rpc_call function."""

    @responses.activate
    def test_request_format(self):
        """Test that the request is a JSON-RPC 2.0 envelope."""

        def request_callback(request):
            body = json.loads(request.body)
            assert body["jsonrpc"] == "2.0"
            assert body["method"] == "eth_getCode"
            assert body["params"] == [ADDRESS, "latest"]
            return (200, {}, json.dumps({"jsonrpc": "2.0", "id": body["id"], "result": "0x6080"}))

        responses.add_callback(
            responses.POST, RPC_URL, callback=request_callback, content_type="application/json"
        )

        assert get_code(ADDRESS, RPC_URL) == "0x6080"

    @responses.activate
    def test_rpc_error_member(self):
        """Test that an error member raises RpcError."""
        responses.add(
            responses.POST,
            RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Method not found"}},
            status=200,
        )

        with pytest.raises(RpcError, match="Method not found"):
            rpc_call(RPC_URL, "eth_nope")

    @responses.activate
    def test_http_error_status(self):
        """Test that a non-200 status raises RpcError."""
        responses.add(responses.POST, RPC_URL, body="Bad gateway", status=502)

        with pytest.raises(RpcError, match="502"):
            rpc_call(RPC_URL, "eth_chainId")

    @responses.activate
    def test_network_error(self):
        """Test that a connection failure raises RpcError."""
        responses.add(responses.POST, RPC_URL, body=requests.ConnectionError("refused"))

        with pytest.raises(RpcError, match="Network error"):
            rpc_call(RPC_URL, "eth_chainId")

    @responses.activate
    def test_missing_result(self):
        """Test that a response without result raises RpcError."""
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1}, status=200)

        with pytest.raises(RpcError):
            rpc_call(RPC_URL, "eth_chainId")

    @responses.activate
    def test_chain_id_parsed_from_hex(self):
        """Test that eth_chainId is decoded to an int."""
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": "0x7a69"})

        assert get_chain_id(RPC_URL) == 31337


class TestContractExistsOnChain:
    """Test the contract_exists_on_chain function."""

    @responses.activate
    def test_code_present(self):
        """Test that non-empty bytecode means the contract exists."""
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": "0x6080604052"})

        assert contract_exists_on_chain(ADDRESS, RPC_URL) is True

    @pytest.mark.parametrize("code", ["0x", "0x0", ""])
    @responses.activate
    def test_empty_code(self, code):
        """Test that empty bytecode means no contract."""
        responses.add(responses.POST, RPC_URL, json={"jsonrpc": "2.0", "id": 1, "result": code})

        assert contract_exists_on_chain(ADDRESS, RPC_URL) is False

    @responses.activate
    def test_rpc_failure_means_absent(self):
        """Test that an RPC failure is reported as not deployed."""
        responses.add(responses.POST, RPC_URL, status=500)

        assert contract_exists_on_chain(ADDRESS, RPC_URL) is False

    def test_missing_address(self):
        """Test that no address means no contract, without any RPC call."""
        assert contract_exists_on_chain(None, RPC_URL) is False
        assert contract_exists_on_chain("", RPC_URL) is False
