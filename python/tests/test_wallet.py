"""
钱包客户端测试
"""

import pytest
from unittest.mock import Mock

from erc_indexer.blockchain.wallet import WalletClient, WalletRPCError, get_wallet_client


ACCOUNT = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"


def rpc_result(result):
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def rpc_error(code, message):
    return {"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}}


class TestWalletClient:
    """测试钱包操作"""

    @pytest.fixture
    def provider(self):
        return Mock()

    @pytest.fixture
    def wallet(self, provider):
        return WalletClient(provider, network="testnet")

    def test_get_balance(self, wallet, provider):
        provider.make_request.return_value = rpc_result("0x1bc16d674ec80000")

        assert wallet.get_balance(ACCOUNT) == {"balance": "0x1bc16d674ec80000"}
        provider.make_request.assert_called_once_with("eth_getBalance", [ACCOUNT, "latest"])

    def test_get_balance_error_is_returned(self, wallet, provider):
        provider.make_request.side_effect = ConnectionError("provider offline")

        result = wallet.get_balance(ACCOUNT)

        assert isinstance(result["err"], ConnectionError)

    def test_get_current_chain_id(self, wallet, provider):
        provider.make_request.return_value = rpc_result("0x128")
        assert wallet.get_current_chain_id() == {"current_chain_id": "0x128"}

    def test_request_accounts(self, wallet, provider):
        provider.make_request.return_value = rpc_result([ACCOUNT])
        assert wallet.request_accounts() == {"accounts": [ACCOUNT]}

    def test_request_accounts_rejected(self, wallet, provider):
        provider.make_request.return_value = rpc_error(4001, "User rejected the request.")

        err = wallet.request_accounts()["err"]

        assert isinstance(err, WalletRPCError)
        assert err.code == 4001

    def test_add_network_default_params(self, wallet, provider):
        provider.make_request.return_value = rpc_result(None)

        assert wallet.add_network() == {"err": None}

        method, params = provider.make_request.call_args[0]
        assert method == "wallet_addEthereumChain"
        assert params[0]["chainId"] == "0x128"
        assert params[0]["nativeCurrency"]["symbol"] == "HBAR"

    def test_switch_network(self, wallet, provider):
        provider.make_request.return_value = rpc_result(None)

        assert wallet.switch_network() == {"err": None}
        provider.make_request.assert_called_once_with(
            "wallet_switchEthereumChain", [{"chainId": "0x128"}]
        )

    def test_switch_network_adds_unknown_chain(self, wallet, provider):
        provider.make_request.side_effect = [
            rpc_error(4902, "Unrecognized chain ID"),
            rpc_result(None),
        ]

        assert wallet.switch_network() == {"err": None}
        assert provider.make_request.call_args_list[1][0][0] == "wallet_addEthereumChain"

    def test_switch_network_adds_requested_chain(self, wallet, provider):
        provider.make_request.side_effect = [
            rpc_error(4902, "Unrecognized chain ID"),
            rpc_result(None),
        ]

        assert wallet.switch_network("0x127") == {"err": None}

        method, params = provider.make_request.call_args_list[1][0]
        assert method == "wallet_addEthereumChain"
        assert params[0]["chainId"] == "0x127"
        assert params[0]["chainName"] == "Hedera Mainnet"

    def test_switch_network_unknown_chain_is_not_added(self, wallet, provider):
        provider.make_request.return_value = rpc_error(4902, "Unrecognized chain ID")

        result = wallet.switch_network("0x1")

        assert result["err"].code == 4902
        assert provider.make_request.call_count == 1

    def test_switch_network_other_error(self, wallet, provider):
        provider.make_request.return_value = rpc_error(4001, "User rejected the request.")

        result = wallet.switch_network("0x127")

        assert result["err"].code == 4001
        assert provider.make_request.call_count == 1

    def test_unknown_network(self, provider):
        with pytest.raises(ValueError):
            WalletClient(provider, network="ropsten")


def test_get_wallet_client_without_url():
    assert get_wallet_client("") == {"err": "!HEDERA"}


def test_get_wallet_client():
    result = get_wallet_client("http://127.0.0.1:7546", network="local")

    assert isinstance(result["wallet"], WalletClient)
    assert result["wallet"].network == "local"
