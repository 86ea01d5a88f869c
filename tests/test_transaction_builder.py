"""
Unit Tests for Deployment Transaction Building
"""

import pytest
from unittest.mock import Mock
from eth_account import Account
from web3 import Web3

from blockchain.transaction_builder import Signer, TransactionBuilder
from conftest import DEPLOYER_ADDRESS, TX_HASH


@pytest.fixture
def contract_class():
    """Mock contract class with a constructor that echoes its tx params"""
    constructor = Mock()
    constructor.estimate_gas.return_value = 1_000_000
    constructor.build_transaction.side_effect = lambda params: {**params, 'data': '0x6080'}
    constructor.transact.return_value = TX_HASH

    contract = Mock()
    contract.constructor.return_value = constructor
    return contract


@pytest.fixture
def builder(w3):
    return TransactionBuilder(w3, chain_id=1115)


class TestSigner:

    def test_unlocked_signer(self):
        signer = Signer(address=DEPLOYER_ADDRESS)

        assert not signer.is_local_key

    def test_local_key_signer(self):
        account = Account.create()
        signer = Signer(address=account.address, account=account)

        assert signer.is_local_key


class TestGasEstimation:
    """Test gas limit selection"""

    def test_applies_buffer(self, builder, contract_class):
        constructor = contract_class.constructor()

        assert builder.estimate_gas_limit(constructor, DEPLOYER_ADDRESS) == 1_200_000

    def test_falls_back_to_default(self, builder, contract_class):
        constructor = contract_class.constructor()
        constructor.estimate_gas.side_effect = ValueError("execution reverted")

        assert builder.estimate_gas_limit(constructor, DEPLOYER_ADDRESS) == 3_000_000


class TestFeeFields:
    """Test EIP-1559 vs legacy fee selection"""

    def test_eip1559_when_base_fee_present(self, w3, builder):
        w3.eth.get_block.return_value = {'baseFeePerGas': 10_000_000_000}

        fees = builder.get_fee_fields()

        tip = Web3.to_wei(1.5, 'gwei')
        assert fees == {
            'maxFeePerGas': 20_000_000_000 + tip,
            'maxPriorityFeePerGas': tip
        }

    def test_legacy_gas_price_without_base_fee(self, w3, builder):
        w3.eth.get_block.return_value = {}

        assert builder.get_fee_fields() == {'gasPrice': 30_000_000_000}


class TestBuildDeploymentTx:
    """Test unsigned deployment transaction"""

    def test_transaction_fields(self, w3, builder, contract_class):
        w3.eth.get_block.return_value = {}
        w3.eth.get_transaction_count.return_value = 7

        tx = builder.build_deployment_tx(contract_class, DEPLOYER_ADDRESS)

        assert tx['from'] == DEPLOYER_ADDRESS
        assert tx['nonce'] == 7
        assert tx['gas'] == 1_200_000
        assert tx['chainId'] == 1115
        assert tx['gasPrice'] == 30_000_000_000
        w3.eth.get_transaction_count.assert_called_once_with(DEPLOYER_ADDRESS, 'pending')
        contract_class.constructor.assert_called_with()

    def test_chain_id_from_node(self, w3, contract_class):
        w3.eth.get_block.return_value = {}
        w3.eth.get_transaction_count.return_value = 0
        builder = TransactionBuilder(w3)

        tx = builder.build_deployment_tx(contract_class, DEPLOYER_ADDRESS)

        assert tx['chainId'] == 31337

    def test_passes_constructor_args(self, w3, builder, contract_class):
        w3.eth.get_block.return_value = {}
        w3.eth.get_transaction_count.return_value = 0

        builder.build_deployment_tx(contract_class, DEPLOYER_ADDRESS, (1, 'x'))

        contract_class.constructor.assert_called_with(1, 'x')


class TestSendDeployment:
    """Test submission paths"""

    @pytest.mark.asyncio
    async def test_unlocked_account_uses_transact(self, w3, builder, contract_class):
        signer = Signer(address=DEPLOYER_ADDRESS)

        tx_hash = await builder.send_deployment(contract_class, signer)

        assert tx_hash == TX_HASH
        contract_class.constructor().transact.assert_called_once_with(
            {'from': DEPLOYER_ADDRESS, 'gas': 1_200_000}
        )
        w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_local_key_signs_and_sends_raw(self, w3, builder, contract_class):
        w3.eth.get_block.return_value = {}
        w3.eth.get_transaction_count.return_value = 0
        w3.eth.send_raw_transaction.return_value = TX_HASH

        account = Mock()
        account.sign_transaction.return_value = Mock(raw_transaction=b'signed')
        signer = Signer(address=DEPLOYER_ADDRESS, account=account)

        tx_hash = await builder.send_deployment(contract_class, signer)

        assert tx_hash == TX_HASH
        signed_tx = account.sign_transaction.call_args[0][0]
        assert signed_tx['from'] == DEPLOYER_ADDRESS
        w3.eth.send_raw_transaction.assert_called_once_with(b'signed')
