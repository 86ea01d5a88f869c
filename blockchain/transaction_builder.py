"""
Transaction Builder
Constructs, signs and submits contract deployment transactions
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
from web3 import Web3
from eth_account.signers.local import LocalAccount
from loguru import logger


@dataclass(frozen=True)
class Signer:
    """
    Account that authorizes and pays for transactions

    Without a local account the address must be unlocked on the node
    (hardhat / localhost development accounts).
    """

    address: str
    account: Optional[LocalAccount] = None

    @property
    def is_local_key(self) -> bool:
        return self.account is not None


class TransactionBuilder:
    """
    Builds deployment transactions with gas estimation and fee selection
    """

    def __init__(
        self,
        w3: Web3,
        chain_id: Optional[int] = None,
        gas_buffer: float = 1.2,
        default_gas_limit: int = 3_000_000,
        priority_fee_gwei: float = 1.5
    ):
        """
        Initialize Transaction Builder

        Args:
            w3: Web3 instance
            chain_id: Chain ID to sign for (None = ask the node)
            gas_buffer: Multiplier applied to the gas estimate
            default_gas_limit: Gas limit used when estimation fails
            priority_fee_gwei: EIP-1559 tip
        """
        self.w3 = w3
        self.chain_id = chain_id
        self.gas_buffer = gas_buffer
        self.default_gas_limit = default_gas_limit
        self.priority_fee_gwei = priority_fee_gwei

    def _get_chain_id(self) -> int:
        if self.chain_id is None:
            self.chain_id = self.w3.eth.chain_id
        return self.chain_id

    def estimate_gas_limit(self, constructor, sender: str) -> int:
        """
        Estimate gas for a constructor call

        Args:
            constructor: Bound ContractConstructor
            sender: Deployer address

        Returns:
            Buffered gas limit
        """
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            return int(gas_estimate * self.gas_buffer)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            return self.default_gas_limit

    def get_fee_fields(self) -> Dict[str, int]:
        """
        Select EIP-1559 or legacy fee fields from the latest block

        Returns:
            Fee fields for the transaction dict
        """
        latest = self.w3.eth.get_block('latest')
        base_fee = latest.get('baseFeePerGas')

        if base_fee is None:
            gas_price = self.w3.eth.gas_price
            logger.info(f"Gas price: {Web3.from_wei(gas_price, 'gwei')} gwei")
            return {'gasPrice': gas_price}

        max_priority = Web3.to_wei(self.priority_fee_gwei, 'gwei')
        max_fee = base_fee * 2 + max_priority
        logger.info(
            f"Max fee: {Web3.from_wei(max_fee, 'gwei')} gwei "
            f"(priority {self.priority_fee_gwei} gwei)"
        )
        return {
            'maxFeePerGas': max_fee,
            'maxPriorityFeePerGas': max_priority,
        }

    def build_deployment_tx(self, contract_class, sender: str, constructor_args: Sequence[Any] = ()) -> Dict:
        """
        Build an unsigned deployment transaction

        Args:
            contract_class: Contract class from w3.eth.contract(abi=..., bytecode=...)
            sender: Deployer address
            constructor_args: Constructor arguments

        Returns:
            Transaction dict
        """
        constructor = contract_class.constructor(*constructor_args)
        gas_limit = self.estimate_gas_limit(constructor, sender)

        logger.info(f"Gas limit: {gas_limit}")

        tx_params = {
            'from': sender,
            'nonce': self.w3.eth.get_transaction_count(sender, 'pending'),
            'gas': gas_limit,
            'chainId': self._get_chain_id(),
            **self.get_fee_fields(),
        }

        return constructor.build_transaction(tx_params)

    async def send_deployment(self, contract_class, signer: Signer, constructor_args: Sequence[Any] = ()):
        """
        Submit a deployment transaction

        Args:
            contract_class: Contract class to deploy
            signer: Deployer
            constructor_args: Constructor arguments

        Returns:
            Transaction hash
        """
        if not signer.is_local_key:
            # Node-managed account, let the node fill nonce and fees
            constructor = contract_class.constructor(*constructor_args)
            gas_limit = self.estimate_gas_limit(constructor, signer.address)
            return constructor.transact({'from': signer.address, 'gas': gas_limit})

        transaction = self.build_deployment_tx(contract_class, signer.address, constructor_args)

        logger.info("Signing transaction...")
        signed_tx = signer.account.sign_transaction(transaction)

        logger.info("Sending deployment transaction...")
        return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
