"""
Wallet Manager
Provides the ordered signer list for the active network
"""

import os
from typing import List, Optional
from decimal import Decimal
from web3 import Web3
from eth_account import Account
from loguru import logger

from blockchain.transaction_builder import Signer
from utils.exceptions import ConfigurationError, NoSignerError
from utils.rpc_manager import NetworkConfig


def parse_private_keys(raw: Optional[str]) -> List[str]:
    """Split a comma-separated private key list, ignoring blanks"""
    if not raw:
        return []
    return [key.strip() for key in raw.split(',') if key.strip()]


class WalletManager:
    """
    Manages the signer accounts used for deployment:
    - Private keys from the network's accounts env var, in order
    - Node-unlocked accounts on hardhat / localhost when no keys are set
    """

    def __init__(self, w3: Web3, network: NetworkConfig):
        """
        Initialize wallet manager

        Args:
            w3: Web3 instance
            network: Active network configuration

        Raises:
            ConfigurationError: If a configured private key is invalid
        """
        self.w3 = w3
        self.network = network

        raw_keys = os.getenv(network.accounts_env) if network.accounts_env else None

        try:
            self.accounts = [Account.from_key(key) for key in parse_private_keys(raw_keys)]
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid private key in ${network.accounts_env}: {e}") from e

        logger.info(f"Wallet Manager initialized with {len(self.accounts)} local key(s)")

    def get_signers(self) -> List[Signer]:
        """
        Get signer accounts in configuration order

        Returns:
            List of signers (may be empty)
        """
        if self.accounts:
            return [Signer(address=account.address, account=account) for account in self.accounts]

        if self.network.is_local:
            return [Signer(address=Web3.to_checksum_address(a)) for a in self.w3.eth.accounts]

        return []

    def get_deployer(self) -> Signer:
        """
        Get the first signer

        Raises:
            NoSignerError: If no signer is configured
        """
        signers = self.get_signers()
        if not signers:
            hint = f"set ${self.network.accounts_env}" if self.network.accounts_env else "configure accounts_env"
            raise NoSignerError(f"No signer accounts for network '{self.network.name}': {hint}")
        return signers[0]

    def get_balance(self, signer: Signer) -> Decimal:
        """
        Get native balance of a signer

        Args:
            signer: Account to check

        Returns:
            Balance in ether units
        """
        balance_wei = self.w3.eth.get_balance(signer.address)
        return Decimal(str(Web3.from_wei(balance_wei, 'ether')))
