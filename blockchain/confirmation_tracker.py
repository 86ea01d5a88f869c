"""
Confirmation Tracker
Waits for transaction receipts and block confirmations
"""

import asyncio
import time
from typing import Optional
from web3 import Web3
from web3.exceptions import TransactionNotFound
from loguru import logger

from utils.exceptions import ConfirmationTimeoutError


def format_hash(tx_hash) -> str:
    """Hex string for a transaction hash given as bytes or str"""
    if isinstance(tx_hash, str):
        return tx_hash
    return Web3.to_hex(tx_hash)


class ConfirmationTracker:
    """
    Polls the node until a transaction is mined and buried under enough blocks
    """

    def __init__(
        self,
        w3: Web3,
        poll_interval: float = 2.0,
        timeout: float = 300,
        confirmation_timeout: float = 600
    ):
        """
        Initialize Confirmation Tracker

        Args:
            w3: Web3 instance
            poll_interval: Seconds between node queries
            timeout: Default seconds to wait for a receipt
            confirmation_timeout: Default seconds to wait for confirmations
        """
        self.w3 = w3
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.confirmation_timeout = confirmation_timeout

    def confirmations(self, receipt) -> int:
        """Number of blocks including and above the receipt's block"""
        latest_block = self.w3.eth.block_number
        return max(latest_block - receipt['blockNumber'] + 1, 0)

    async def wait_for_receipt(self, tx_hash, timeout: Optional[float] = None):
        """
        Wait until the transaction is mined

        Args:
            tx_hash: Transaction hash
            timeout: Seconds to wait (None = tracker default)

        Returns:
            Transaction receipt

        Raises:
            ConfirmationTimeoutError: If not mined in time
        """
        timeout = self.timeout if timeout is None else timeout
        start_time = time.monotonic()

        while True:
            try:
                return self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                pass

            if time.monotonic() - start_time >= timeout:
                raise ConfirmationTimeoutError(
                    f"Transaction {format_hash(tx_hash)} not mined after {timeout}s"
                )

            await asyncio.sleep(self.poll_interval)

    async def wait_for_confirmations(
        self,
        tx_hash,
        confirmations: int,
        timeout: Optional[float] = None
    ):
        """
        Wait until the transaction has the requested number of confirmations

        Args:
            tx_hash: Transaction hash
            confirmations: Required confirmations (1 = mined)
            timeout: Seconds to wait (None = confirmation_timeout)

        Returns:
            Transaction receipt

        Raises:
            ConfirmationTimeoutError: If confirmations are not reached in time
        """
        timeout = self.confirmation_timeout if timeout is None else timeout
        start_time = time.monotonic()

        receipt = await self.wait_for_receipt(tx_hash, timeout)

        while True:
            current = self.confirmations(receipt)
            if current >= confirmations:
                logger.debug(f"{format_hash(tx_hash)} has {current} confirmations")
                return receipt

            if time.monotonic() - start_time >= timeout:
                raise ConfirmationTimeoutError(
                    f"Transaction {format_hash(tx_hash)} has {current}/{confirmations} "
                    f"confirmations after {timeout}s"
                )

            await asyncio.sleep(self.poll_interval)
