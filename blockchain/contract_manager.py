"""
Contract Manager
Resolves compiled contracts into deployable factories
"""

from pathlib import Path
from typing import Any, Optional, Union
from web3 import Web3
from loguru import logger

from utils.artifacts import ContractArtifact, load_artifact
from utils.exceptions import DeploymentError, TransactionRevertedError

from .confirmation_tracker import ConfirmationTracker, format_hash
from .transaction_builder import Signer, TransactionBuilder


class DeployedContract:
    """
    Handle on a submitted deployment transaction

    The address becomes available once wait_for_deployment() has seen the receipt.
    """

    def __init__(
        self,
        w3: Web3,
        artifact: ContractArtifact,
        tx_hash,
        tracker: ConfirmationTracker
    ):
        self.w3 = w3
        self.artifact = artifact
        self.deployment_transaction = tx_hash
        self.tracker = tracker
        self.receipt = None
        self._address: Optional[str] = None

    @property
    def address(self) -> str:
        if self._address is None:
            raise DeploymentError(
                f"{self.artifact.contract_name} deployment "
                f"{format_hash(self.deployment_transaction)} has not been mined yet"
            )
        return self._address

    @property
    def contract(self):
        """Contract instance bound to the deployed address"""
        return self.w3.eth.contract(address=self.address, abi=self.artifact.abi)

    async def wait_for_deployment(self) -> "DeployedContract":
        """
        Wait for the deployment transaction to be mined

        Returns:
            self, with address and receipt populated

        Raises:
            TransactionRevertedError: If the transaction failed on-chain
            DeploymentError: If the receipt carries no contract address
        """
        receipt = await self.tracker.wait_for_receipt(self.deployment_transaction)

        if receipt['status'] != 1:
            raise TransactionRevertedError(
                f"Deployment of {self.artifact.contract_name} reverted "
                f"(tx {format_hash(self.deployment_transaction)})"
            )

        contract_address = receipt.get('contractAddress')
        if not contract_address:
            raise DeploymentError(
                f"Receipt for {format_hash(self.deployment_transaction)} has no contract address"
            )

        self.receipt = receipt
        self._address = Web3.to_checksum_address(contract_address)

        logger.info(f"Block: {receipt['blockNumber']}, gas used: {receipt.get('gasUsed')}")
        return self

    async def wait(self, confirmations: int = 1):
        """
        Wait for a number of confirmations of the deployment transaction

        Args:
            confirmations: Required confirmations

        Returns:
            Transaction receipt
        """
        return await self.tracker.wait_for_confirmations(
            self.deployment_transaction,
            confirmations
        )


class ContractFactory:
    """
    Deploys one compiled contract
    """

    def __init__(
        self,
        w3: Web3,
        artifact: ContractArtifact,
        tx_builder: TransactionBuilder,
        tracker: ConfirmationTracker
    ):
        artifact.ensure_deployable()

        self.w3 = w3
        self.artifact = artifact
        self.tx_builder = tx_builder
        self.tracker = tracker
        self.contract_class = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

    async def deploy(self, signer: Signer, *constructor_args: Any) -> DeployedContract:
        """
        Submit the deployment transaction

        Args:
            signer: Deployer
            *constructor_args: Constructor arguments

        Returns:
            DeployedContract (not yet mined)
        """
        tx_hash = await self.tx_builder.send_deployment(
            self.contract_class,
            signer,
            constructor_args
        )

        logger.info(f"Transaction sent: {format_hash(tx_hash)}")
        return DeployedContract(self.w3, self.artifact, tx_hash, self.tracker)


class ContractManager:
    """
    Looks up Hardhat artifacts and builds contract factories
    """

    def __init__(
        self,
        w3: Web3,
        artifacts_dir: Union[Path, str],
        tx_builder: TransactionBuilder,
        tracker: ConfirmationTracker
    ):
        """
        Initialize Contract Manager

        Args:
            w3: Web3 instance
            artifacts_dir: Hardhat artifacts root
            tx_builder: Transaction builder for deployments
            tracker: Confirmation tracker for receipts
        """
        self.w3 = w3
        self.artifacts_dir = Path(artifacts_dir)
        self.tx_builder = tx_builder
        self.tracker = tracker

    def get_contract_factory(self, name: str) -> ContractFactory:
        """
        Get a deployable factory by contract name

        Args:
            name: Bare or fully qualified contract name

        Returns:
            ContractFactory

        Raises:
            ArtifactNotFoundError: If the artifact cannot be resolved
            InvalidArtifactError: If the artifact is not deployable
        """
        artifact = load_artifact(self.artifacts_dir, name)
        logger.debug(f"Loaded {artifact.fully_qualified_name} from {artifact.path}")
        return ContractFactory(self.w3, artifact, self.tx_builder, self.tracker)
