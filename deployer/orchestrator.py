"""
Deployment Orchestrator
Deploys the contract, records it, and verifies it on public networks
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple
from loguru import logger

from blockchain.transaction_builder import Signer
from utils.exceptions import NoSignerError
from utils.rpc_manager import LOCAL_NETWORKS
from utils.verification import verify_contract

from .deployment_record import DEFAULT_OUTPUT_FILE, DeploymentRecord


@dataclass
class DeployConfig:
    """Everything a deployment run needs to know up front"""

    network: str
    contract_name: str = "Crowdfund"
    network_display_name: Optional[str] = None
    output_path: Path = Path(DEFAULT_OUTPUT_FILE)
    local_networks: Tuple[str, ...] = LOCAL_NETWORKS
    verification_confirmations: int = 6
    constructor_args: List[Any] = field(default_factory=list)

    @property
    def is_local(self) -> bool:
        return self.network in self.local_networks


class DeploymentOrchestrator:
    """
    Runs one deployment:
    factory -> deploy -> mined -> record -> (confirmations -> verify)

    Every failure propagates except verification, which is logged and skipped.
    """

    def __init__(
        self,
        config: DeployConfig,
        contract_manager,
        signers: Sequence[Signer],
        verifier=None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize Deployment Orchestrator

        Args:
            config: Deployment settings
            contract_manager: Provides get_contract_factory(name)
            signers: Ordered signers, the first one deploys
            verifier: Provides async verify(address, constructor_args)
            clock: Returns the deployment timestamp (defaults to now, UTC)
        """
        self.config = config
        self.contract_manager = contract_manager
        self.signers = list(signers)
        self.verifier = verifier
        self.clock = clock

    def _deployer(self) -> Signer:
        if not self.signers:
            raise NoSignerError(f"No signer accounts configured for network '{self.config.network}'")
        return self.signers[0]

    async def deploy(self) -> DeploymentRecord:
        """
        Deploy the configured contract

        Returns:
            DeploymentRecord that was written to disk
        """
        config = self.config
        display_name = config.network_display_name or config.network

        logger.info(f"Deploying {config.contract_name} contract to {display_name}...")

        factory = self.contract_manager.get_contract_factory(config.contract_name)
        deployer = self._deployer()

        logger.info("Deploying contract...")
        contract = await factory.deploy(deployer, *config.constructor_args)

        await contract.wait_for_deployment()

        contract_address = contract.address
        logger.success(f"{config.contract_name} contract deployed to: {contract_address}")

        now = self.clock() if self.clock else None
        record = DeploymentRecord.create(
            contract_address=contract_address,
            network=config.network,
            deployer=deployer.address,
            now=now,
        )
        record.save(config.output_path)

        logger.info(f"Deployment info saved to {config.output_path}")
        logger.info(f"Contract deployed by: {record.deployer}")
        logger.info(f"Network: {config.network}")

        if not config.is_local:
            await self._confirm_and_verify(contract, contract_address)

        return record

    async def _confirm_and_verify(self, contract, contract_address: str):
        """Wait for confirmations (fatal on failure), then verify (tolerated)"""
        logger.info("Waiting for block confirmations...")
        await contract.wait(self.config.verification_confirmations)

        logger.info("Verifying contract...")
        result = await verify_contract(self.verifier, contract_address, self.config.constructor_args)

        if result.success:
            logger.success("Contract verified successfully!")
            if result.url:
                logger.info(f"Source: {result.url}")
        else:
            logger.warning(f"Contract verification failed: {result.message}")


async def deploy(
    config: DeployConfig,
    contract_manager,
    signers: Sequence[Signer],
    verifier=None
) -> DeploymentRecord:
    """Run a single deployment with the given collaborators"""
    orchestrator = DeploymentOrchestrator(config, contract_manager, signers, verifier)
    return await orchestrator.deploy()
