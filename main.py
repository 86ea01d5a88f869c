"""
Crowdfund Deployer - Main Entry Point
Deploys the Crowdfund contract to the network selected by $DEPLOY_NETWORK
"""

import asyncio
import os
import sys
from pathlib import Path
from loguru import logger
from dotenv import load_dotenv

from blockchain.confirmation_tracker import ConfirmationTracker
from blockchain.contract_manager import ContractManager
from blockchain.transaction_builder import TransactionBuilder
from deployer.deployment_record import DEFAULT_OUTPUT_FILE, DeploymentRecord
from deployer.orchestrator import DeployConfig, DeploymentOrchestrator
from deployer.wallet_manager import WalletManager
from utils.rpc_manager import RPCManager
from utils.verification import EtherscanVerifier


def configure_logging(log_file=None):
    """Progress to stdout, errors to stderr, optional file sink"""
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="INFO",
        filter=lambda record: record["level"].no < logger.level("ERROR").no
    )
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="ERROR"
    )
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            level="DEBUG"
        )


def build_orchestrator(rpc_manager: RPCManager) -> DeploymentOrchestrator:
    """Wire the orchestrator's collaborators for the active network"""
    network = rpc_manager.network
    settings = rpc_manager.deployment_settings
    w3 = rpc_manager.get_web3()

    contract_name = settings.get('contract_name', 'Crowdfund')
    artifacts_dir = Path(settings.get('artifacts_dir', 'artifacts'))

    wallet_manager = WalletManager(w3, network)
    signers = wallet_manager.get_signers()
    if signers:
        balance = wallet_manager.get_balance(signers[0])
        logger.info(f"Deployer balance: {balance} (native units)")

    tracker = ConfirmationTracker(
        w3,
        poll_interval=settings.get('poll_interval', 2.0),
        timeout=settings.get('receipt_timeout', 300),
        confirmation_timeout=settings.get('confirmation_timeout', 600)
    )
    tx_builder = TransactionBuilder(
        w3,
        chain_id=network.chain_id,
        gas_buffer=settings.get('gas_buffer', 1.2),
        priority_fee_gwei=settings.get('priority_fee_gwei', 1.5)
    )
    contract_manager = ContractManager(w3, artifacts_dir, tx_builder, tracker)

    verifier = None
    if not network.is_local:
        verifier = EtherscanVerifier.from_network(network, contract_name, artifacts_dir)

    config = DeployConfig(
        network=network.name,
        contract_name=contract_name,
        network_display_name=network.chain_name,
        output_path=Path(settings.get('output_file', DEFAULT_OUTPUT_FILE)),
        verification_confirmations=settings.get('verification_confirmations', 6),
    )

    return DeploymentOrchestrator(config, contract_manager, signers, verifier)


async def main() -> DeploymentRecord:
    """Main entry point"""
    rpc_manager = RPCManager()
    orchestrator = build_orchestrator(rpc_manager)
    return await orchestrator.deploy()


def run() -> int:
    """
    Run one deployment and map the outcome to an exit code

    Returns:
        0 on success (including a failed verification), 1 otherwise
    """
    load_dotenv()
    configure_logging(os.getenv('DEPLOY_LOG_FILE'))

    try:
        asyncio.run(main())
    except Exception as e:
        logger.opt(exception=e).error(f"Deployment failed: {e}")
        return 1

    return 0


def cli():
    sys.exit(run())


if __name__ == "__main__":
    cli()
