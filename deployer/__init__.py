"""
Deployer Package
Deployment orchestration, signer management, and deployment records
"""

from .orchestrator import DeploymentOrchestrator, DeployConfig, deploy
from .deployment_record import DeploymentRecord
from .wallet_manager import WalletManager

__all__ = ['DeploymentOrchestrator', 'DeployConfig', 'deploy', 'DeploymentRecord', 'WalletManager']
