"""
Blockchain Interaction Package
Handles contract factories, transaction building, and confirmation tracking
"""

from .contract_manager import ContractManager, ContractFactory, DeployedContract
from .transaction_builder import TransactionBuilder, Signer
from .confirmation_tracker import ConfirmationTracker

__all__ = [
    'ContractManager',
    'ContractFactory',
    'DeployedContract',
    'TransactionBuilder',
    'Signer',
    'ConfirmationTracker'
]
