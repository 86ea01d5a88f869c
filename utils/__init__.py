"""
Utilities Package
Network configuration, artifacts, verification and error types
"""

from .rpc_manager import RPCManager, NetworkConfig, ExplorerConfig
from .artifacts import ContractArtifact, load_artifact, load_build_info
from .verification import EtherscanVerifier, VerificationResult, verify_contract

__all__ = [
    'RPCManager',
    'NetworkConfig',
    'ExplorerConfig',
    'ContractArtifact',
    'load_artifact',
    'load_build_info',
    'EtherscanVerifier',
    'VerificationResult',
    'verify_contract'
]
