"""
Shared pytest fixtures for deployer tests
"""

import json
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import Mock

import pytest
from loguru import logger


DEPLOYER_ADDRESS = '0x1111111111111111111111111111111111111111'
CONTRACT_ADDRESS = '0xABCDabcdABCDabcdABCDabcdABCDabcdABCDabcd'
TX_HASH = b'\x12' * 32

CROWDFUND_ABI = [
    {
        "inputs": [],
        "stateMutability": "nonpayable",
        "type": "constructor"
    },
    {
        "inputs": [],
        "name": "owner",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function"
    }
]


def write_json(path: Path, data: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)


@pytest.fixture
def log_messages():
    """Capture loguru messages"""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Hardhat artifacts tree with a compiled Crowdfund contract"""
    root = tmp_path / "artifacts"
    contract_dir = root / "contracts" / "Crowdfund.sol"

    write_json(contract_dir / "Crowdfund.json", {
        "_format": "hh-sol-artifact-1",
        "contractName": "Crowdfund",
        "sourceName": "contracts/Crowdfund.sol",
        "abi": CROWDFUND_ABI,
        "bytecode": "0x6080604052348015600f57600080fd5b50",
        "deployedBytecode": "0x6080604052",
        "linkReferences": {},
        "deployedLinkReferences": {}
    })
    write_json(contract_dir / "Crowdfund.dbg.json", {
        "_format": "hh-sol-dbg-1",
        "buildInfo": "../../build-info/abc123.json"
    })
    write_json(root / "build-info" / "abc123.json", {
        "id": "abc123",
        "solcVersion": "0.8.20",
        "solcLongVersion": "0.8.20+commit.a1b79de6",
        "input": {
            "language": "Solidity",
            "sources": {"contracts/Crowdfund.sol": {"content": "contract Crowdfund {}"}},
            "settings": {"optimizer": {"enabled": True, "runs": 200}}
        },
        "output": {
            "contracts": {"contracts/Crowdfund.sol": {"Crowdfund": {"abi": CROWDFUND_ABI}}}
        }
    })
    return root


@pytest.fixture
def network_config_data() -> Dict[str, Any]:
    return {
        "default_network": "hardhat",
        "networks": {
            "hardhat": {"chain_id": 31337, "chain_name": "Hardhat Network", "provider": "tester"},
            "localhost": {
                "chain_id": 31337,
                "chain_name": "Localhost",
                "rpc_url": "http://127.0.0.1:8545",
                "accounts_env": "TEST_LOCAL_KEYS"
            },
            "sepolia": {
                "chain_id": 11155111,
                "chain_name": "Sepolia",
                "rpc_url_env": "TEST_SEP_RPC_URL",
                "accounts_env": "TEST_PRIVATE_KEY",
                "explorer": {
                    "api_url": "https://api.etherscan.io/v2/api",
                    "browser_url": "https://sepolia.etherscan.io",
                    "api_key_env": "TEST_ETHERSCAN_KEY"
                }
            }
        },
        "deployment": {"contract_name": "Crowdfund", "verification_confirmations": 6}
    }


@pytest.fixture
def network_config_file(tmp_path: Path, network_config_data: Dict[str, Any]) -> Path:
    path = tmp_path / "config" / "network_config.json"
    write_json(path, network_config_data)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's .env out of the tests"""
    for var in [
        'DEPLOY_NETWORK',
        'DEPLOY_CONFIG',
        'DEPLOY_LOG_FILE',
        'TEST_LOCAL_KEYS',
        'TEST_PRIVATE_KEY',
        'TEST_SEP_RPC_URL',
        'TEST_ETHERSCAN_KEY'
    ]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def w3():
    """Mock Web3 instance"""
    mock_w3 = Mock()
    mock_w3.eth.block_number = 100
    mock_w3.eth.chain_id = 31337
    mock_w3.eth.gas_price = 30_000_000_000
    return mock_w3


@pytest.fixture
def receipt() -> Dict[str, Any]:
    return {
        'status': 1,
        'blockNumber': 100,
        'contractAddress': CONTRACT_ADDRESS.lower(),
        'gasUsed': 512_000
    }
