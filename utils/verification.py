"""
Contract Verification
Submits contract source to Etherscan-compatible block explorers
"""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import aiohttp
from eth_abi import encode
from loguru import logger

from .artifacts import ContractArtifact, load_artifact, load_build_info
from .exceptions import VerificationError
from .rpc_manager import NetworkConfig

PENDING_STATUS = "Pending in queue"
PASS_STATUS = "Pass - Verified"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification attempt"""

    success: bool
    message: str = ""
    url: Optional[str] = None


def encode_constructor_arguments(artifact: ContractArtifact, constructor_args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments the way explorers expect them

    Args:
        artifact: Contract artifact (provides the constructor ABI)
        constructor_args: Arguments used at deployment

    Returns:
        Hex string without 0x prefix ("" for no arguments)

    Raises:
        VerificationError: If the arguments do not match the constructor
    """
    inputs = artifact.constructor_inputs

    if len(inputs) != len(constructor_args):
        raise VerificationError(
            f"{artifact.contract_name} constructor takes {len(inputs)} arguments, "
            f"got {len(constructor_args)}"
        )

    if not inputs:
        return ""

    types = [item['type'] for item in inputs]
    return encode(types, list(constructor_args)).hex()


class EtherscanVerifier:
    """
    Verifies deployed contracts through the Etherscan contract API

    Works with any explorer that implements the getsourcecode,
    verifysourcecode and checkverifystatus actions.
    """

    def __init__(
        self,
        api_url: Optional[str],
        api_key: Optional[str],
        contract_name: str,
        artifacts_dir: Union[Path, str] = "artifacts",
        chain_id: Optional[int] = None,
        browser_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        poll_interval: float = 3.0,
        max_status_checks: int = 20
    ):
        """
        Initialize Etherscan Verifier

        Args:
            api_url: Explorer API endpoint
            api_key: Explorer API key
            contract_name: Contract to verify (bare or fully qualified)
            artifacts_dir: Hardhat artifacts root
            chain_id: Sent as "chainid" for multichain APIs
            browser_url: Explorer web UI, used for the result link
            session: Reused aiohttp session (a new one per call otherwise)
            poll_interval: Seconds between status checks
            max_status_checks: Status checks before giving up
        """
        self.api_url = api_url
        self.api_key = api_key
        self.contract_name = contract_name
        self.artifacts_dir = Path(artifacts_dir)
        self.chain_id = chain_id
        self.browser_url = browser_url
        self.session = session
        self.poll_interval = poll_interval
        self.max_status_checks = max_status_checks

    @classmethod
    def from_network(
        cls,
        network: NetworkConfig,
        contract_name: str,
        artifacts_dir: Union[Path, str] = "artifacts",
        **kwargs
    ) -> "EtherscanVerifier":
        """Build a verifier from the network's explorer settings"""
        explorer = network.explorer
        return cls(
            api_url=explorer.api_url if explorer else None,
            api_key=explorer.api_key if explorer else None,
            contract_name=contract_name,
            artifacts_dir=artifacts_dir,
            chain_id=network.chain_id,
            browser_url=explorer.browser_url if explorer else None,
            **kwargs
        )

    def _code_url(self, address: str) -> Optional[str]:
        if not self.browser_url:
            return None
        return f"{self.browser_url.rstrip('/')}/address/{address}#code"

    def _query_params(self) -> Dict[str, Any]:
        if self.chain_id is None:
            return {}
        return {'chainid': self.chain_id}

    async def _get(self, session: aiohttp.ClientSession, params: Dict[str, Any]) -> Dict[str, Any]:
        async with session.get(
            self.api_url,
            params={**self._query_params(), **params, 'apikey': self.api_key}
        ) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def _post(self, session: aiohttp.ClientSession, data: Dict[str, Any]) -> Dict[str, Any]:
        async with session.post(
            self.api_url,
            params=self._query_params(),
            data={**data, 'apikey': self.api_key}
        ) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def is_verified(self, session: aiohttp.ClientSession, address: str) -> bool:
        """
        Check whether the explorer already has source for an address

        Raises:
            VerificationError: If the explorer rejects the request
        """
        payload = await self._get(session, {
            'module': 'contract',
            'action': 'getsourcecode',
            'address': address,
        })

        if str(payload.get('status')) != '1':
            raise VerificationError(f"Explorer error: {payload.get('result') or payload.get('message')}")

        result = payload.get('result') or []
        if not result:
            return False

        return bool(result[0].get('SourceCode'))

    async def _submit(
        self,
        session: aiohttp.ClientSession,
        address: str,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any]
    ) -> Optional[str]:
        """Submit source, returns a GUID or None when already verified"""
        build_info = load_build_info(self.artifacts_dir, artifact)

        payload = await self._post(session, {
            'module': 'contract',
            'action': 'verifysourcecode',
            'contractaddress': address,
            'sourceCode': json.dumps(build_info['input']),
            'codeformat': 'solidity-standard-json-input',
            'contractname': artifact.fully_qualified_name,
            'compilerversion': f"v{build_info['solcLongVersion']}",
            # Misspelling is part of the Etherscan API
            'constructorArguements': encode_constructor_arguments(artifact, constructor_args),
        })

        result = str(payload.get('result', ''))

        if str(payload.get('status')) != '1':
            if 'already verified' in result.lower():
                return None
            raise VerificationError(result or str(payload.get('message')))

        return result

    async def _wait_for_status(self, session: aiohttp.ClientSession, guid: str) -> str:
        for _ in range(self.max_status_checks):
            payload = await self._get(session, {
                'module': 'contract',
                'action': 'checkverifystatus',
                'guid': guid,
            })
            result = str(payload.get('result', ''))

            if result != PENDING_STATUS:
                return result

            logger.debug(f"Verification {guid} pending")
            await asyncio.sleep(self.poll_interval)

        raise VerificationError(f"Verification {guid} still pending after {self.max_status_checks} checks")

    async def _verify(
        self,
        session: aiohttp.ClientSession,
        address: str,
        constructor_args: Sequence[Any]
    ) -> VerificationResult:
        if await self.is_verified(session, address):
            return VerificationResult(True, "already verified", self._code_url(address))

        artifact = load_artifact(self.artifacts_dir, self.contract_name)
        guid = await self._submit(session, address, artifact, constructor_args)

        if guid is None:
            return VerificationResult(True, "already verified", self._code_url(address))

        logger.info(f"Verification submitted: {guid}")
        status = await self._wait_for_status(session, guid)

        if status == PASS_STATUS or 'already verified' in status.lower():
            return VerificationResult(True, status, self._code_url(address))

        raise VerificationError(status)

    async def verify(self, address: str, constructor_args: Sequence[Any] = ()) -> VerificationResult:
        """
        Verify a deployed contract

        Args:
            address: Deployed contract address
            constructor_args: Arguments used at deployment

        Returns:
            Successful VerificationResult

        Raises:
            VerificationError: If verification is not possible or is rejected
        """
        if not self.api_url:
            raise VerificationError("No block explorer API configured for this network")

        if not self.api_key:
            raise VerificationError("No block explorer API key configured")

        if self.session is not None:
            return await self._verify(self.session, address, constructor_args)

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=60)) as session:
            return await self._verify(session, address, constructor_args)


async def verify_contract(verifier, address: str, constructor_args: Sequence[Any] = ()) -> VerificationResult:
    """
    Run a verification attempt without ever raising

    Args:
        verifier: Object with an async verify(address, constructor_args)
        address: Deployed contract address
        constructor_args: Arguments used at deployment

    Returns:
        VerificationResult; failures carry the error message
    """
    if verifier is None:
        return VerificationResult(False, "No verifier configured")

    try:
        return await verifier.verify(address, list(constructor_args))
    except Exception as e:
        logger.debug(f"Verification raised {type(e).__name__}")
        return VerificationResult(False, str(e))
