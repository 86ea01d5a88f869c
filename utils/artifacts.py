"""
Artifact Loader
Reads Hardhat compilation artifacts and build-info files
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from .exceptions import ArtifactNotFoundError, InvalidArtifactError


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as written by the Hardhat toolchain"""

    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    path: Path
    link_references: Dict[str, Any] = field(default_factory=dict)

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    @property
    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for item in self.abi:
            if item.get('type') == 'constructor':
                return item.get('inputs', [])
        return []

    def ensure_deployable(self):
        """
        Check that the artifact carries deployable bytecode

        Raises:
            InvalidArtifactError: For abstract contracts, interfaces and
                                  artifacts with unlinked libraries
        """
        if not self.bytecode or self.bytecode == '0x':
            raise InvalidArtifactError(
                f"{self.fully_qualified_name} has no bytecode "
                "(abstract contract or interface)"
            )

        if self.link_references:
            libraries = [
                f"{source}:{name}"
                for source, names in self.link_references.items()
                for name in names
            ]
            raise InvalidArtifactError(
                f"{self.fully_qualified_name} needs linked libraries: {', '.join(libraries)}"
            )


def _read_artifact(path: Path) -> ContractArtifact:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    try:
        return ContractArtifact(
            contract_name=data['contractName'],
            source_name=data['sourceName'],
            abi=data['abi'],
            bytecode=data['bytecode'],
            path=path,
            link_references=data.get('linkReferences') or {},
        )
    except KeyError as e:
        raise InvalidArtifactError(f"Artifact {path} is missing field {e}") from e


def _artifact_candidates(contracts_dir: Path, contract_name: str) -> List[Path]:
    # Hardhat writes <Name>.json next to <Name>.dbg.json
    return sorted(
        p for p in contracts_dir.rglob(f"{contract_name}.json")
        if not p.name.endswith('.dbg.json')
    )


def load_artifact(artifacts_dir: Union[Path, str], name: str) -> ContractArtifact:
    """
    Resolve a contract artifact by bare or fully qualified name

    Args:
        artifacts_dir: Hardhat artifacts root (contains contracts/ and build-info/)
        name: "Crowdfund" or "contracts/Crowdfund.sol:Crowdfund"

    Returns:
        ContractArtifact

    Raises:
        ArtifactNotFoundError: If no artifact (or more than one) matches
        InvalidArtifactError: If the artifact file is malformed
    """
    artifacts_dir = Path(artifacts_dir)

    if ':' in name:
        source_name, contract_name = name.rsplit(':', 1)
        path = artifacts_dir / source_name / f"{contract_name}.json"
        if not path.exists():
            raise ArtifactNotFoundError(f"Artifact for {name} not found at {path}")
        return _read_artifact(path)

    contracts_dir = artifacts_dir / "contracts"
    if not contracts_dir.is_dir():
        raise ArtifactNotFoundError(
            f"No compiled contracts under {contracts_dir}. Run 'npx hardhat compile' first"
        )

    candidates = _artifact_candidates(contracts_dir, name)

    if not candidates:
        raise ArtifactNotFoundError(f"Artifact for contract {name} not found in {contracts_dir}")

    if len(candidates) > 1:
        names = [str(p.parent.relative_to(artifacts_dir)) + f":{name}" for p in candidates]
        raise ArtifactNotFoundError(
            f"Multiple artifacts for contract {name}, use a fully qualified name: "
            + ", ".join(names)
        )

    logger.debug(f"Resolved artifact {candidates[0]}")
    return _read_artifact(candidates[0])


def _build_info_has(build_info: Dict[str, Any], artifact: ContractArtifact) -> bool:
    contracts = build_info.get('output', {}).get('contracts', {})
    return artifact.contract_name in contracts.get(artifact.source_name, {})


def load_build_info(artifacts_dir: Union[Path, str], artifact: ContractArtifact) -> Dict[str, Any]:
    """
    Find the build-info that produced an artifact

    The .dbg.json file next to the artifact points at its build-info; when it
    is missing every file in build-info/ is searched.

    Args:
        artifacts_dir: Hardhat artifacts root
        artifact: Artifact to look up

    Returns:
        Build-info dict with "solcLongVersion" and "input"

    Raises:
        ArtifactNotFoundError: If no build-info contains the contract
    """
    artifacts_dir = Path(artifacts_dir)
    dbg_path = artifact.path.with_name(f"{artifact.contract_name}.dbg.json")

    build_info_path: Optional[Path] = None
    if dbg_path.exists():
        with open(dbg_path, 'r', encoding='utf-8') as f:
            relative = json.load(f).get('buildInfo')
        if relative:
            build_info_path = (dbg_path.parent / relative).resolve()

    if build_info_path is not None and build_info_path.exists():
        with open(build_info_path, 'r', encoding='utf-8') as f:
            build_info = json.load(f)
        if _build_info_has(build_info, artifact):
            return build_info

    for path in sorted((artifacts_dir / "build-info").glob("*.json")):
        with open(path, 'r', encoding='utf-8') as f:
            build_info = json.load(f)
        if _build_info_has(build_info, artifact):
            return build_info

    raise ArtifactNotFoundError(
        f"No build-info found for {artifact.fully_qualified_name} in {artifacts_dir}"
    )
