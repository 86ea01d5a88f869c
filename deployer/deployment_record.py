"""
Deployment Record
Metadata written after a successful deployment
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

DEFAULT_OUTPUT_FILE = "deployment-info.json"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2026-10-18T10:00:00.000Z"""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass(frozen=True)
class DeploymentRecord:
    """Where, when and by whom the contract was deployed"""

    contract_address: str
    network: str
    deployed_at: str
    deployer: str

    @classmethod
    def create(
        cls,
        contract_address: str,
        network: str,
        deployer: str,
        now: Optional[datetime] = None
    ) -> "DeploymentRecord":
        if now is None:
            now = datetime.now(timezone.utc)
        return cls(
            contract_address=contract_address,
            network=network,
            deployed_at=format_timestamp(now),
            deployer=deployer,
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            'contractAddress': self.contract_address,
            'network': self.network,
            'deployedAt': self.deployed_at,
            'deployer': self.deployer,
        }

    def save(self, path: Union[Path, str] = DEFAULT_OUTPUT_FILE) -> Path:
        """
        Write the record as pretty-printed JSON, replacing any existing file

        Args:
            path: Output file

        Returns:
            Path written
        """
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)
        return path
