"""
Account Resolver

Maps Up account IDs to PocketSmith transaction account IDs using the static
mapping table from configuration.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union

from upsync.config import Settings, load_account_mappings


@dataclass(frozen=True)
class AccountFound:
    account_id: str


@dataclass(frozen=True)
class AccountNotFound:
    source_account_id: Optional[str]


AccountResolution = Union[AccountFound, AccountNotFound]


class AccountResolver:
    """Read-only lookup over the account mapping table"""

    def __init__(self, mappings: Mapping[str, str]):
        self._mappings: Dict[str, str] = dict(mappings)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccountResolver":
        """Resolver over the mapping table as configured for this invocation"""
        return cls(load_account_mappings(settings))

    def resolve(self, source_account_id: Optional[str]) -> AccountResolution:
        account_id = self._mappings.get(source_account_id) if source_account_id else None
        if account_id:
            return AccountFound(account_id)
        return AccountNotFound(source_account_id)
