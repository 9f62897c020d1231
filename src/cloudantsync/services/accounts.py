"""Builds the working set of accounts from configuration entries."""

from typing import Any, Dict, List, Optional, Sequence

from cloudantsync.errors import SyncError
from cloudantsync.errors_catalog import actionable_error
from cloudantsync.models import Account


class AccountResolver:
    """Resolves configured account entries, filtered and ordered by ``endpoints``."""

    def __init__(self, logger, endpoints: Optional[Sequence[str]] = None):
        self.logger = logger
        self.endpoints = list(dict.fromkeys(endpoints)) if endpoints else None

    def resolve(
        self,
        entries: List[Dict[str, Any]],
        default_password: Optional[str] = None,
    ) -> List[Account]:
        accounts = [self._build_account(entry, default_password) for entry in entries]

        if self.endpoints is not None:
            by_endpoint: Dict[str, List[Account]] = {}
            for account in accounts:
                if account.endpoint in self.endpoints:
                    by_endpoint.setdefault(account.endpoint, []).append(account)
                else:
                    self.logger.debug("Skipping %s: endpoint not selected", account.username)

            accounts = []
            for endpoint in self.endpoints:
                if endpoint not in by_endpoint:
                    self.logger.warning("No account configured for endpoint %s; skipping.", endpoint)
                    continue
                accounts.extend(by_endpoint[endpoint])

        if not accounts:
            raise SyncError(actionable_error("no_accounts"))

        seen = set()
        for account in accounts:
            if account.username in seen:
                raise SyncError(actionable_error("duplicate_username", username=account.username))
            seen.add(account.username)

        if len(accounts) == 1:
            self.logger.warning(
                "Only one account resolved (%s); there is nothing to replicate between.",
                accounts[0].endpoint,
            )
        return accounts

    def _build_account(self, entry: Dict[str, Any], default_password: Optional[str]) -> Account:
        if not isinstance(entry, dict) or not entry.get("username"):
            raise SyncError("Each account entry must be a mapping with a 'username'.")

        username = str(entry["username"])
        password = entry.get("password") or default_password
        if not password:
            raise SyncError(actionable_error("missing_password", username=username))

        return Account(
            username=username,
            password=str(password),
            endpoint=str(entry.get("endpoint") or ""),
            url=str(entry.get("url") or ""),
            cookie=entry.get("cookie"),
        )
