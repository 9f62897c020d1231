"""Database listing used by ``--all-databases``."""

import json
from typing import List

from cloudantsync.constants import ALL_DBS_PATH, HTTP_OK
from cloudantsync.errors import SyncError
from cloudantsync.models import Account


class DatabaseCatalogService:
    def __init__(self, http_service, logger):
        self.http = http_service
        self.logger = logger

    def list_databases(self, account: Account) -> List[str]:
        result, _ = self.http.send(
            "GET",
            account.path_url(ALL_DBS_PATH),
            headers=account.auth_headers(),
            endpoint=account.endpoint,
        )
        if not result.ok:
            raise SyncError(result.error)
        if result.status_code != HTTP_OK:
            raise SyncError(f"Could not list databases for '{account.endpoint}': {result.status}")

        try:
            names = json.loads(result.body)
        except ValueError as exc:
            raise SyncError(f"Invalid database list from '{account.endpoint}': {exc}") from exc
        if not isinstance(names, list):
            raise SyncError(f"Invalid database list from '{account.endpoint}'.")

        databases = [name for name in names if isinstance(name, str) and not name.startswith("_")]
        self.logger.info("Found %s user database(s) on %s", len(databases), account.endpoint)
        return databases
