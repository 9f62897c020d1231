"""Provisioning of the ``_replicator`` bookkeeping database."""

from cloudantsync.constants import (
    HTTP_CREATED,
    HTTP_PRECONDITION_FAILED,
    JSON_CONTENT_TYPE,
    REPLICATOR_PATH,
)
from cloudantsync.models import Account, OperationResult


class ReplicatorDatabaseService:
    """Ensures each account has a replication-job database."""

    SUCCESS_STATUSES = {HTTP_CREATED, HTTP_PRECONDITION_FAILED}

    def __init__(self, http_service, logger):
        self.http = http_service
        self.logger = logger

    def provision(self, account: Account) -> OperationResult:
        result, _ = self.http.send(
            "PUT",
            account.path_url(REPLICATOR_PATH),
            headers=account.auth_headers(JSON_CONTENT_TYPE),
            endpoint=account.endpoint,
        )
        if result.status_code == HTTP_PRECONDITION_FAILED:
            self.logger.debug("Replicator database already exists for %s", account.endpoint)

        if result.ok and result.status_code not in self.SUCCESS_STATUSES:
            return result.with_error(
                f"Replicator database status unknown for '{account.endpoint}'"
            )
        return result
