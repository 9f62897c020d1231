"""Creation of continuous replication job documents."""

import json
from typing import Iterator, List, Tuple

from cloudantsync.constants import (
    HTTP_CONFLICT,
    HTTP_CREATED,
    JSON_CONTENT_TYPE,
    REPLICATOR_PATH,
)
from cloudantsync.models import Account, OperationResult, ReplicationJob


def ordered_pairs(accounts: List[Account]) -> Iterator[Tuple[Account, Account]]:
    """Yields every (target, source) pair with target != source."""
    for target in accounts:
        for source in accounts:
            if source.username != target.username:
                yield target, source


class ReplicationDocumentService:
    """Posts one job per ordered account pair into the target's ``_replicator``."""

    SUCCESS_STATUSES = {HTTP_CREATED, HTTP_CONFLICT}

    def __init__(self, http_service, logger, embed_credentials: bool = True):
        self.http = http_service
        self.logger = logger
        self.embed_credentials = embed_credentials

    def build_job(self, db: str, target: Account, source: Account) -> ReplicationJob:
        return ReplicationJob(
            source=source,
            target=target,
            db=db,
            embed_credentials=self.embed_credentials,
        )

    def create(self, db: str, target: Account, source: Account) -> OperationResult:
        job = self.build_job(db, target, source)
        result, _ = self.http.send(
            "POST",
            target.path_url(REPLICATOR_PATH),
            body=json.dumps(job.to_document(), indent=2),
            headers=target.auth_headers(JSON_CONTENT_TYPE),
            endpoint=target.endpoint,
        )
        if result.status_code == HTTP_CONFLICT:
            self.logger.debug("Replication %s already exists on %s", job.job_id, target.endpoint)

        if result.ok and result.status_code not in self.SUCCESS_STATUSES:
            return result.with_error(f"Trouble creating {job.job_id} for '{target.endpoint}'")
        return result
