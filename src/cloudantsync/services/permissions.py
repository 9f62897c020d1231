"""Cross-account permission sharing via the ``_security`` document."""

import json
from typing import Any, Dict, Iterable, List, Sequence
from urllib.parse import quote

from cloudantsync.constants import (
    HTTP_OK,
    JSON_CONTENT_TYPE,
    SECURITY_PATH,
    SHARE_ROLES,
)
from cloudantsync.models import Account, OperationResult, SecurityDocument


def merge_permissions(
    document: Dict[str, Any],
    owner: str,
    usernames: Iterable[str],
    roles: Sequence[str] = SHARE_ROLES,
) -> Dict[str, Any]:
    """Grant ``roles`` to every username except ``owner``.

    Existing grants and unrelated keys are kept as they are; only missing
    roles are appended.
    """
    security = SecurityDocument(document)
    for username in usernames:
        if username == owner:
            continue
        security.grant(username, roles)
    return security.data


class PermissionService:
    """Reads, merges and writes back the security document of one database."""

    def __init__(self, http_service, logger, roles: Sequence[str] = SHARE_ROLES):
        self.http = http_service
        self.logger = logger
        self.roles = tuple(roles)

    def security_url(self, account: Account, db: str) -> str:
        return account.path_url(SECURITY_PATH.format(db=quote(db, safe="")))

    def share(self, db: str, account: Account, accounts: List[Account]) -> List[OperationResult]:
        """Returns exactly two results: the GET and the PUT (or a skipped PUT)."""
        url = self.security_url(account, db)
        get_result, _ = self.http.send(
            "GET",
            url,
            headers=account.auth_headers(),
            endpoint=account.endpoint,
        )

        if not get_result.ok or get_result.status_code != HTTP_OK:
            get_result = get_result.with_error(
                get_result.error or f"Permissions GET request failed for '{account.endpoint}'"
            )
            return [get_result, self._skipped_put(account, url, "GET failure")]

        try:
            merged = merge_permissions(
                json.loads(get_result.body or "{}"),
                owner=account.username,
                usernames=[other.username for other in accounts],
                roles=self.roles,
            )
        except ValueError as exc:
            self.logger.debug("Unreadable security document for %s: %s", account.endpoint, exc)
            return [get_result, self._skipped_put(account, url, f"unreadable security document ({exc})")]

        put_result, _ = self.http.send(
            "PUT",
            url,
            body=json.dumps(merged, indent=2),
            headers=account.auth_headers(JSON_CONTENT_TYPE),
            endpoint=account.endpoint,
        )
        if put_result.ok and not 200 <= put_result.status_code < 300:
            put_result = put_result.with_error(
                f"Permissions PUT request failed for '{account.endpoint}' on '{db}'"
            )
        return [get_result, put_result]

    def _skipped_put(self, account: Account, url: str, reason: str) -> OperationResult:
        return OperationResult(
            operation="PUT",
            endpoint=account.endpoint,
            url=url,
            error=f"Did not execute for '{account.endpoint}' due to {reason}",
            skipped=True,
        )
