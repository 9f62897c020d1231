"""Shared domain models for cloudant-sync."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from .constants import ACCOUNT_URL_TEMPLATE, SECURITY_KEY


@dataclass
class Account:
    """Connection facts for one regional Cloudant account.

    ``cookie`` is set once at login and cleared when the session is
    terminated; every other field is read-only during a run.
    """

    username: str
    password: str = field(repr=False)
    endpoint: str = ""
    url: str = ""
    cookie: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.url:
            self.url = ACCOUNT_URL_TEMPLATE.format(username=self.username)
        self.url = self.url.rstrip("/")
        if not self.endpoint:
            self.endpoint = self.url

    def path_url(self, path: str) -> str:
        return f"{self.url}{path}"

    def database_url(self, db: str, credentials: Optional["Account"] = None) -> str:
        """URL of ``db`` on this account, optionally carrying another account's login."""
        url = f"{self.url}/{quote(db, safe='')}"
        if credentials is None:
            return url

        parts = urlsplit(url)
        userinfo = f"{quote(credentials.username, safe='')}:{quote(credentials.password, safe='')}"
        return urlunsplit(
            (parts.scheme, f"{userinfo}@{parts.hostname}{_port(parts.port)}", parts.path, "", "")
        )

    def auth_headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {"Cookie": self.cookie or ""}
        if content_type:
            headers["Content-Type"] = content_type
        return headers


def _port(port: Optional[int]) -> str:
    return f":{port}" if port else ""


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one network call, consumed once by a result collector."""

    operation: str
    endpoint: str = ""
    url: str = ""
    status_code: Optional[int] = None
    status: str = ""
    body: str = ""
    error: Optional[str] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def with_error(self, error: str) -> "OperationResult":
        return OperationResult(
            operation=self.operation,
            endpoint=self.endpoint,
            url=self.url,
            status_code=self.status_code,
            status=self.status,
            body=self.body,
            error=error,
            skipped=self.skipped,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "endpoint": self.endpoint,
            "url": self.url,
            "status": self.status,
            "error": self.error,
            "skipped": self.skipped,
        }


class SecurityDocument:
    """Opaque ``_security`` document with typed access to the role-grant map.

    Keys other than the grant map are carried through untouched, in their
    original order.
    """

    def __init__(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise ValueError("security document must be a JSON object")
        grants = data.get(SECURITY_KEY)
        if grants is not None and not isinstance(grants, dict):
            raise ValueError(f"security document '{SECURITY_KEY}' entry must be an object")
        self.data = data

    def grant(self, username: str, roles):
        """Add missing ``roles`` for ``username``; a null entry counts as no roles."""
        grants = self.data.get(SECURITY_KEY)
        if grants is None:
            grants = self.data[SECURITY_KEY] = {}
        current = grants.get(username)
        if current is None:
            current = grants[username] = []
        elif not isinstance(current, list):
            raise ValueError(f"roles for '{username}' must be a list")
        current.extend([role for role in roles if role not in current])


@dataclass(frozen=True)
class ReplicationJob:
    """One continuous replication of ``db`` from ``source`` into ``target``."""

    source: Account
    target: Account
    db: str
    embed_credentials: bool = True

    @property
    def job_id(self) -> str:
        return f"{self.source.username}-{self.db}"

    def to_document(self) -> Dict[str, Any]:
        credentials = self.target if self.embed_credentials else None
        return {
            "_id": self.job_id,
            "source": self.source.database_url(self.db, credentials=credentials),
            "target": self.target.database_url(self.db, credentials=credentials),
            "create_target": False,
            "continuous": True,
        }
