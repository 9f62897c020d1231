"""Session cookie lifecycle: login before the run, invalidation after it."""

from urllib.parse import urlencode

from cloudantsync.constants import FORM_CONTENT_TYPE, HTTP_OK, SESSION_COOKIE_NAME, SESSION_PATH
from cloudantsync.models import Account, OperationResult


class SessionService:
    """Opens and terminates cookie sessions for accounts."""

    def __init__(self, http_service, logger):
        self.http = http_service
        self.logger = logger

    def _credentials_body(self, account: Account) -> str:
        return urlencode({"name": account.username, "password": account.password})

    def login(self, account: Account) -> OperationResult:
        """Stores the session cookie on ``account`` when the login succeeds."""
        result, response = self.http.send(
            "POST",
            account.path_url(SESSION_PATH),
            body=self._credentials_body(account),
            headers={"Content-Type": FORM_CONTENT_TYPE},
            endpoint=account.endpoint,
        )
        if not result.ok:
            return result

        token = response.cookies.get(SESSION_COOKIE_NAME) if response is not None else None
        if result.status_code != HTTP_OK or not token:
            return result.with_error(f"Failed to open session for '{account.endpoint}'")

        account.cookie = f"{SESSION_COOKIE_NAME}={token}"
        self.logger.debug("Session opened for %s", account.endpoint)
        return result

    def terminate(self, account: Account) -> OperationResult:
        """Re-authenticates with the current cookie, which invalidates it server side."""
        result, _ = self.http.send(
            "POST",
            account.path_url(SESSION_PATH),
            body=self._credentials_body(account),
            headers=account.auth_headers(FORM_CONTENT_TYPE),
            endpoint=account.endpoint,
        )
        if not result.ok or result.status_code != HTTP_OK:
            return result.with_error(f"Failed to retrieve cookie for '{account.endpoint}'")

        account.cookie = None
        return result
