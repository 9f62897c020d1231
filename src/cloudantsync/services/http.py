"""Single authenticated HTTP call helper."""

from typing import Any, Dict, Optional, Tuple

import requests

from cloudantsync.constants import DEFAULT_TIMEOUT
from cloudantsync.models import OperationResult


class HttpRequestService:
    """Issues one request and turns the outcome into an ``OperationResult``."""

    def __init__(self, logger, requests_module=requests, timeout: float = DEFAULT_TIMEOUT):
        self.logger = logger
        self.requests = requests_module
        self.timeout = timeout

    def send(
        self,
        method: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        endpoint: str = "",
    ) -> Tuple[OperationResult, Optional[Any]]:
        """Returns the result and the closed response (``None`` on transport failure).

        The response body is read in full before this returns.
        """
        self.logger.debug("%s %s", method, url)

        try:
            with self.requests.request(
                method,
                url,
                data=body,
                headers=headers or {},
                timeout=self.timeout,
            ) as response:
                payload = response.text
                result = OperationResult(
                    operation=method,
                    endpoint=endpoint,
                    url=url,
                    status_code=response.status_code,
                    status=f"{response.status_code} {response.reason}".strip(),
                    body=payload,
                )
                return result, response
        except self.requests.RequestException as exc:
            self.logger.debug("%s %s failed: %s", method, url, exc)
            result = OperationResult(
                operation=method,
                endpoint=endpoint,
                url=url,
                error=f"{method} {url} failed for '{endpoint}': {exc}",
            )
            return result, None
