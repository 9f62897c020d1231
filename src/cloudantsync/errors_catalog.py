"""Actionable error catalog for cloudant-sync."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "no_accounts": {
        "what": "No Cloudant accounts could be resolved.",
        "next": "Add entries under `accounts` in the config file or check the `endpoints` filter.",
    },
    "duplicate_username": {
        "what": "Account username '{username}' is configured more than once.",
        "next": "Give each regional account its own entry with a distinct username.",
    },
    "missing_password": {
        "what": "No password available for account '{username}'.",
        "next": "Set `password` on the account, in the config root, or via `--password`.",
    },
    "no_databases": {
        "what": "No databases selected for replication.",
        "next": "Pass `--database NAME` or use `--all-databases`.",
    },
    "login_failed": {
        "what": "Could not open a session for {count} account(s).",
        "next": "Check the credentials in the config file and that the accounts are reachable.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
