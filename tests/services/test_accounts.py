import pytest

from cloudantsync.errors import SyncError
from cloudantsync.services.accounts import AccountResolver


class DummyLogger:
    def __init__(self):
        self.warnings = []

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, message, *args):
        self.warnings.append(message % args)


ENTRIES = [
    {"username": "acme-us", "password": "a", "endpoint": "https://api.ng.bluemix.net"},
    {"username": "acme-eu", "endpoint": "https://api.eu-gb.bluemix.net"},
    {"username": "acme-au", "password": "c", "endpoint": "https://api.au-syd.bluemix.net"},
]


def test_resolve_uses_all_entries_without_endpoint_filter():
    accounts = AccountResolver(logger=DummyLogger()).resolve(ENTRIES, default_password="shared")

    assert [account.username for account in accounts] == ["acme-us", "acme-eu", "acme-au"]
    assert accounts[1].password == "shared"
    assert accounts[0].url == "https://acme-us.cloudant.com"


def test_resolve_orders_by_endpoints_and_warns_on_missing_region():
    logger = DummyLogger()
    resolver = AccountResolver(
        logger=logger,
        endpoints=["https://api.au-syd.bluemix.net", "https://api.ng.bluemix.net", "https://api.jp-tok.bluemix.net"],
    )

    accounts = resolver.resolve(ENTRIES, default_password="shared")

    assert [account.username for account in accounts] == ["acme-au", "acme-us"]
    assert any("jp-tok" in warning for warning in logger.warnings)


def test_resolve_rejects_missing_password():
    with pytest.raises(SyncError, match="No password available for account 'acme-eu'"):
        AccountResolver(logger=DummyLogger()).resolve(ENTRIES)


def test_resolve_rejects_duplicate_usernames():
    entries = [{"username": "acme", "password": "x", "endpoint": "us"}, {"username": "acme", "password": "y", "endpoint": "eu"}]

    with pytest.raises(SyncError, match="more than once"):
        AccountResolver(logger=DummyLogger()).resolve(entries)


def test_resolve_fails_when_nothing_matches():
    resolver = AccountResolver(logger=DummyLogger(), endpoints=["https://api.jp-tok.bluemix.net"])

    with pytest.raises(SyncError, match="No Cloudant accounts"):
        resolver.resolve(ENTRIES, default_password="shared")


def test_resolve_keeps_explicit_url():
    entries = [{"username": "local", "password": "x", "url": "http://localhost:5984/"}]

    account = AccountResolver(logger=DummyLogger()).resolve(entries)[0]

    assert account.url == "http://localhost:5984"
    assert account.endpoint == "http://localhost:5984"


def test_resolve_keeps_every_account_sharing_a_selected_endpoint():
    entries = [
        {"username": "acme-us1", "password": "x", "endpoint": "us-south"},
        {"username": "acme-eu", "password": "y", "endpoint": "eu-gb"},
        {"username": "acme-us2", "password": "z", "endpoint": "us-south"},
    ]
    resolver = AccountResolver(logger=DummyLogger(), endpoints=["us-south", "eu-gb"])

    accounts = resolver.resolve(entries)

    assert [account.username for account in accounts] == ["acme-us1", "acme-us2", "acme-eu"]
