"""
Shared fixtures for arkcli tests.

FakeSession stands in for requests.Session so NetworkContext runs its real
request/response handling against canned node answers.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from urllib.parse import urlparse

import pytest
import requests

from arkcli.core.config import NETWORKS
from arkcli.core.hardware_wallet import DeviceAccount
from arkcli.core.network import NetworkContext

PASSPHRASE = "this is a top secret passphrase"
SECOND_PASSPHRASE = "this is a top secret second passphrase"
DELEGATE_PUBLIC_KEY = "02" + "ab" * 32

Route = Union[Dict[str, Any], Exception, Callable[[str, Dict[str, Any]], Dict[str, Any]]]


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Routes requests by (method, path); unreachable hosts raise ConnectionError."""

    def __init__(self, routes: Optional[Dict[tuple, Route]] = None, fail_hosts: Sequence[str] = ()) -> None:
        self.routes: Dict[tuple, Route] = dict(routes or {})
        self.fail_hosts = set(fail_hosts)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        parsed = urlparse(url)
        self.calls.append({"method": method, "url": url, "path": parsed.path, **kwargs})
        if parsed.hostname in self.fail_hosts:
            raise requests.exceptions.ConnectionError(f"connection refused: {parsed.hostname}")
        route = self.routes.get((method, parsed.path))
        if route is None:
            return FakeResponse({"success": False, "error": "Not routed"}, status_code=404)
        if isinstance(route, FakeResponse):
            return route
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return FakeResponse(route(url, kwargs))
        return FakeResponse(route)

    def calls_to(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]


class FakePrompter:
    def __init__(
        self,
        passphrase: Optional[str] = PASSPHRASE,
        second_secret: Optional[str] = None,
        account_index: int = 0,
        confirm_answer: bool = True,
    ) -> None:
        self.passphrase = passphrase
        self.second_secret = second_secret
        self.account_index = account_index
        self.confirm_answer = confirm_answer
        self.calls: List[str] = []
        self.listed_accounts: List[DeviceAccount] = []

    def ask_passphrase(self) -> Optional[str]:
        self.calls.append("ask_passphrase")
        return self.passphrase

    def ask_second_secret(self) -> Optional[str]:
        self.calls.append("ask_second_secret")
        return self.second_secret

    def select_account(self, accounts: Sequence[DeviceAccount]) -> int:
        self.calls.append("select_account")
        self.listed_accounts = list(accounts)
        return self.account_index

    def confirm(self, message: str) -> bool:
        self.calls.append("confirm")
        return self.confirm_answer


def node_routes(
    delegates: Optional[List[Dict[str, Any]]] = None,
    post_response: Optional[Dict[str, Any]] = None,
    version: int = 0x17,
) -> Dict[tuple, Route]:
    """Canned answers of a healthy mainnet node."""
    mainnet = NETWORKS["mainnet"]
    return {
        ("GET", "/api/loader/autoconfigure"): {
            "success": True,
            "network": {"version": version, "nethash": mainnet.nethash, "token": "ARK"},
        },
        ("GET", "/api/accounts/delegates"): {
            "success": True,
            "delegates": delegates
            if delegates is not None
            else [{"publicKey": DELEGATE_PUBLIC_KEY, "username": "u1"}],
        },
        ("POST", "/peer/transactions"): post_response
        if post_response is not None
        else {"success": True, "transactionIds": ["tx123"]},
    }


@pytest.fixture(autouse=True)
def _reset_arkcli_logger():
    """CLI runs configure the arkcli logger; restore propagation for caplog."""
    yield
    arkcli_logger = logging.getLogger("arkcli")
    arkcli_logger.handlers = []
    arkcli_logger.propagate = True
    arkcli_logger.setLevel(logging.NOTSET)


@pytest.fixture
def mainnet():
    return NETWORKS["mainnet"]


@pytest.fixture
def devnet():
    return NETWORKS["devnet"]


@pytest.fixture
def fake_session():
    return FakeSession(node_routes())


@pytest.fixture
def context_factory(fake_session):
    """Builds real NetworkContexts bound to the fake session."""
    created: List[NetworkContext] = []

    def factory(profile, sink=None, timeout=10.0):
        context = NetworkContext(profile, sink=sink, timeout=timeout, session=fake_session)
        created.append(context)
        return context

    factory.created = created
    return factory


@pytest.fixture
def make_session():
    """FakeSession factory; defaults to a healthy mainnet node."""

    def factory(routes=None, fail_hosts=()):
        return FakeSession(node_routes() if routes is None else routes, fail_hosts=fail_hosts)

    return factory


@pytest.fixture
def make_routes():
    return node_routes


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def make_prompter():
    return FakePrompter
