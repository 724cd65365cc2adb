import json
import sys
from pathlib import Path

import httpx
import pytest


# Allow running tests without an installed wheel by adding src/ to sys.path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


class FakeClock:
    """Manually advanced POSIX clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MarketplaceStub:
    """Routes ``httpx.MockTransport`` requests by path.

    Each route holds a list of responses; they are served in order and the
    last one repeats.  A route value that is an ``Exception`` is raised.
    """

    def __init__(self, routes: dict[str, list]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def set(self, path: str, *responses) -> None:
        self.routes[path] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"message": "not_found"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


def _load(fixtures_dir: Path, name: str) -> dict:
    return json.loads((fixtures_dir / name).read_text(encoding="utf-8"))


@pytest.fixture
def token_payload(fixtures_dir: Path) -> dict:
    return _load(fixtures_dir, "token_response.json")


@pytest.fixture
def users_me_payload(fixtures_dir: Path) -> dict:
    return _load(fixtures_dir, "users_me.json")


@pytest.fixture
def user_profile_payload(fixtures_dir: Path) -> dict:
    return _load(fixtures_dir, "user_profile.json")


@pytest.fixture
def search_payload(fixtures_dir: Path) -> dict:
    return _load(fixtures_dir, "search_response.json")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def marketplace(token_payload, users_me_payload, user_profile_payload, search_payload) -> MarketplaceStub:
    """A healthy marketplace: token, identity, seller profile and three listings."""
    return MarketplaceStub({
        "/oauth/token": [httpx.Response(200, json=token_payload)],
        "/users/me": [httpx.Response(200, json=users_me_payload)],
        "/users/184520391": [httpx.Response(200, json=user_profile_payload)],
        "/sites/MLB/search": [httpx.Response(200, json=search_payload)],
    })
