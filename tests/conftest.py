import os, sys
import types
from pathlib import Path

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for undelete.config
os.environ.setdefault("DISCORD_API_TOKEN", "test-token")
os.environ.setdefault("BOT_USER_ID", "1")
os.environ.setdefault("OWNER_ID", "42")

from undelete.events import Attachment, MediaKind, ObservedMessage  # noqa: E402
from undelete.memory.shadow import ShadowStore  # noqa: E402
from undelete.recovery.routing import RoutingMode  # noqa: E402
from undelete.service import AntiDeleteService  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Returns canned bytes per ref; refs mapped to an exception raise it."""

    def __init__(self, payloads: dict | None = None) -> None:
        self.payloads = payloads or {}
        self.calls: list[tuple[str, MediaKind]] = []

    async def fetch(self, ref, kind):
        self.calls.append((ref, kind))
        result = self.payloads[ref]
        if isinstance(result, BaseException):
            raise result
        return result


class RecordingSender:
    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.sent: list[tuple[str, object]] = []
        self.fail_on = fail_on or set()
        self._calls = 0

    async def __call__(self, destination, payload):
        self._calls += 1
        if self._calls in self.fail_on:
            raise RuntimeError("send failed")
        self.sent.append((destination, payload))


def make_message(mid="m1", *, chat="C", sender="A", **kwargs) -> ObservedMessage:
    return ObservedMessage(id=mid, chat_id=chat, participant_id=sender, **kwargs)


def image_attachment(ref="img://1", **kwargs) -> Attachment:
    return Attachment(kind=MediaKind.IMAGE, ref=ref, mime_type="image/jpeg", **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return ShadowStore(tmp_path / "shadow.json.gz")


@pytest.fixture
def service(store):
    return AntiDeleteService(store, mode=RoutingMode.INBOX, ttl=300.0)


@pytest.fixture
def helpers():
    return types.SimpleNamespace(
        make_message=make_message,
        image_attachment=image_attachment,
        FakeFetcher=FakeFetcher,
        RecordingSender=RecordingSender,
    )
