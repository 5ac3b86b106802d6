import asyncio
import datetime
from zoneinfo import ZoneInfo

import pytest

from undelete.capture import CaptureService
from undelete.events import (
    REVOKE,
    MediaKind,
    MediaPayload,
    MessageKey,
    MessageUpdate,
    TextPayload,
    VOICE_NOTE_MIME,
)
from undelete.exceptions import ConfigurationError
from undelete.memory.shadow import CachedMessage
from undelete.recovery import alert
from undelete.recovery.dispatcher import RecoveryDispatcher
from undelete.recovery.routing import RoutingMode, resolve_destination

BOT_ID = "bot-self"
OWNER = "owner-1"


def _revoke(mid="m1", *, chat="C", participant=None, actor=None, from_me=False, status=REVOKE):
    key = MessageKey(id=mid, chat_id=chat, participant_id=participant, from_me=from_me)
    return MessageUpdate(key=key, status=status, participant_id=actor)


def _dispatcher(service, sender, clock):
    return RecoveryDispatcher(
        service, sender, self_id=BOT_ID, owner_id=OWNER, tz=ZoneInfo("UTC"), clock=clock
    )


def _put(service, mid="m1", **kwargs):
    defaults = dict(id=mid, sender_id="A", chat_id="C", captured_at=1_700_000_000.0)
    defaults.update(kwargs)
    service.store.put(mid, CachedMessage(**defaults))


def test_text_only_recovery(service, clock, helpers):
    sender = helpers.RecordingSender()
    cap = CaptureService(service, helpers.FakeFetcher(), clock=clock)
    asyncio.run(cap.on_observed(helpers.make_message(body="hello")))

    sent = asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke(participant="A")))

    assert sent == 1
    assert len(sender.sent) == 1
    destination, payload = sender.sent[0]
    assert destination == BOT_ID
    assert isinstance(payload, TextPayload)
    assert "hello" in payload.text
    assert "Sender: @A" in payload.text
    assert service.store.get("m1") is None


def test_repeated_revoke_is_dispatched_once(service, clock, helpers):
    sender = helpers.RecordingSender()
    _put(service, text_content="once")
    dispatcher = _dispatcher(service, sender, clock)

    assert asyncio.run(dispatcher.on_updated(_revoke())) == 1
    assert asyncio.run(dispatcher.on_updated(_revoke())) == 0
    assert len(sender.sent) == 1


def test_concurrent_duplicate_revokes_dispatch_once(service, clock, helpers):
    sender = helpers.RecordingSender()
    _put(service, text_content="race")
    dispatcher = _dispatcher(service, sender, clock)

    async def both():
        return await asyncio.gather(
            dispatcher.on_updated(_revoke()), dispatcher.on_updated(_revoke())
        )

    assert sorted(asyncio.run(both())) == [0, 1]
    assert len(sender.sent) == 1


def test_non_revoke_and_self_deletions_are_ignored(service, clock, helpers):
    sender = helpers.RecordingSender()
    _put(service, text_content="keep")
    dispatcher = _dispatcher(service, sender, clock)

    assert asyncio.run(dispatcher.on_updated(_revoke(status="EDITED"))) == 0
    assert asyncio.run(dispatcher.on_updated(_revoke(status=None))) == 0
    assert asyncio.run(dispatcher.on_updated(_revoke(from_me=True))) == 0
    assert sender.sent == []
    assert service.store.get("m1") is not None


def test_uncached_revoke_is_noop(service, clock, helpers):
    sender = helpers.RecordingSender()
    assert asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke("ghost"))) == 0
    assert sender.sent == []


def test_media_with_caption_sends_three_messages_in_order(service, clock, helpers):
    sender = helpers.RecordingSender()
    _put(
        service,
        text_content="look at this",
        media=b"\x89PNG",
        media_kind=MediaKind.IMAGE,
        mime_type="image/png",
    )

    sent = asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke(actor="B")))

    assert sent == 3
    header, media, caption = (p for _, p in sender.sent)
    assert isinstance(header, TextPayload)
    assert "Type: IMAGE" in header.text
    assert "Deleted by: @B" in header.text
    assert header.mentions == ("A", "B")
    assert media == MediaPayload(kind=MediaKind.IMAGE, data=b"\x89PNG", mime_type="image/png")
    assert caption == TextPayload(text="look at this")


def test_voice_note_is_sent_as_push_to_talk(service, clock, helpers):
    sender = helpers.RecordingSender()
    _put(service, media=b"OggS", media_kind=MediaKind.VOICE_NOTE, mime_type="audio/ogg")

    asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke()))

    assert len(sender.sent) == 2
    _, voice = sender.sent[1]
    assert voice.ptt is True
    assert voice.mime_type == VOICE_NOTE_MIME
    assert voice.kind is MediaKind.VOICE_NOTE


def test_failed_send_does_not_block_siblings(service, clock, helpers):
    sender = helpers.RecordingSender(fail_on={1})
    _put(
        service,
        text_content="caption",
        media=b"data",
        media_kind=MediaKind.DOCUMENT,
        mime_type="application/pdf",
    )

    sent = asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke()))

    assert sent == 2
    assert [type(p) for _, p in sender.sent] == [MediaPayload, TextPayload]
    assert service.store.get("m1") is None


@pytest.mark.parametrize(
    "mode, expected",
    [
        (RoutingMode.SAME_CHAT, "C"),
        (RoutingMode.INBOX, BOT_ID),
        (RoutingMode.OWNER_PM, OWNER),
    ],
)
def test_routing_modes(service, clock, helpers, mode, expected):
    sender = helpers.RecordingSender()
    service.mode = mode
    _put(service, text_content="routed")

    asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke()))

    assert sender.sent[0][0] == expected


def test_owner_pm_without_owner_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        resolve_destination(RoutingMode.OWNER_PM, "C", self_id=BOT_ID, owner_id=None)


def test_disable_clears_state_and_later_revokes_are_noops(service, clock, helpers):
    sender = helpers.RecordingSender()
    for i in range(5):
        _put(service, f"m{i}", text_content=f"text {i}")

    service.disable()
    assert service.store.size() == 0

    service.enable()
    dispatcher = _dispatcher(service, sender, clock)
    for i in range(5):
        assert asyncio.run(dispatcher.on_updated(_revoke(f"m{i}"))) == 0
    assert sender.sent == []


def test_disabled_service_ignores_revokes(service, clock, helpers):
    sender = helpers.RecordingSender()
    _put(service, text_content="quiet")
    service.enabled = False

    assert asyncio.run(_dispatcher(service, sender, clock).on_updated(_revoke())) == 0
    assert service.store.get("m1") is not None


def test_alert_times_use_fixed_zone():
    entry = CachedMessage(
        id="m1", sender_id="123@s.whatsapp.net", chat_id="C", captured_at=0.0
    )
    now = datetime.datetime(2024, 3, 5, 14, 30, tzinfo=datetime.timezone.utc).timestamp()

    text = alert.build_alert(entry, None, tz=ZoneInfo("Asia/Tokyo"), now=now)

    assert "Type: TEXT" in text
    assert "Sender: @123" in text
    assert "Deleted by: @Unknown" in text
    assert "Sent: Jan 01, 09:00 AM" in text
    assert "Recovered: Mar 05, 11:30 PM" in text


class GatedFetcher:
    """Holds every download until ``release`` is set."""

    def __init__(self, data=b"\xff\xd8jpeg") -> None:
        self.data = data
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch(self, ref, kind):
        self.started.set()
        await self.release.wait()
        return self.data


def test_revoke_during_media_download_is_recovered(service, clock, helpers):
    sender = helpers.RecordingSender()
    dispatcher = _dispatcher(service, sender, clock)
    msg = helpers.make_message(attachments={MediaKind.IMAGE: helpers.image_attachment()})

    async def scenario():
        fetcher = GatedFetcher()
        cap = CaptureService(service, fetcher, clock=clock)
        capture = asyncio.create_task(cap.on_observed(msg))
        await fetcher.started.wait()

        revoke = asyncio.create_task(dispatcher.on_updated(_revoke()))
        await asyncio.sleep(0)
        assert not revoke.done()

        fetcher.release.set()
        return await capture, await revoke

    entry, sent = asyncio.run(scenario())

    assert entry is not None
    assert sent == 2
    assert [type(p) for _, p in sender.sent] == [TextPayload, MediaPayload]
    assert service.store.get("m1") is None
    assert service.store.size() == 0


def test_revoke_gives_up_on_a_stalled_capture(service, clock, helpers):
    sender = helpers.RecordingSender()
    dispatcher = RecoveryDispatcher(
        service, sender, self_id=BOT_ID, tz=ZoneInfo("UTC"), clock=clock, capture_wait=0.01
    )
    msg = helpers.make_message(attachments={MediaKind.IMAGE: helpers.image_attachment()})

    async def scenario():
        fetcher = GatedFetcher()
        cap = CaptureService(service, fetcher, clock=clock)
        capture = asyncio.create_task(cap.on_observed(msg))
        await fetcher.started.wait()

        sent = await dispatcher.on_updated(_revoke())
        fetcher.release.set()
        await capture
        return sent

    assert asyncio.run(scenario()) == 0
    assert sender.sent == []
