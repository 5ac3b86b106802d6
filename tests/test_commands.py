import asyncio
from types import SimpleNamespace

from undelete import commands
from undelete.commands.handlers import all_commands


class FakeChannel:
    def __init__(self):
        self.sent = []

    async def send(self, content):
        self.sent.append(content)


def _message(content, author_id=42):
    return SimpleNamespace(
        content=content, author=SimpleNamespace(id=author_id), channel=FakeChannel()
    )


def _dispatch(app, message):
    return asyncio.run(
        commands.dispatch(None, app, message, prefix="/", bot_user_id=1, owner_id=42)
    )


def _app(service):
    return SimpleNamespace(service=service)


def test_registry_discovers_handlers():
    assert {"antidelete", "help"} <= set(all_commands())


def test_status_reports_flag_mode_and_size(service, store):
    app = _app(service)
    msg = _message("/antidelete status")

    assert _dispatch(app, msg) is True

    reply = msg.channel.sent[0]
    assert "State: ACTIVE" in reply
    assert "Mode: Inbox" in reply
    assert "Messages in cache: 0" in reply


def test_off_clears_cache_and_on_reenables(service):
    from undelete.memory.shadow import CachedMessage

    service.store.put("m1", CachedMessage(id="m1", sender_id="A", chat_id="C", captured_at=0.0, text_content="x"))
    app = _app(service)

    _dispatch(app, _message("/antidelete off"))
    assert service.enabled is False
    assert service.store.size() == 0

    msg = _message("/AntiDelete ON")
    _dispatch(app, msg)
    assert service.enabled is True
    assert "ENABLED" in msg.channel.sent[0]


def test_unauthorized_user_is_refused(service):
    msg = _message("/antidelete off", author_id=7)

    assert _dispatch(_app(service), msg) is True
    assert service.enabled is True
    assert "not authorized" in msg.channel.sent[0]


def test_non_command_messages_pass_through(service):
    assert _dispatch(_app(service), _message("hello /antidelete")) is False
    assert _dispatch(_app(service), _message("/unknown")) is False


def test_help_lists_commands(service):
    msg = _message("/help")
    _dispatch(_app(service), msg)
    assert msg.channel.sent == ["Available commands: antidelete, help"]


def test_handlers_expose_only_the_protocol():
    for handler in all_commands().values():
        public = {name for name in vars(handler) if not name.startswith("_")}
        assert public == {"command_str", "handle"}, handler.__name__
