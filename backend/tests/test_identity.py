"""Tests for session context and identity providers."""
import pytest

from marketplace.services.identity import (
    Identity,
    SessionContext,
    StaticTokenIdentityProvider,
    bearer_token,
)


def test_listeners_are_notified_on_change_only():
    context = SessionContext()
    seen = []
    context.subscribe(seen.append)

    alice = Identity(user_id="alice")
    context.set_identity(alice)
    context.set_identity(alice)
    context.sign_out()

    assert seen == [alice, None]
    assert not context.is_authenticated


def test_unsubscribe_detaches_listener_once():
    context = SessionContext()
    seen = []
    subscription = context.subscribe(seen.append)

    subscription.unsubscribe()
    subscription.unsubscribe()
    context.set_identity(Identity(user_id="alice"))

    assert seen == []
    assert context.listener_count == 0
    assert subscription.active is False


def test_static_tokens_parse_and_skip_malformed_pairs():
    provider = StaticTokenIdentityProvider.from_setting(" token-a:alice , broken, :nobody, token-b:bob")

    assert provider.tokens == {"token-a": "alice", "token-b": "bob"}


@pytest.mark.asyncio
async def test_static_provider_resolves_known_tokens():
    provider = StaticTokenIdentityProvider({"token-a": "alice"})

    session = await provider.session_for("token-a")

    assert session.identity == Identity(user_id="alice", access_token="token-a")
    assert await provider.resolve("unknown") is None
    assert await provider.resolve(None) is None


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc", "abc"),
        ("bearer  abc ", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected
