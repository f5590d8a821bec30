from __future__ import annotations

from unittest.mock import MagicMock, patch

from peerlearn.messaging.config import StreamConfig
from peerlearn.messaging.stream_client import add_member, get_active_channel_ids, upsert_user

CONFIGURED = StreamConfig(api_key="key", api_secret="secret")
UNCONFIGURED = StreamConfig(api_key="", api_secret="")


# ── Active channels ──────────────────────────────────────────────────────


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_active_channels_keeps_group_channels_only(mock_stream):
    mock_stream.return_value.query_channels.return_value = {
        "channels": [
            {"channel": {"id": "group-ml"}},
            {"channel": {"id": "dm-alice-bob"}},
            {"channel": {"id": "group-react"}},
            {"channel": None},
        ]
    }
    assert get_active_channel_ids(CONFIGURED) == {"group-ml", "group-react"}

    args, kwargs = mock_stream.return_value.query_channels.call_args
    assert args[0] == {"type": "messaging"}
    assert args[1] == [{"field": "last_message_at", "direction": -1}]
    assert kwargs["limit"] == 30


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_active_channels_empty_on_failure(mock_stream):
    mock_stream.return_value.query_channels.side_effect = ConnectionError("down")
    assert get_active_channel_ids(CONFIGURED) == set()


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_unconfigured_client_is_never_built(mock_stream):
    assert get_active_channel_ids(UNCONFIGURED) == set()
    assert add_member("group-ml", "u-alice", "alice", UNCONFIGURED) is False
    assert get_active_channel_ids(StreamConfig(api_key="k", api_secret="s", enabled=False)) == set()
    mock_stream.assert_not_called()


# ── Add member ───────────────────────────────────────────────────────────


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_add_member_adds_and_welcomes(mock_stream):
    channel = MagicMock()
    mock_stream.return_value.channel.return_value = channel

    assert add_member("group-ml", "u-alice", "alice", CONFIGURED) is True
    mock_stream.return_value.channel.assert_called_once_with("messaging", "group-ml")
    assert channel.add_members.call_args.args[0] == ["u-alice"]
    message, sender = channel.send_message.call_args.args
    assert "alice" in message["text"]
    assert sender == "system"


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_add_member_reports_failure(mock_stream):
    mock_stream.return_value.channel.return_value.add_members.side_effect = RuntimeError("boom")
    assert add_member("group-ml", "u-alice", "alice", CONFIGURED) is False


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_add_member_without_channel_id(mock_stream):
    assert add_member(None, "u-alice", "alice", CONFIGURED) is False
    mock_stream.return_value.channel.assert_not_called()


# ── Upsert user ──────────────────────────────────────────────────────────


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_upsert_user_sends_profile_fields(mock_stream):
    assert upsert_user("u-alice", "alice", None, CONFIGURED) is True
    mock_stream.return_value.upsert_user.assert_called_once_with(
        {"id": "u-alice", "name": "alice", "image": ""}
    )


@patch("peerlearn.messaging.stream_client.StreamChat")
def test_upsert_user_failure_and_unconfigured(mock_stream):
    assert upsert_user("u-alice", "alice", config=UNCONFIGURED) is False
    mock_stream.assert_not_called()

    mock_stream.return_value.upsert_user.side_effect = ConnectionError("down")
    assert upsert_user("u-alice", "alice", config=CONFIGURED) is False
