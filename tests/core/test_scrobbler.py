"""Test the scrobbling loop."""

import threading

import pytest

from mpd_brainz.errors import FetchError, SubmissionError, SubmissionTransportError
from mpd_brainz.models import Listens, ListenType, TrackInfo
from mpd_brainz.scrobbler import Scrobbler, ScrobblerState


class FakePlayer:
    """Returns the queued tracks, raising queued exceptions."""

    def __init__(self, *tracks: TrackInfo | Exception) -> None:
        self.tracks = list(tracks)
        self.calls = 0

    def current_track(self) -> TrackInfo:
        item = self.tracks[min(self.calls, len(self.tracks) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


class FakeClient:
    """Records submissions, failing the ones listed in fail_on."""

    def __init__(self, fail_on: list[ListenType] | None = None) -> None:
        self.fail_on = list(fail_on or [])
        self.calls: list[tuple[ListenType, dict]] = []
        self.states: list[ScrobblerState] = []
        self.scrobbler: Scrobbler | None = None

    def submit(self, listens: Listens, listen_type: ListenType) -> None:
        if listen_type == ListenType.PLAYING_NOW:
            sent = listens.as_playing_now()
        else:
            sent = listens.retyped(listen_type)
        self.calls.append((listen_type, sent.to_payload()))
        if self.scrobbler is not None:
            self.states.append(self.scrobbler.state)
        if self.fail_on and self.fail_on[0] == listen_type:
            self.fail_on.pop(0)
            raise SubmissionError("status: 503 Service Unavailable", status_code=503)

    @property
    def listen_types(self) -> list[ListenType]:
        return [listen_type for listen_type, _ in self.calls]


RADIO_TRACK = TrackInfo(title="A - B", origin="http://radio.example/stream")


def test_new_track_submits_both_phases() -> None:
    client = FakeClient()
    scrobbler = Scrobbler(FakePlayer(RADIO_TRACK, RADIO_TRACK), client, interval=1)
    client.scrobbler = scrobbler

    assert scrobbler.tick() is True
    assert client.listen_types == [ListenType.SINGLE, ListenType.PLAYING_NOW]
    assert client.states == [ScrobblerState.SUBMITTING, ScrobblerState.SUBMITTING]
    assert scrobbler.state == ScrobblerState.IDLE
    assert scrobbler.last_listen is not None
    assert scrobbler.last_listen.payload[0].artist == "A"
    assert scrobbler.last_listen.payload[0].title == "B"

    single_body = client.calls[0][1]
    assert single_body["payload"][0]["listened_at"] > 0
    playing_now_body = client.calls[1][1]
    assert "listened_at" not in playing_now_body["payload"][0]

    # Same raw track on the next tick: nothing to do
    assert scrobbler.tick() is False
    assert len(client.calls) == 2


def test_release_change_is_not_a_new_listen() -> None:
    client = FakeClient()
    player = FakePlayer(
        TrackInfo(artist="X", title="Y", release="R1"),
        TrackInfo(artist="X", title="Y", release="R2"),
    )
    scrobbler = Scrobbler(player, client, interval=1)
    scrobbler.tick()
    scrobbler.tick()
    assert len(client.calls) == 2


def test_track_change_submits_again() -> None:
    client = FakeClient()
    player = FakePlayer(
        TrackInfo(artist="X", title="Y"), TrackInfo(artist="X", title="Z")
    )
    scrobbler = Scrobbler(player, client, interval=1)
    scrobbler.tick()
    scrobbler.tick()
    assert len(client.calls) == 4
    assert scrobbler.last_listen.payload[0].title == "Z"


@pytest.mark.parametrize(
    "track",
    [
        TrackInfo(),
        TrackInfo(artist="X"),
        TrackInfo(title="Just a title"),
        TrackInfo(origin="/music/untagged.flac"),
    ],
)
def test_incomplete_track_is_skipped(track: TrackInfo) -> None:
    """Test tracks without artist or title are not submitted.

    Args:
        track: Track returned by the player.

    Returns:
        None.

    """
    client = FakeClient()
    scrobbler = Scrobbler(FakePlayer(track), client, interval=1)
    assert scrobbler.tick() is False
    assert client.calls == []
    assert scrobbler.last_listen is None


def test_fetch_error_skips_tick() -> None:
    client = FakeClient()
    player = FakePlayer(FetchError("Lost connection to MPD"), RADIO_TRACK)
    scrobbler = Scrobbler(player, client, interval=1)

    assert scrobbler.tick() is False
    assert client.calls == []
    assert scrobbler.last_listen is None

    assert scrobbler.tick() is True
    assert len(client.calls) == 2


def test_single_failure_retries_next_tick() -> None:
    client = FakeClient(fail_on=[ListenType.SINGLE])
    scrobbler = Scrobbler(FakePlayer(RADIO_TRACK), client, interval=1)

    assert scrobbler.tick() is False
    assert client.listen_types == [ListenType.SINGLE]
    assert scrobbler.last_listen is None
    assert scrobbler.state == ScrobblerState.IDLE

    assert scrobbler.tick() is True
    assert client.listen_types == [
        ListenType.SINGLE,
        ListenType.SINGLE,
        ListenType.PLAYING_NOW,
    ]


def test_playing_now_failure_resends_both_phases() -> None:
    client = FakeClient(fail_on=[ListenType.PLAYING_NOW])
    scrobbler = Scrobbler(FakePlayer(RADIO_TRACK), client, interval=1)

    assert scrobbler.tick() is False
    assert client.listen_types == [ListenType.SINGLE, ListenType.PLAYING_NOW]
    assert scrobbler.last_listen is None

    assert scrobbler.tick() is True
    assert client.listen_types == [
        ListenType.SINGLE,
        ListenType.PLAYING_NOW,
        ListenType.SINGLE,
        ListenType.PLAYING_NOW,
    ]
    assert scrobbler.last_listen.payload[0].artist == "A"


def test_transport_error_is_not_fatal() -> None:
    class OfflineClient(FakeClient):
        def submit(self, listens: Listens, listen_type: ListenType) -> None:
            super().submit(listens, listen_type)
            raise SubmissionTransportError("Error submitting request: ConnectionError")

    client = OfflineClient()
    scrobbler = Scrobbler(FakePlayer(RADIO_TRACK), client, interval=1)
    assert scrobbler.tick() is False
    assert scrobbler.tick() is False
    assert client.listen_types == [ListenType.SINGLE, ListenType.SINGLE]


def test_run_stops_when_event_set() -> None:
    stop = threading.Event()

    class StoppingClient(FakeClient):
        def submit(self, listens: Listens, listen_type: ListenType) -> None:
            super().submit(listens, listen_type)
            if listen_type == ListenType.PLAYING_NOW:
                stop.set()

    client = StoppingClient()
    scrobbler = Scrobbler(FakePlayer(RADIO_TRACK), client, interval=60)
    scrobbler.run(stop)

    # The in-flight tick completed and no new tick started
    assert client.listen_types == [ListenType.SINGLE, ListenType.PLAYING_NOW]
    assert scrobbler.last_listen is not None


def test_run_does_not_tick_when_already_stopped() -> None:
    stop = threading.Event()
    stop.set()
    player = FakePlayer(RADIO_TRACK)
    Scrobbler(player, FakeClient(), interval=60).run(stop)
    assert player.calls == 0
