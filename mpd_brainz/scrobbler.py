"""Module to scrobble MPD playback to ListenBrainz."""

import logging
import signal
import threading
from enum import Enum
from typing import Protocol

from mpd_brainz.errors import FetchError, SubmissionError
from mpd_brainz.models import Listens, ListenType, TrackInfo

logger = logging.getLogger("scrobbler")


class Player(Protocol):
    def current_track(self) -> TrackInfo: ...


class Submitter(Protocol):
    def submit(self, listens: Listens, listen_type: ListenType) -> None: ...


class ScrobblerState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class Scrobbler:
    """Poll the player and submit every new track once.

    A track is submitted twice: first as a full "single" listen, then as
    "playing_now". It only becomes the last listen once both went through,
    so a failure on either phase retries the whole track on the next tick.
    """

    def __init__(self, player: Player, client: Submitter, interval: float) -> None:
        self.player = player
        self.client = client
        self.interval = interval
        self.last_listen: Listens | None = None
        self.state = ScrobblerState.IDLE

    def tick(self) -> bool:
        """Sample the player once and submit the track if it changed.

        Returns:
            bool: True if a new track was submitted in both phases.

        """
        try:
            track = self.player.current_track()
        except FetchError as e:
            logger.error(f"Error obtaining current song from MPD: {e}")
            return False

        current_listen = Listens.from_track(track)
        if current_listen.equal(self.last_listen) or current_listen.is_nil():
            return False

        self.state = ScrobblerState.SUBMITTING
        try:
            return self._submit(current_listen)
        finally:
            self.state = ScrobblerState.IDLE

    def _submit(self, current_listen: Listens) -> bool:
        try:
            self.client.submit(current_listen, ListenType.SINGLE)
        except SubmissionError as e:
            logger.error(f"Submitting scrobble to ListenBrainz: {e}")
            return False
        try:
            self.client.submit(current_listen, ListenType.PLAYING_NOW)
        except SubmissionError as e:
            logger.error(f'Submitting "playing now" to ListenBrainz: {e}')
            return False
        self.last_listen = current_listen
        return True

    def run(self, stop: threading.Event | None = None) -> None:
        """Tick every interval until stop is set.

        The stop event is only looked at between ticks, a running submission
        always completes.
        """
        stop = stop if stop is not None else threading.Event()
        logger.debug(f"Scrobbling interval: {self.interval}s")
        while not stop.is_set():
            self.tick()
            stop.wait(self.interval)
        logger.info("Stopped scrobbling")


def install_signal_handlers(stop: threading.Event) -> None:
    """Set stop on SIGINT and SIGTERM."""

    def _handler(signum: int, frame: object) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, stopping")
        stop.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
