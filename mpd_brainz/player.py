"""Module to read the current track from MPD."""

import logging

from mpd import ConnectionError as MPDConnectionError
from mpd import MPDClient, MPDError

from mpd_brainz.errors import FetchError
from mpd_brainz.models import TrackInfo

logger = logging.getLogger("player")

DEFAULT_ADDRESS = "localhost:6600"
DEFAULT_PORT = 6600
CONNECT_TIMEOUT = 10


def parse_address(address: str) -> tuple[str, int | None]:
    """Split an MPD address into host and port.

    Args:
        address: "host", "host:port" or the path of a Unix socket.

    Returns:
        tuple[str, int | None]: Host and port, port is None for sockets.

    """
    if address.startswith("/") or address.startswith("@"):
        return address, None
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORT
    try:
        return host or "localhost", int(port)
    except ValueError as e:
        raise FetchError(f"Invalid MPD address: {address}") from e


def _first(value: str | list[str] | None) -> str:
    """MPD repeats a tag as a list when a song carries it several times."""
    if isinstance(value, list):
        return value[0] if value else ""
    return value or ""


def song_to_track(song: dict) -> TrackInfo:
    """Map an MPD currentsong answer to a TrackInfo."""
    try:
        duration = int(float(_first(song.get("duration") or song.get("time"))))
    except ValueError:
        duration = 0
    return TrackInfo(
        artist=_first(song.get("artist")),
        title=_first(song.get("title")),
        release=_first(song.get("album")),
        origin=_first(song.get("file")),
        service=_first(song.get("name")),
        duration=duration,
    )


class MPDPlayer:
    """MPD connection exposing the current track."""

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        password: str = "",
        timeout: float = CONNECT_TIMEOUT,
        client: MPDClient | None = None,
    ) -> None:
        self.address = address
        self.password = password
        self.client = client if client is not None else MPDClient()
        self.client.timeout = timeout
        self.connected = False

    def __enter__(self) -> "MPDPlayer":
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    def connect(self) -> None:
        """Connect and authenticate to MPD.

        Raises:
            FetchError: MPD could not be reached or refused the password.

        """
        host, port = parse_address(self.address)
        try:
            self.client.connect(host, port)
            if self.password:
                self.client.password(self.password)
        except (MPDError, OSError) as e:
            self._drop()
            raise FetchError(f"Connecting to MPD at {self.address}: {e}") from e
        self.connected = True
        logger.info(f"Connected to MPD: {self.address}")

    def disconnect(self) -> None:
        if not self.connected:
            return
        try:
            self.client.close()
        except (MPDError, OSError) as e:
            logger.debug(f"Closing MPD connection: {e}")
        self._drop()
        logger.debug(f"Disconnected from MPD: {self.address}")

    def _drop(self) -> None:
        try:
            self.client.disconnect()
        except (MPDError, OSError) as e:
            logger.debug(f"Dropping MPD connection: {e}")
        self.connected = False

    def current_track(self) -> TrackInfo:
        """Get the track MPD is currently on.

        A connection lost on a previous call is reopened first.

        Raises:
            FetchError: MPD is unreachable or the answer is unusable.

        """
        if not self.connected:
            self.connect()
        try:
            song = self.client.currentsong()
        except (MPDConnectionError, OSError) as e:
            self._drop()
            raise FetchError(f"Lost connection to MPD: {e}") from e
        except MPDError as e:
            raise FetchError(f"Reading current song from MPD: {e}") from e
        if not isinstance(song, dict):
            raise FetchError(f"Unexpected currentsong answer from MPD: {song!r}")
        return song_to_track(song)
