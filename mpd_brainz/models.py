"""Data models."""

import json
import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mpd_brainz import CLIENT_NAME, __version__
from mpd_brainz.normalize import normalize

# ListenBrainz refuses import payloads above this many listens
LISTENS_MAX_SIZE = 500


class ListenType(str, Enum):
    """Listen types accepted by the submit-listens endpoint."""

    SINGLE = "single"
    PLAYING_NOW = "playing_now"
    IMPORT = "import"


class TrackInfo(BaseModel):
    """Snapshot of the track the player reports at one point in time."""

    model_config = ConfigDict(frozen=True)

    artist: str = ""
    title: str = ""
    release: str = ""
    origin: str = ""
    service: str = ""
    duration: int = 0
    tags: list[str] = Field(default_factory=list)


class AdditionalInfo(BaseModel):
    """The additional_info block of a ListenBrainz track."""

    model_config = ConfigDict(frozen=True)

    media_player: str = ""
    music_service: str = ""
    music_service_name: str = ""
    origin_url: str = ""
    submission_client: str = CLIENT_NAME
    submission_client_version: str = __version__
    tags: list[str] = Field(default_factory=list)
    duration: int = 0


class TrackMetadata(BaseModel):
    """The track_metadata block of a ListenBrainz listen."""

    model_config = ConfigDict(frozen=True)

    artist_name: str = ""
    track_name: str = ""
    release_name: str = ""
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)


class Listen(BaseModel):
    """One playback of a track."""

    model_config = ConfigDict(frozen=True)

    listened_at: int = 0
    track_metadata: TrackMetadata

    @property
    def artist(self) -> str:
        return self.track_metadata.artist_name

    @property
    def title(self) -> str:
        return self.track_metadata.track_name

    def __str__(self) -> str:
        return f'"{self.artist} - {self.title}"'


class Listens(BaseModel):
    """Ordered listens submitted together under one listen type."""

    listen_type: ListenType
    payload: list[Listen] = Field(default_factory=list)

    @classmethod
    def new(cls, listen_type: ListenType) -> "Listens":
        """Create an empty batch of the given type."""
        return cls(listen_type=listen_type)

    @classmethod
    def from_track(
        cls, track: TrackInfo, listen_type: ListenType = ListenType.SINGLE
    ) -> "Listens":
        """Create a one-listen batch for a track heard now."""
        listens = cls.new(listen_type)
        listens.add_track(track)
        return listens

    def __len__(self) -> int:
        return len(self.payload)

    def __str__(self) -> str:
        if len(self) == 1:
            return str(self.payload[0])
        listens = ", ".join(str(listen) for listen in self.payload)
        return f"{{{self.listen_type.value}, [{listens}]}}"

    def add(
        self,
        artist: str,
        title: str,
        release: str = "",
        origin: str = "",
        service: str = "",
        listened_at: int = 0,
        duration: int = 0,
        tags: list[str] | None = None,
    ) -> None:
        """Append a listen, inferring missing tags from the title.

        Args:
            artist: Artist name, may be empty.
            title: Track title, may hold "Artist - Title" style strings.
            release: Album name.
            origin: File path or stream URL.
            service: Music service or radio station name.
            listened_at: Unix timestamp, 0 means now.
            duration: Track length in seconds, 0 when unknown.
            tags: Free form tags.

        """
        if listened_at == 0:
            listened_at = int(time.time())

        artist, title, release = normalize(artist, title, release)

        self.payload.append(
            Listen(
                listened_at=listened_at,
                track_metadata=TrackMetadata(
                    artist_name=artist,
                    track_name=title,
                    release_name=release,
                    additional_info=AdditionalInfo(
                        music_service=service,
                        origin_url=origin,
                        duration=duration,
                        tags=list(tags or []),
                    ),
                ),
            )
        )

    def add_track(self, track: TrackInfo, listened_at: int = 0) -> None:
        """Append a listen for a player snapshot."""
        self.add(
            track.artist,
            track.title,
            track.release,
            track.origin,
            track.service,
            listened_at=listened_at,
            duration=track.duration,
            tags=track.tags,
        )

    def is_nil(self) -> bool:
        """Tell whether the batch has nothing worth submitting."""
        if len(self) == 0:
            return True
        first = self.payload[0]
        return not first.artist or not first.title

    def equal(self, other: "Listens | None") -> bool:
        """Compare the first listens by artist and title only.

        Release, timestamp and origin are ignored so a stream that only
        changes its album tag is not reported as a new listen.
        """
        if other is None or len(self) == 0 or len(other) == 0:
            return False
        mine, theirs = self.payload[0], other.payload[0]
        return mine.artist == theirs.artist and mine.title == theirs.title

    def retyped(self, listen_type: ListenType) -> "Listens":
        """Copy the batch under another listen type."""
        return self.model_copy(
            update={"listen_type": listen_type, "payload": list(self.payload)}
        )

    def as_playing_now(self) -> "Listens":
        """Derive the playing_now batch: the first listen, without timestamp."""
        if len(self) == 0:
            raise ValueError("Cannot derive playing_now from an empty batch")
        first = self.payload[0].model_copy(update={"listened_at": 0})
        return Listens(listen_type=ListenType.PLAYING_NOW, payload=[first])

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body, leaving out empty values."""
        return _omit_empty(self.model_dump(mode="json"))

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_payload(), indent=indent, ensure_ascii=False)


def _omit_empty(data: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            cleaned[key] = _omit_empty(value)
        elif isinstance(value, list) and value and isinstance(value[0], dict):
            cleaned[key] = [_omit_empty(item) for item in value]
        elif value not in ("", 0, None, []):
            cleaned[key] = value
    return cleaned
