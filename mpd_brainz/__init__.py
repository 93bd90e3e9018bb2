"""Scrobble MPD playback and Shazam libraries to ListenBrainz."""

__version__ = "0.2.0"

CLIENT_NAME = "mpd-brainz"
