"""Media track entities."""

from enum import Enum


class MediaTrack(str, Enum):
    """The two independently controlled background tracks."""

    VIDEO = "video"
    AUDIO = "audio"


class TrackState(str, Enum):
    """Playback state of a single track as seen by the synchronizer."""

    DETACHED = "detached"
    STOPPED = "stopped"
    PLAYING = "playing"
    BLOCKED = "blocked"
