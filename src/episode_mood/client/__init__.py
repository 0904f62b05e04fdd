"""
Episode Mood service clients.

HTTP clients for the episode lookup, segment mapping and music metadata
services, the run Deadline, and the error hierarchy.
"""

from .deadline import Deadline
from ..errors import (
    AuthError,
    ConfigurationError,
    DeadlineExceededError,
    MalformedLinkError,
    MoodError,
    NoMoodDataError,
    NotFoundError,
    NoVersionError,
    TransportError,
)
from .services import (
    EpisodeClient,
    MusicClient,
    PlaylisterClient,
    create_service_clients,
)

__all__ = [
    "Deadline",
    "AuthError",
    "ConfigurationError",
    "DeadlineExceededError",
    "MalformedLinkError",
    "MoodError",
    "NoMoodDataError",
    "NotFoundError",
    "NoVersionError",
    "TransportError",
    "EpisodeClient",
    "MusicClient",
    "PlaylisterClient",
    "create_service_clients",
]
