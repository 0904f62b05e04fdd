"""
Episode Mood - happiness and chill factor of a broadcast episode.

Resolves an episode to its tracks through the episode lookup, segment
mapping and music metadata services, then averages a mood score over
the tracks' Spotify audio features.

Usage:
    from episode_mood import load_config, compute_episode_mood

    mood = compute_episode_mood(load_config("config.json"), "b0abcdef")
    print(mood.to_dict())
"""

__version__ = "1.0.0"

from .config import MoodConfig, load_config
from .errors import (
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
from .core.mood.models import MoodResult
from .core.mood.pipeline import MoodPipeline, compute_episode_mood

__all__ = [
    "__version__",
    # Config
    "MoodConfig",
    "load_config",
    # Pipeline
    "MoodPipeline",
    "MoodResult",
    "compute_episode_mood",
    # Errors
    "MoodError",
    "AuthError",
    "ConfigurationError",
    "DeadlineExceededError",
    "MalformedLinkError",
    "NoMoodDataError",
    "NotFoundError",
    "NoVersionError",
    "TransportError",
]
