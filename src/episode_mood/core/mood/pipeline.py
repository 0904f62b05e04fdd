"""
Episode Mood Pipeline

Runs the five stages for one episode, strictly in order:

    1. resolve_version   episode ID -> version ID
    2. resolve_records   version ID -> record IDs
    3. resolve_all_links record IDs -> external links
    4. select_tracks     external links -> Spotify track IDs
    5. aggregate_mood    track IDs -> MoodResult

Every call shares one Deadline so the caller can bound the whole run.
Errors propagate as MoodError subclasses; the pipeline never prints or
exits.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ...client.deadline import Deadline
from ...client.services import EpisodeClient, MusicClient, PlaylisterClient, create_service_clients
from ...config import MoodConfig
from .aggregator import aggregate_mood
from .models import MoodResult
from .resolvers import resolve_all_links, resolve_records, resolve_version, select_tracks
from .spotify import SpotifyAudioClient

logger = logging.getLogger(__name__)


class MoodPipeline:
    """
    Computes the mood of an episode from its tracks.

    Example:
        >>> with MoodPipeline.from_config(load_config()) as pipeline:
        ...     mood = pipeline.run("b0abcdef")
        >>> print(mood.happiness, mood.chill_factor)
    """

    def __init__(
        self,
        episodes: EpisodeClient,
        playlister: PlaylisterClient,
        music: MusicClient,
        spotify: SpotifyAudioClient,
        timeout: Optional[float] = None,
    ):
        """
        Initialize pipeline.

        Args:
            episodes: Episode lookup client
            playlister: Segment mapping client
            music: Music metadata client
            spotify: Streaming service client
            timeout: End-to-end budget in seconds for one run (None = unbounded)
        """
        self.episodes = episodes
        self.playlister = playlister
        self.music = music
        self.spotify = spotify
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: MoodConfig,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> "MoodPipeline":
        """
        Build a pipeline from configuration.

        Args:
            config: Loaded configuration
            timeout: Overrides config.timeout when given
            http_client: One client shared by every service (e.g. a mocked transport)
        """
        episodes, playlister, music = create_service_clients(config, http_client)
        return cls(
            episodes,
            playlister,
            music,
            SpotifyAudioClient.from_config(config, http_client),
            timeout=timeout if timeout is not None else config.timeout,
        )

    def run(self, episode_id: str, deadline: Optional[Deadline] = None) -> MoodResult:
        """
        Compute the mood for one episode.

        Args:
            episode_id: Episode identifier
            deadline: Deadline to use instead of one built from ``timeout``

        Returns:
            MoodResult averaged over the episode's Spotify tracks

        Raises:
            MoodError: On any terminal failure of a stage
        """
        deadline = deadline or Deadline(self.timeout)
        logger.info(f"Computing mood for episode {episode_id}")

        version_id = resolve_version(self.episodes, episode_id, deadline)
        record_ids = resolve_records(self.playlister, version_id, deadline)
        links = resolve_all_links(self.music, record_ids, deadline)
        track_ids = select_tracks(links)
        return aggregate_mood(self.spotify, track_ids, deadline)

    def close(self) -> None:
        """Close every client the pipeline created; injected clients stay open."""
        for client in (self.episodes, self.playlister, self.music, self.spotify):
            client.close()

    def __enter__(self) -> "MoodPipeline":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def compute_episode_mood(
    config: MoodConfig,
    episode_id: str,
    timeout: Optional[float] = None,
    http_client: Optional[httpx.Client] = None,
) -> MoodResult:
    """Build a pipeline, run it once and close it."""
    with MoodPipeline.from_config(config, timeout=timeout, http_client=http_client) as pipeline:
        return pipeline.run(episode_id)
