"""
Episode Resolvers

The lookup stages between an episode ID and the Spotify track IDs:

    episode ID -> version ID -> record IDs -> external links -> track IDs

Each stage is a plain function over an input sequence returning a new
tuple; nothing is accumulated in place across calls.
"""

from __future__ import annotations

import logging
from itertools import chain
from typing import Iterable, Sequence, Tuple

from ...client.deadline import Deadline
from ...client.services import EpisodeClient, MusicClient, PlaylisterClient
from ...errors import MalformedLinkError, NotFoundError, NoVersionError
from .models import SPOTIFY_LINK_TYPE, ExternalLink

logger = logging.getLogger(__name__)

TRACK_ID_SEGMENT = 2


def resolve_version(episodes: EpisodeClient, episode_id: str, deadline: Deadline) -> str:
    """
    Resolve an episode to the ID of its first version.

    Only the first version of the first episode is considered; additional
    episodes or versions in the response are ignored.

    Raises:
        NotFoundError: If the lookup returns no episodes
        NoVersionError: If the first episode has no versions
        TransportError: If the lookup fails
    """
    result = episodes.lookup_episode(episode_id, deadline)
    if not result.episodes:
        raise NotFoundError("Episode not found", details={"episode_id": episode_id})
    versions = result.episodes[0].versions
    if not versions:
        raise NoVersionError("No Version available", details={"episode_id": episode_id})

    version_id = versions[0].id
    logger.info(f"Episode {episode_id} resolved to version {version_id}")
    return version_id


def resolve_records(playlister: PlaylisterClient, version_id: str, deadline: Deadline) -> Tuple[str, ...]:
    """Return the record ID of every segment of a version, in response order."""
    result = playlister.get_segments(version_id, deadline)
    record_ids = tuple(segment.record_id for segment in result.segments)
    logger.info(f"Version {version_id} has {len(record_ids)} records")
    return record_ids


def resolve_links(music: MusicClient, record_id: str, deadline: Deadline) -> Tuple[ExternalLink, ...]:
    """Return a record's external links, unfiltered."""
    result = music.get_record(record_id, deadline)
    logger.debug(f"Record {record_id} has {len(result.data.external_links)} external links")
    return tuple(result.data.external_links)


def resolve_all_links(
    music: MusicClient,
    record_ids: Iterable[str],
    deadline: Deadline,
) -> Tuple[ExternalLink, ...]:
    """Resolve links for each record in turn and concatenate them in record order."""
    return tuple(chain.from_iterable(resolve_links(music, record_id, deadline) for record_id in record_ids))


def extract_track_id(link: ExternalLink) -> str:
    """
    Take the track ID from a ``spotify:track:<id>`` link value.

    Raises:
        MalformedLinkError: If the value has fewer than three colon segments
    """
    segments = link.value.split(":")
    if len(segments) <= TRACK_ID_SEGMENT:
        raise MalformedLinkError(
            f"Malformed {link.type} link: {link.value!r}",
            value=link.value,
        )
    return segments[TRACK_ID_SEGMENT]


def select_tracks(links: Sequence[ExternalLink]) -> Tuple[str, ...]:
    """
    Keep SPOTIFY links and map each to its track ID.

    The type match is exact and case-sensitive. Order is preserved and
    duplicates are kept.
    """
    track_ids = tuple(extract_track_id(link) for link in links if link.type == SPOTIFY_LINK_TYPE)
    logger.info(f"Selected {len(track_ids)} Spotify tracks from {len(links)} links")
    return track_ids
