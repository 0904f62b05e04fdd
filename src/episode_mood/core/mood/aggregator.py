"""
Mood Aggregator

Turns Spotify track IDs into one averaged mood:

    happiness   = 5 * (valence - 0.5) * (danceability * energy * liveness)
    chillFactor = (tempo / 120) * ((loudness + 30) / 30)

tempo comes from the audio analysis track summary; every other input,
loudness included, comes from the audio features.

A track whose fetch fails is logged and left out. The run only fails
when no track is left to average.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

from ...client.deadline import Deadline
from ...errors import DeadlineExceededError, NoMoodDataError, TransportError
from .models import AudioMetrics, MoodFactor, MoodResult, TrackFailure
from .spotify import SpotifyAudioClient

logger = logging.getLogger(__name__)

HAPPINESS_SCALE = 5.0
NEUTRAL_VALENCE = 0.5
REFERENCE_TEMPO = 120.0
LOUDNESS_OFFSET = 30.0

NO_MOOD_DATA = "No mood data available"


def mood_factor(metrics: AudioMetrics) -> MoodFactor:
    """Compute one track's happiness and chill factor."""
    happiness = HAPPINESS_SCALE * (metrics.valence - NEUTRAL_VALENCE) * (
        metrics.danceability * metrics.energy * metrics.liveness
    )
    chill_factor = (metrics.tempo / REFERENCE_TEMPO) * ((metrics.loudness + LOUDNESS_OFFSET) / LOUDNESS_OFFSET)
    return MoodFactor(happiness=happiness, chill_factor=chill_factor)


def average_moods(factors: Sequence[MoodFactor]) -> Tuple[float, float]:
    """
    Arithmetic mean of happiness and chill factor.

    fsum keeps the result independent of track order.

    Raises:
        NoMoodDataError: If there are no factors to average
    """
    if not factors:
        raise NoMoodDataError(NO_MOOD_DATA)
    count = len(factors)
    happiness = math.fsum(f.happiness for f in factors) / count
    chill_factor = math.fsum(f.chill_factor for f in factors) / count
    return happiness, chill_factor


def aggregate_mood(
    spotify: SpotifyAudioClient,
    track_ids: Sequence[str],
    deadline: Deadline,
) -> MoodResult:
    """
    Fetch audio metrics for each track in turn and reduce them to a mood.

    Args:
        spotify: Streaming service client
        track_ids: Spotify track IDs, possibly with duplicates
        deadline: Run deadline

    Returns:
        MoodResult over the tracks that could be fetched

    Raises:
        AuthError: If no access token can be obtained
        DeadlineExceededError: If the deadline runs out mid-run
        NoMoodDataError: If there are no tracks, or every track failed
    """
    if not track_ids:
        logger.warning("No Spotify tracks to aggregate")
        raise NoMoodDataError(NO_MOOD_DATA, details={"track_count": 0})

    spotify.authenticate(deadline)

    factors: List[MoodFactor] = []
    failures: List[TrackFailure] = []

    for track_id in track_ids:
        try:
            metrics = spotify.fetch_audio_metrics(track_id, deadline)
        except DeadlineExceededError:
            raise
        except TransportError as e:
            logger.warning(f"Skipping track {track_id}: {e.message}")
            failures.append(TrackFailure(track_id=track_id, reason=e.message))
            continue

        factor = mood_factor(metrics)
        if not (math.isfinite(factor.happiness) and math.isfinite(factor.chill_factor)):
            logger.warning(f"Skipping track {track_id}: non-finite audio metrics")
            failures.append(TrackFailure(track_id=track_id, reason="non-finite audio metrics"))
            continue
        factors.append(factor)

    if not factors:
        raise NoMoodDataError(
            NO_MOOD_DATA,
            details={"track_count": len(track_ids), "failed_tracks": [f.track_id for f in failures]},
        )

    happiness, chill_factor = average_moods(factors)
    logger.info(
        f"Mood over {len(factors)}/{len(track_ids)} tracks: "
        f"happiness={happiness:.3f}, chill={chill_factor:.3f}"
    )
    return MoodResult(
        happiness=happiness,
        chill_factor=chill_factor,
        track_count=len(factors),
        failed_tracks=tuple(failures),
    )
