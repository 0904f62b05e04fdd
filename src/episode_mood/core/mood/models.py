"""
Episode Mood Models

Wire models (pydantic) for the bodies returned by the episode lookup,
segment mapping, music metadata and streaming services, plus the plain
dataclasses that flow between pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

SPOTIFY_LINK_TYPE = "SPOTIFY"


# =============================================================================
# Service responses
# =============================================================================


class Version(BaseModel):
    """A renderable instance of an episode."""
    id: str


class Episode(BaseModel):
    versions: List[Version] = Field(default_factory=list)


class EpisodeLookupResponse(BaseModel):
    """Episode lookup body: ``episodes[].versions[].id``."""
    episodes: List[Episode] = Field(default_factory=list)


class Segment(BaseModel):
    record_id: str


class SegmentsResponse(BaseModel):
    """Segment mapping body: ``segments[].record_id``."""
    segments: List[Segment] = Field(default_factory=list)


class ExternalLink(BaseModel):
    """A typed pointer from a record to another system, e.g. SPOTIFY."""
    model_config = ConfigDict(frozen=True)

    type: str
    value: str


class MusicData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    external_links: List[ExternalLink] = Field(default_factory=list, alias="external-links")


class MusicResponse(BaseModel):
    """Music metadata body: ``data.external-links[].{type,value}``."""
    data: MusicData = Field(default_factory=MusicData)


class TokenResponse(BaseModel):
    """Client-credentials token body."""
    access_token: str = Field(..., min_length=1)
    expires_in: float = Field(3600, gt=0, strict=True, allow_inf_nan=False)


class AudioFeaturesResponse(BaseModel):
    """Subset of the streaming service audio-features object used for mood."""
    valence: float
    danceability: float
    energy: float
    liveness: float
    loudness: float


class AnalysisTrack(BaseModel):
    tempo: float


class AudioAnalysisResponse(BaseModel):
    """Audio-analysis body; only the track-level summary is read."""
    track: AnalysisTrack


# =============================================================================
# CLI output
# =============================================================================


class MoodResponse(BaseModel):
    """Success envelope written to stdout."""
    model_config = ConfigDict(populate_by_name=True)

    chill_factor: float = Field(..., alias="chillFactor")
    happiness_factor: float = Field(..., alias="happinessFactor")


class ErrorResponse(BaseModel):
    """Failure envelope written to stdout."""
    error: str


# =============================================================================
# Pipeline values
# =============================================================================


@dataclass(frozen=True)
class AudioMetrics:
    """Per-track features and analysis from the streaming service."""
    track_id: str
    valence: float
    danceability: float
    energy: float
    liveness: float
    loudness: float  # from the features bundle, not the analysis
    tempo: float  # from the analysis track summary

    @classmethod
    def from_api_responses(
        cls,
        track_id: str,
        features: AudioFeaturesResponse,
        analysis: AudioAnalysisResponse,
    ) -> "AudioMetrics":
        return cls(
            track_id=track_id,
            valence=features.valence,
            danceability=features.danceability,
            energy=features.energy,
            liveness=features.liveness,
            loudness=features.loudness,
            tempo=analysis.track.tempo,
        )


@dataclass(frozen=True)
class MoodFactor:
    """One track's derived mood."""
    happiness: float
    chill_factor: float


@dataclass(frozen=True)
class TrackFailure:
    """A track excluded from aggregation and why."""
    track_id: str
    reason: str


@dataclass(frozen=True)
class MoodResult:
    """Averaged mood across all successfully fetched tracks."""
    happiness: float
    chill_factor: float
    track_count: int
    failed_tracks: Tuple[TrackFailure, ...] = field(default_factory=tuple)

    def to_response(self) -> MoodResponse:
        return MoodResponse(chill_factor=self.chill_factor, happiness_factor=self.happiness)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase output mapping."""
        return self.to_response().model_dump(by_alias=True)
