"""
Spotify Audio Client

Fetches audio features and audio analysis for single tracks from the
Spotify Web API. These supply the inputs of the per-track mood formula.

Uses Client Credentials Flow (no user auth required). One token is
fetched per client and reused for every track until it nears expiry.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ...client.deadline import Deadline
from ...client.services import get_json
from ...config import SPOTIFY_API_URL, SPOTIFY_TOKEN_URL, MoodConfig
from ...errors import AuthError, DeadlineExceededError
from .models import AudioAnalysisResponse, AudioFeaturesResponse, AudioMetrics, TokenResponse

logger = logging.getLogger(__name__)

# Seconds shaved off expires_in so a token is never used right at expiry
TOKEN_EXPIRY_MARGIN = 60


class SpotifyAudioClient:
    """
    Client for per-track audio data from Spotify.

    Example:
        >>> spotify = SpotifyAudioClient("client-id", "client-secret")
        >>> spotify.authenticate(Deadline(30))
        >>> metrics = spotify.fetch_audio_metrics("4uLU6hMCjMI75M1A2tKUQC", Deadline(30))
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = SPOTIFY_TOKEN_URL,
        api_base: str = SPOTIFY_API_URL,
        http_client: Optional[httpx.Client] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.api_base = api_base.rstrip("/")

        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0

        self._http_client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_config(cls, config: MoodConfig, http_client: Optional[httpx.Client] = None) -> "SpotifyAudioClient":
        return cls(
            config.spotify_client_id,
            config.spotify_client_secret,
            token_url=config.spotify_token_url,
            api_base=config.spotify_api_url,
            http_client=http_client,
        )

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.Client()
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> "SpotifyAudioClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _get_auth_header(self) -> str:
        """Get base64 encoded auth header."""
        auth_str = f"{self.client_id}:{self.client_secret}"
        return base64.b64encode(auth_str.encode()).decode()

    def authenticate(self, deadline: Deadline) -> str:
        """
        Ensure we have a valid access token.

        Raises:
            AuthError: If the token exchange fails for any reason
            DeadlineExceededError: If the deadline has already passed
        """
        if self._access_token and time.time() < self._token_expires_at:
            return self._access_token

        logger.debug("Fetching new Spotify access token")

        timeout = deadline.remaining()
        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = self.client.post(
                self.token_url,
                headers={
                    "Authorization": f"Basic {self._get_auth_header()}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials"},
                **kwargs,
            )
            response.raise_for_status()
            token = TokenResponse.model_validate(response.json())
        except httpx.TimeoutException as e:
            if deadline.expired:
                raise DeadlineExceededError("couldn't get token: deadline exceeded") from e
            raise AuthError(f"couldn't get token: {e}") from e
        except httpx.HTTPStatusError as e:
            raise AuthError(
                f"couldn't get token: HTTP {e.response.status_code}",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise AuthError(f"couldn't get token: {e}") from e
        except (ValueError, ValidationError) as e:
            raise AuthError("couldn't get token: malformed token response") from e

        self._access_token = token.access_token
        self._token_expires_at = time.time() + token.expires_in - TOKEN_EXPIRY_MARGIN

        logger.debug("Spotify access token refreshed")
        return self._access_token

    def _api_request(self, endpoint: str, model, failure_message: str, deadline: Deadline):
        """Make authenticated API request."""
        token = self.authenticate(deadline)
        return get_json(
            self.client,
            f"{self.api_base}/{endpoint}",
            model,
            failure_message,
            deadline,
            headers={"Authorization": f"Bearer {token}"},
        )

    def fetch_audio_features(self, track_id: str, deadline: Deadline) -> AudioFeaturesResponse:
        return self._api_request(
            f"audio-features/{quote(track_id, safe='')}",
            AudioFeaturesResponse,
            f"Failed to get audio features for {track_id}",
            deadline,
        )

    def fetch_audio_analysis(self, track_id: str, deadline: Deadline) -> AudioAnalysisResponse:
        return self._api_request(
            f"audio-analysis/{quote(track_id, safe='')}",
            AudioAnalysisResponse,
            f"Failed to get audio analysis for {track_id}",
            deadline,
        )

    def fetch_audio_metrics(self, track_id: str, deadline: Deadline) -> AudioMetrics:
        """
        Fetch features then analysis for one track.

        Args:
            track_id: Spotify track ID
            deadline: Run deadline

        Returns:
            AudioMetrics combining both bundles

        Raises:
            TransportError: If either request fails
        """
        features = self.fetch_audio_features(track_id, deadline)
        analysis = self.fetch_audio_analysis(track_id, deadline)
        return AudioMetrics.from_api_responses(track_id, features, analysis)
