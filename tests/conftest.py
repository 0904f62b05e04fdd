"""Shared fixtures: a fake backend for every service behind httpx.MockTransport."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from episode_mood.client.services import EpisodeClient, MusicClient, PlaylisterClient
from episode_mood.config import MoodConfig
from episode_mood.core.mood.pipeline import MoodPipeline
from episode_mood.core.mood.spotify import SpotifyAudioClient

FIXTURES = Path(__file__).parent / "fixtures"

IBL_URL = "http://ibl.test/ibl/v1/episodes/%s"
PLAYLISTER_URL = "http://playlister.test/versions/%s/segments"
MUSIC_URL = "https://music.test/records/%s"
TOKEN_URL = "http://accounts.test/api/token"
SPOTIFY_API = "http://api.spotify.test/v1"

CONFIG_DICT = {
    "certFile": "/etc/pki/client.crt",
    "keyFile": "/etc/pki/client.key",
    "spotifyClientId": "client-id",
    "spotifyClientSecret": "client-secret",
    "musicUrl": MUSIC_URL,
    "iblUrl": IBL_URL,
    "playlisterUrl": PLAYLISTER_URL,
    "spotifyTokenUrl": TOKEN_URL,
    "spotifyApiUrl": SPOTIFY_API,
}

FEATURES = {
    "valence": 0.8,
    "danceability": 0.6,
    "energy": 0.7,
    "liveness": 0.5,
    "loudness": -10.0,
}


def load_fixture(name: str) -> Any:
    with open(FIXTURES / name) as f:
        return json.load(f)


Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Routes requests by host + path; unknown routes answer 404."""

    def __init__(self):
        self.routes: Dict[str, Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(self, url: str, json_body: Any = None, status: int = 200, handler: Optional[Handler] = None) -> None:
        parsed = httpx.URL(url)
        key = f"{parsed.host}{parsed.path}"
        self.routes[key] = handler or (lambda request: httpx.Response(status, json=json_body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.url.host}{request.url.path}")
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    # Convenience routes -----------------------------------------------------

    def add_episode(self, episode_id: str, body: Any) -> None:
        self.add(IBL_URL % episode_id, body)

    def add_segments(self, version_id: str, record_ids: List[str]) -> None:
        self.add(PLAYLISTER_URL % version_id, {"segments": [{"record_id": r} for r in record_ids]})

    def add_links(self, record_id: str, links: List[Dict[str, str]]) -> None:
        self.add(MUSIC_URL % record_id, {"data": {"external-links": links}})

    def add_token(self, token: str = "token-123", status: int = 200) -> None:
        body = {"access_token": token, "token_type": "Bearer", "expires_in": 3600}
        self.add(TOKEN_URL, body if status == 200 else {"error": "invalid_client"}, status=status)

    def add_track(self, track_id: str, features: Optional[Dict[str, float]] = None, tempo: float = 130.0) -> None:
        self.add(f"{SPOTIFY_API}/audio-features/{track_id}", {"id": track_id, **(features or FEATURES)})
        self.add(f"{SPOTIFY_API}/audio-analysis/{track_id}", {"track": {"tempo": tempo, "loudness": -99.0}})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http_client(backend):
    client = backend.client()
    yield client
    client.close()


@pytest.fixture
def spotify(http_client):
    return SpotifyAudioClient("client-id", "client-secret", TOKEN_URL, SPOTIFY_API, http_client=http_client)


@pytest.fixture
def pipeline(http_client, spotify):
    return MoodPipeline(
        EpisodeClient(IBL_URL, http_client),
        PlaylisterClient(PLAYLISTER_URL, http_client),
        MusicClient(MUSIC_URL, "client.crt", "client.key", http_client),
        spotify,
    )


@pytest.fixture
def config():
    return MoodConfig(
        cert_file=CONFIG_DICT["certFile"],
        key_file=CONFIG_DICT["keyFile"],
        spotify_client_id="client-id",
        spotify_client_secret="client-secret",
        music_url=MUSIC_URL,
        ibl_url=IBL_URL,
        playlister_url=PLAYLISTER_URL,
        spotify_token_url=TOKEN_URL,
        spotify_api_url=SPOTIFY_API,
    )


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG_DICT))
    return path


@pytest.fixture
def scenario(backend):
    """The single-episode, single-track scenario: epid1 -> vpid1 -> rec1 -> tid1."""
    backend.add_episode("epid1", load_fixture("episode.json"))
    backend.add_segments("vpid1", ["rec1"])
    backend.add_links("rec1", [{"type": "SPOTIFY", "value": "spotify:track:tid1"}])
    backend.add_token()
    backend.add_track("tid1")
    return backend
