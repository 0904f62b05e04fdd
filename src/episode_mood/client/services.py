"""
Metadata Service Clients

Thin httpx clients for the three services that turn an episode ID into
external links:

    - EpisodeClient: episode lookup (episode ID -> versions)
    - PlaylisterClient: segment mapping (version ID -> record IDs)
    - MusicClient: music metadata over mutual TLS (record ID -> external links)

Each call takes the run's Deadline and uses what is left of it as the
request timeout. Any transport failure, non-2xx status or unparsable
body becomes a TransportError carrying the stage's failure message.
"""

from __future__ import annotations

import logging
import ssl
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..config import MoodConfig, format_url
from ..core.mood.models import EpisodeLookupResponse, MusicResponse, SegmentsResponse
from ..errors import ConfigurationError, DeadlineExceededError, TransportError
from .deadline import Deadline

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

EPISODE_QUERY = {"availability": "all", "mixin": "live"}


def get_json(
    client: httpx.Client,
    url: str,
    model: Type[ModelT],
    failure_message: str,
    deadline: Deadline,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> ModelT:
    """
    GET a URL and parse the JSON body into a pydantic model.

    Args:
        client: HTTP client to issue the request with
        url: Fully formatted URL
        model: Response model to validate the body against
        failure_message: Message of the TransportError raised on failure
        deadline: Run deadline; its remainder is the request timeout
        params: Extra query parameters merged into the URL
        headers: Extra request headers

    Raises:
        DeadlineExceededError: If the deadline is gone before or during the call
        TransportError: On connection errors, non-2xx status or a bad body
    """
    timeout = deadline.remaining()
    kwargs: Dict[str, Any] = {"params": params, "headers": headers}
    if timeout is not None:
        kwargs["timeout"] = timeout

    logger.debug(f"GET {url}")
    try:
        response = client.get(url, **kwargs)
        response.raise_for_status()
        return model.model_validate(response.json())
    except httpx.TimeoutException as e:
        if deadline.expired:
            raise DeadlineExceededError(
                f"{failure_message}: deadline exceeded", details={"url": url}
            ) from e
        raise TransportError(failure_message, details={"url": url, "cause": str(e)}) from e
    except httpx.HTTPStatusError as e:
        raise TransportError(
            failure_message,
            details={"url": url, "status_code": e.response.status_code},
        ) from e
    except httpx.HTTPError as e:
        raise TransportError(failure_message, details={"url": url, "cause": str(e)}) from e
    except (ValueError, ValidationError) as e:
        raise TransportError(failure_message, details={"url": url, "cause": str(e)}) from e


class ServiceClient:
    """Lazily created httpx client shared by one service's calls."""

    def __init__(self, url_template: str, http_client: Optional[httpx.Client] = None):
        self.url_template = url_template
        self._client = http_client
        # An injected client belongs to the caller and stays open on close()
        self._owns_client = http_client is None

    def _build_client(self) -> httpx.Client:
        return httpx.Client()

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._client and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class EpisodeClient(ServiceClient):
    """Episode lookup service."""

    def lookup_episode(self, episode_id: str, deadline: Deadline) -> EpisodeLookupResponse:
        url = format_url(self.url_template, episode_id)
        return get_json(
            self.client,
            url,
            EpisodeLookupResponse,
            "Failed to get Episode Information",
            deadline,
            params=EPISODE_QUERY,
        )


class PlaylisterClient(ServiceClient):
    """Segment mapping service."""

    def get_segments(self, version_id: str, deadline: Deadline) -> SegmentsResponse:
        url = format_url(self.url_template, version_id)
        return get_json(self.client, url, SegmentsResponse, "Failed to get Record IDs", deadline)


class MusicClient(ServiceClient):
    """
    Music metadata service.

    Requires a client certificate. The server certificate is not verified,
    matching the deployed service's self-signed endpoint.
    """

    def __init__(
        self,
        url_template: str,
        cert_file: str,
        key_file: str,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(url_template, http_client)
        self.cert_file = cert_file
        self.key_file = key_file

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        try:
            context.load_cert_chain(self.cert_file, self.key_file)
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(
                f"Failed to load client certificate {self.cert_file}: {e}",
                config_key="certFile",
            ) from e
        return context

    def _build_client(self) -> httpx.Client:
        return httpx.Client(verify=self._ssl_context())

    def get_record(self, record_id: str, deadline: Deadline) -> MusicResponse:
        url = format_url(self.url_template, record_id)
        return get_json(self.client, url, MusicResponse, "Failed to get External Links", deadline)


def create_service_clients(
    config: MoodConfig,
    http_client: Optional[httpx.Client] = None,
) -> tuple[EpisodeClient, PlaylisterClient, MusicClient]:
    """
    Create the three metadata clients from configuration.

    Args:
        config: Loaded configuration
        http_client: Shared client for all three services. When given, the
            music client does not load the certificate itself.
    """
    return (
        EpisodeClient(config.ibl_url, http_client),
        PlaylisterClient(config.playlister_url, http_client),
        MusicClient(config.music_url, config.cert_file, config.key_file, http_client),
    )
