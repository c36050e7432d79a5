# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.net",
#   "purpose": "HTTPX client factory, Tenacity retry policy, and GitHub listing client.",
#   "sections": [
#     {
#       "id": "build-http-client",
#       "name": "build_http_client",
#       "anchor": "function-build-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "create-retry-policy",
#       "name": "create_retry_policy",
#       "anchor": "function-create-retry-policy",
#       "kind": "function"
#     },
#     {
#       "id": "request-with-retries",
#       "name": "request_with_retries",
#       "anchor": "function-request-with-retries",
#       "kind": "function"
#     },
#     {
#       "id": "githubclient",
#       "name": "GitHubClient",
#       "anchor": "class-githubclient",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Network access for extraction jobs.

Architecture:
1. ``build_http_client(settings)`` → configured ``httpx.Client`` (explicit
   timeout, pool limits, headers, optional bearer token).
2. ``request_with_retries`` wraps one request in a Tenacity policy that
   retries transport errors, 429 and 5xx responses with jittered exponential
   backoff, and hands back the last response once attempts run out.
3. ``GitHubClient`` turns responses into the branch info, proposal listing,
   previous results, and document text the job needs, raising the job-level
   or per-document exceptions from :mod:`.errors`.

``httpx.Client`` is safe to share between the scheduler's worker threads.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from .errors import DocumentFetchError, ListingError, PreviousResultsError
from .settings import ExtractionSettings

__all__ = [
    "GitHubClient",
    "build_http_client",
    "create_retry_policy",
    "request_with_retries",
]

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def build_http_client(
    settings: ExtractionSettings, *, transport: Optional[httpx.BaseTransport] = None
) -> httpx.Client:
    """Build an HTTPX client from settings; ``transport`` is injectable for tests."""

    headers = {
        "User-Agent": settings.user_agent,
        "Accept": "application/vnd.github+json, */*",
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return httpx.Client(
        timeout=httpx.Timeout(settings.timeout_s),
        limits=httpx.Limits(max_connections=32, max_keepalive_connections=16),
        headers=headers,
        follow_redirects=True,
        transport=transport,
    )


def _is_retryable_response(response: Any) -> bool:
    return isinstance(response, httpx.Response) and response.status_code in _RETRYABLE_STATUS


def _last_outcome(retry_state: RetryCallState) -> Any:
    """Return the final response instead of raising ``RetryError``."""

    return retry_state.outcome.result()  # type: ignore[union-attr]


def create_retry_policy(retries: int, *, wait: Optional[wait_base] = None) -> Retrying:
    """Tenacity policy allowing ``retries`` additional attempts."""

    return Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait if wait is not None else wait_exponential_jitter(initial=0.5, max=8.0),
        retry=retry_if_exception_type(httpx.TransportError)
        | retry_if_result(_is_retryable_response),
        before_sleep=before_sleep_log(logger, logging.WARNING, exc_info=False),
        retry_error_callback=_last_outcome,
        reraise=True,
    )


def request_with_retries(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    retries: int = 3,
    wait: Optional[wait_base] = None,
    **kwargs: Any,
) -> httpx.Response:
    """Issue ``method url`` under the retry policy and return the final response.

    Transport errors still raise once attempts are exhausted; HTTP error
    statuses are returned for the caller to inspect.
    """

    policy = create_retry_policy(retries, wait=wait)
    return policy(client.request, method, url, **kwargs)


class GitHubClient:
    """Typed access to the repository endpoints an extraction job reads."""

    def __init__(
        self,
        settings: ExtractionSettings,
        client: Optional[httpx.Client] = None,
        *,
        wait: Optional[wait_base] = None,
    ) -> None:
        self.settings = settings
        self._owns_client = client is None
        self.client = client if client is not None else build_http_client(settings)
        self._wait = wait

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, url: str, **kwargs: Any) -> httpx.Response:
        response = request_with_retries(
            self.client, "GET", url, retries=self.settings.retries, wait=self._wait, **kwargs
        )
        response.raise_for_status()
        return response

    def fetch_branch(self) -> dict[str, Any]:
        """Return the branch object (``{"name", "commit": {"sha", ...}}``)."""

        url = self.settings.branch_url
        try:
            payload = self._get(url).json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ListingError("Unable to fetch branch information", url=url, cause=exc) from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("commit"), dict):
            raise ListingError("Branch information has no commit", url=url)
        return payload

    def fetch_proposal_listing(self, commit: str) -> list[dict[str, Any]]:
        """Return the content items of the proposals directory at ``commit``."""

        url = self.settings.contents_url
        try:
            payload = self._get(url, params={"ref": commit}).json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ListingError("Unable to fetch proposal listing", url=url, cause=exc) from exc
        if not isinstance(payload, list):
            raise ListingError("Proposal listing is not a list", url=url)
        return payload

    def fetch_previous_results(self) -> Any:
        """Return the decoded previously published metadata."""

        url = self.settings.previous_results_url
        try:
            return self._get(url).json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PreviousResultsError(
                "Unable to fetch previous results", url=url, cause=exc
            ) from exc

    def fetch_text(self, url: str, *, doc_id: Optional[str] = None) -> str:
        """Return the body of ``url`` as text."""

        try:
            return self._get(url).text
        except httpx.HTTPError as exc:
            raise DocumentFetchError(f"Unable to fetch {url}: {exc}", doc_id=doc_id, url=url) from exc
