"""HTTP client for the release endpoints of the error-tracking API.

Three calls make up a release:

- ``POST /releases/`` creates the release record
- ``POST /releases/{version}/files/`` uploads one artifact (multipart)
- ``PUT /releases/{version}/`` (or ``POST .../deploy``) finalizes it

All of them live under ``/api/0/projects/{organization}/{project}``.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from sourcemap_release.exceptions import APIError, EncodingError, FileProcessingError, TransportError
from sourcemap_release.http_client import get_default_headers
from sourcemap_release.logging_config import logger

from .protocol import Artifact, ReleaseConfig

# Statuses worth another attempt: rate limiting and server-side failures
RETRY_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# method, path template per finalize contract
FINALIZE_ENDPOINTS = {
    "release": ("PUT", "/releases/{version}/"),
    "deploy": ("POST", "/releases/{version}/deploy"),
}


def _get_current_utc_timestamp() -> str:
    """
    Generate current UTC timestamp in ISO-8601 format.

    Returns:
        Current UTC timestamp with milliseconds (e.g., "2024-12-19T14:30:00.000Z")
    """
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_json_dict(response: requests.Response) -> Dict[str, Any]:
    """
    Parse a successful response body into a dict.

    An empty body is treated as an empty object.

    Raises:
        EncodingError: If the body is not a JSON object
    """
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError as e:
        raise EncodingError(f"Release API returned a non-JSON body: {e}")
    if not isinstance(data, dict):
        raise EncodingError(f"Release API returned {type(data).__name__}, expected a JSON object")
    return data


def _error_detail(response: requests.Response) -> str:
    """Extract the service's error detail from a failed response, if any."""
    try:
        data = response.json()
    except ValueError:
        text = response.text or ""
        return f" - Response: {text[:500]}" if text else ""
    if isinstance(data, dict) and "detail" in data:
        return f" - {data['detail']}"
    return f" - {data}" if data else ""


class ReleaseClient:
    """
    Thin wrapper over the release API.

    The client holds no state beyond its configuration; every call is an
    independent request with its own retry loop.

    Example:
        client = ReleaseClient(config)
        client.create_release("v1")
        client.upload_artifact("v1", Artifact("app.js", "dist/app.js"), "~/static/app.js")
        client.finalize_release("v1")
    """

    def __init__(self, config: ReleaseConfig):
        self._config = config

    @property
    def base_url(self) -> str:
        organization = quote(self._config.organization, safe="")
        project = quote(self._config.project, safe="")
        return f"{self._config.api_base_url}/api/0/projects/{organization}/{project}"

    def create_release(self, version: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Create a new release.

        Args:
            version: Release version
            metadata: Optional ``ref``/``refs``/``commits`` fields. Defaults to
                the ones from the configuration.

        Returns:
            The release record returned by the API

        Raises:
            TransportError: If the request could not be delivered
            APIError: If the API rejected the request
            EncodingError: If the API response is not JSON
        """
        if metadata is None:
            metadata = self._config.release_metadata

        body: Dict[str, Any] = {"version": version}
        for key in ("ref", "refs", "commits"):
            if metadata.get(key):
                body[key] = metadata[key]

        logger.info(f"Creating release {version}")
        return self._request("POST", "/releases/", json=body, action="create release")

    def upload_artifact(self, version: str, artifact: Artifact, public_name: str) -> Dict[str, Any]:
        """
        Upload one artifact as a release file.

        Scripts carry a ``Sourcemap:`` header field pointing at their sibling
        ``.map`` file so the service can link the two.

        Args:
            version: Release version
            artifact: Artifact to upload
            public_name: Tilde-prefixed public name (e.g. ``~/static/app.js``)

        Returns:
            The file record returned by the API

        Raises:
            FileProcessingError: If the artifact cannot be read
            TransportError: If the request could not be delivered
            APIError: If the API rejected the upload
            EncodingError: If the API response is not JSON
        """
        try:
            with open(artifact.file_system_path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise FileProcessingError(f"Failed to read {artifact.file_system_path}: {e}")

        data = {"name": public_name}
        if not artifact.is_source_map:
            data["header"] = f"Sourcemap:{artifact.sourcemap_name}"

        logger.debug(f"Uploading {artifact.name} as {public_name}")
        return self._request(
            "POST",
            f"/releases/{quote(version, safe='')}/files/",
            data=data,
            files={"file": (artifact.name, content)},
            action=f"upload {artifact.name}",
        )

    def finalize_release(self, version: str) -> Dict[str, Any]:
        """
        Mark the release as finalized/deployed.

        Raises:
            TransportError: If the request could not be delivered
            APIError: If the API rejected the request
            EncodingError: If the API response is not JSON
        """
        method, template = FINALIZE_ENDPOINTS[self._config.finalize_mode]
        body = {
            "projects": [self._config.project],
            "dateReleased": _get_current_utc_timestamp(),
        }

        logger.info(f"Finalizing release {version}")
        return self._request(
            method,
            template.format(version=quote(version, safe="")),
            json=body,
            action="finalize release",
        )

    def _request(self, method: str, path: str, action: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Send a request with the configured retry policy.

        Connection errors, timeouts and retryable statuses are attempted
        ``retries + 1`` times in total with ``retry_delay`` seconds between
        attempts.
        """
        url = self.base_url + path
        content_type = "application/json" if "json" in kwargs else None
        headers = get_default_headers(self._config.auth_token, content_type=content_type)
        attempts = self._config.retries + 1

        for attempt in range(1, attempts + 1):
            # File tuples are re-sent from bytes, so every attempt gets a full body
            try:
                response = requests.request(
                    method,
                    url,
                    headers=headers,
                    timeout=self._config.timeout,
                    **kwargs,
                )
            except requests.exceptions.ConnectionError as e:
                failure = f"Failed to connect to release API: {e}"
            except requests.exceptions.Timeout:
                failure = "Release API request timed out"
            else:
                if response.ok:
                    return _parse_json_dict(response)

                err_msg = f"Failed to {action}. [{response.status_code}]{_error_detail(response)}"
                if response.status_code not in RETRY_STATUS_CODES or attempt == attempts:
                    raise APIError(err_msg, status_code=response.status_code)
                failure = err_msg

            if attempt == attempts:
                raise TransportError(f"Failed to {action} after {attempts} attempt(s): {failure}")

            logger.warning(f"{failure} (attempt {attempt}/{attempts}), retrying in {self._config.retry_delay}s")
            time.sleep(self._config.retry_delay)

        # Unreachable: the loop either returns or raises
        raise TransportError(f"Failed to {action}")
