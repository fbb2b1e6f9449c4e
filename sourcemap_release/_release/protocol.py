"""Core types for the release upload workflow.

This module defines the configuration and the build-output types the
orchestrator consumes. The build tool's own objects never reach this
package; an adapter translates them into a ``BuildOutput``.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence
from urllib.parse import urlparse

from sourcemap_release.exceptions import ConfigurationError

# Which finalize contract the service speaks:
# - "release": PUT releases/{version}/
# - "deploy":  POST releases/{version}/deploy
FinalizeMode = Literal["release", "deploy"]

VALID_FINALIZE_MODES = ("release", "deploy")

DEFAULT_API_BASE_URL = "https://sentry.io"
DEFAULT_RETRIES = 5
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_TIMEOUT = 60.0

SCRIPT_SUFFIX = ".js"
SOURCE_MAP_SUFFIX = ".map"


@dataclass(frozen=True)
class ReleaseConfig:
    """
    Validated configuration for one release upload.

    Attributes:
        organization: Organization slug on the tracking service
        project: Project slug the release belongs to
        auth_token: Bearer token used for every request
        version: Release version, used verbatim in every API call
        enabled: When False the whole workflow is a no-op
        public_path_map: Artifact name -> public base path override
        default_public_path: Public base path for artifacts without an override.
            None means "use the build's own public path".
        ref: Optional commit ref attached on release creation
        refs: Optional list of repository refs attached on release creation
        commits: Optional list of commits attached on release creation
        api_base_url: Scheme and host of the tracking service
        retries: How many times a failed request is retried
        retry_delay: Seconds to wait between retries
        timeout: Per-request timeout in seconds
        max_concurrency: Upload worker limit, None for one worker per artifact
        finalize_mode: Finalize endpoint contract ("release" or "deploy")
    """

    organization: str
    project: str
    auth_token: str
    version: str
    enabled: bool = True
    public_path_map: Mapping[str, str] = field(default_factory=dict)
    default_public_path: Optional[str] = None
    ref: Optional[str] = None
    refs: Optional[List[Dict[str, Any]]] = None
    commits: Optional[List[Dict[str, Any]]] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    retries: int = DEFAULT_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    timeout: float = DEFAULT_TIMEOUT
    max_concurrency: Optional[int] = None
    finalize_mode: FinalizeMode = "release"

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for attr in ("organization", "project", "auth_token", "version"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{attr} is required")

        if self.retries < 0:
            raise ConfigurationError(f"retries must be zero or more, got {self.retries}")
        if self.retry_delay < 0:
            raise ConfigurationError(f"retry_delay must be zero or more, got {self.retry_delay}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        if self.finalize_mode not in VALID_FINALIZE_MODES:
            raise ConfigurationError(
                f"Invalid finalize_mode: {self.finalize_mode}. Expected one of {list(VALID_FINALIZE_MODES)}"
            )

        for name, path in self.public_path_map.items():
            if not isinstance(name, str) or not isinstance(path, str):
                raise ConfigurationError("public_path_map must map artifact names to path strings")

        parsed = urlparse(self.api_base_url)
        if parsed.scheme not in ("http", "https"):
            raise ConfigurationError("API base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ConfigurationError("API base URL must include a valid hostname")

        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))
        object.__setattr__(self, "public_path_map", MappingProxyType(dict(self.public_path_map)))

    @property
    def release_metadata(self) -> Dict[str, Any]:
        """Optional fields sent along with release creation."""
        metadata: Dict[str, Any] = {}
        if self.ref:
            metadata["ref"] = self.ref
        if self.refs:
            metadata["refs"] = self.refs
        if self.commits:
            metadata["commits"] = self.commits
        return metadata


@dataclass(frozen=True)
class Artifact:
    """A build output file eligible for upload."""

    name: str
    file_system_path: str

    @property
    def is_source_map(self) -> bool:
        return self.name.endswith(SOURCE_MAP_SUFFIX)

    @property
    def sourcemap_name(self) -> str:
        """Name of the sibling source map this script links to."""
        return f"{self.name}{SOURCE_MAP_SUFFIX}"


@dataclass
class Chunk:
    """
    One compilation unit of a build.

    Attributes:
        files: Output file names emitted for this chunk
        paths: Optional chunk-local name -> on-disk location lookup. Takes
            precedence over the build-wide ``BuildOutput.asset_paths``.
    """

    files: Sequence[str]
    paths: Mapping[str, str] = field(default_factory=dict)


@dataclass
class BuildOutput:
    """
    Everything the orchestrator needs from a completed build.

    Attributes:
        chunks: Compilation units in the build tool's iteration order
        asset_paths: Output file name -> on-disk location
        public_path: The build's configured public base path
    """

    chunks: Sequence[Chunk]
    asset_paths: Mapping[str, str] = field(default_factory=dict)
    public_path: str = ""
