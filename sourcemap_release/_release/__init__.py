"""Release upload workflow.

This module provides the pieces that turn a completed build into a
finalized release on the error-tracking service:
- ReleaseClient: create / upload / finalize HTTP calls
- discover_artifacts / resolve_public_name: pick artifacts and name them
- UploadOrchestrator: the three-phase workflow with per-artifact fault isolation

Usage:
    from sourcemap_release._release import (
        BuildOutput,
        Chunk,
        ReleaseConfig,
        UploadOrchestrator,
    )

    config = ReleaseConfig(
        organization="acme",
        project="web",
        auth_token="...",
        version="v1",
        default_public_path="/static/",
    )
    report = UploadOrchestrator().run(config, BuildOutput(
        chunks=[Chunk(files=["app.js", "app.js.map"])],
        asset_paths={"app.js": "dist/app.js", "app.js.map": "dist/app.js.map"},
    ))
"""

from .client import FINALIZE_ENDPOINTS, ReleaseClient
from .discovery import ANY_ORIGIN_PREFIX, DiscoveryResult, discover_artifacts, is_uploadable, resolve_public_name
from .orchestrator import UploadOrchestrator
from .protocol import (
    DEFAULT_API_BASE_URL,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    VALID_FINALIZE_MODES,
    Artifact,
    BuildOutput,
    Chunk,
    FinalizeMode,
    ReleaseConfig,
)
from .result import ReleaseReport, ReleaseState, UploadOutcome

__all__ = [
    # Core types
    "ReleaseConfig",
    "FinalizeMode",
    "VALID_FINALIZE_MODES",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_RETRIES",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_TIMEOUT",
    "Artifact",
    "Chunk",
    "BuildOutput",
    # Results
    "ReleaseReport",
    "ReleaseState",
    "UploadOutcome",
    # Client
    "ReleaseClient",
    "FINALIZE_ENDPOINTS",
    # Discovery
    "ANY_ORIGIN_PREFIX",
    "DiscoveryResult",
    "discover_artifacts",
    "is_uploadable",
    "resolve_public_name",
    # Orchestration
    "UploadOrchestrator",
]
