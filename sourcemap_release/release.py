"""
Public API for release uploads.

Two entry points:

- ``upload_release`` runs the whole workflow and returns a ``ReleaseReport``.
- ``after_emit`` adapts the workflow to a callback-style build hook: warnings
  and errors are appended to the compilation and the completion callback is
  invoked exactly once.

Usage:
    from sourcemap_release.release import upload_release
    from sourcemap_release.build import load_build_from_stats

    report = upload_release(
        build=load_build_from_stats("stats.json"),
        organization="acme",
        project="web",
        auth_token="...",
        version="v1",
    )
    if report.partial:
        for warning in report.warnings:
            print(warning)
"""

import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from ._release import BuildOutput, ReleaseConfig, ReleaseReport, ReleaseState, UploadOrchestrator
from .logging_config import logger


@dataclass
class Compilation:
    """
    What a build hook hands over once a build has emitted its files.

    Attributes:
        build: The emitted build output
        warnings: Build warnings, appended to in place
        errors: Build errors, appended to in place
    """

    build: BuildOutput
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def after_emit(
    config: ReleaseConfig,
    compilation: Compilation,
    callback: Callable[[], Any],
    orchestrator: Optional[UploadOrchestrator] = None,
) -> ReleaseReport:
    """
    Run the release workflow from a build hook.

    Upload failures become compilation warnings; release creation and
    finalize failures become a compilation error. ``callback`` is called
    exactly once, after the report has been applied.

    Args:
        config: Release configuration
        compilation: Emitted build plus its warnings/errors collections
        callback: Completion callback of the build hook
        orchestrator: Optional orchestrator (defaults to a new one)

    Returns:
        The ReleaseReport that was applied to the compilation
    """
    orchestrator = orchestrator or UploadOrchestrator()
    try:
        report = orchestrator.run(config, compilation.build)
    except Exception as e:
        logger.exception("Release upload raised unexpectedly")
        report = ReleaseReport.failure_result(
            version=config.version,
            state=ReleaseState.DONE,
            error_message=f"Failed to upload source maps: {e}",
            error_detail=traceback.format_exc(),
        )

    try:
        compilation.warnings.extend(report.warnings)
        if not report.success:
            compilation.errors.append(report.build_error or "Failed to upload source maps")
    finally:
        callback()

    return report


def upload_release(
    build: BuildOutput,
    organization: str,
    project: str,
    auth_token: str,
    version: str,
    enabled: bool = True,
    public_path_map: Optional[Mapping[str, str]] = None,
    default_public_path: Optional[str] = None,
    ref: Optional[str] = None,
    refs: Optional[List[Dict[str, Any]]] = None,
    commits: Optional[List[Dict[str, Any]]] = None,
    **options: Any,
) -> ReleaseReport:
    """
    Upload a build's scripts and source maps as a new release.

    Args:
        build: Completed build output
        organization: Organization slug
        project: Project slug
        auth_token: API bearer token
        version: Release version
        enabled: Set to False to skip the upload entirely
        public_path_map: Per-artifact public base path overrides
        default_public_path: Public base path for all other artifacts
        ref: Optional commit ref for the release
        refs: Optional repository refs for the release
        commits: Optional commit list for the release
        **options: Remaining ReleaseConfig fields (retries, retry_delay,
            timeout, max_concurrency, finalize_mode, api_base_url)

    Returns:
        ReleaseReport with the outcome of every phase

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = ReleaseConfig(
        organization=organization,
        project=project,
        auth_token=auth_token,
        version=version,
        enabled=enabled,
        public_path_map=public_path_map or {},
        default_public_path=default_public_path,
        ref=ref,
        refs=refs,
        commits=commits,
        **options,
    )

    return UploadOrchestrator().run(config, build)


__all__ = [
    "Compilation",
    "after_emit",
    "upload_release",
    "ReleaseReport",
]
