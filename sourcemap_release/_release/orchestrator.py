"""Release upload orchestrator."""

import traceback
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

from sourcemap_release.logging_config import logger

from .client import ReleaseClient
from .discovery import discover_artifacts, resolve_public_name
from .protocol import Artifact, BuildOutput, ReleaseConfig
from .result import ReleaseReport, ReleaseState, UploadOutcome

ClientFactory = Callable[[ReleaseConfig], ReleaseClient]


class UploadOrchestrator:
    """
    Drives the create / upload / finalize workflow for one build.

    The orchestrator keeps no per-build state between calls: configuration
    and build output are passed to ``run`` on every invocation, and each
    invocation produces a fresh, independent release.

    Example:
        orchestrator = UploadOrchestrator()
        report = orchestrator.run(config, BuildOutput(
            chunks=[Chunk(files=["app.js", "app.js.map"])],
            asset_paths={"app.js": "dist/app.js", "app.js.map": "dist/app.js.map"},
        ))
        if not report.success:
            print(report.build_error)
    """

    def __init__(self, client_factory: Optional[ClientFactory] = None) -> None:
        """
        Initialize the UploadOrchestrator.

        Args:
            client_factory: Builds the ReleaseClient for a configuration.
                Defaults to ``ReleaseClient``.
        """
        self._client_factory = client_factory or ReleaseClient

    def run(
        self,
        config: ReleaseConfig,
        build: BuildOutput,
        client: Optional[ReleaseClient] = None,
    ) -> ReleaseReport:
        """
        Upload a build's artifacts as a new release.

        Release creation and finalize failures produce a failed report.
        Individual upload failures only add warnings.

        Args:
            config: Release configuration
            build: Completed build output
            client: Optional client overriding the factory

        Returns:
            ReleaseReport describing the outcome
        """
        version = config.version
        state = ReleaseState.IDLE

        if not config.enabled:
            logger.info("Release upload disabled, skipping")
            return ReleaseReport.skipped_result(version)

        state = self._transition(state, ReleaseState.DISCOVERING)
        discovery = discover_artifacts(build)

        if client is None:
            client = self._client_factory(config)

        state = self._transition(state, ReleaseState.RELEASE_CREATING)
        try:
            client.create_release(version, config.release_metadata)
        except Exception as e:
            logger.error(f"Failed to create release {version}: {e}")
            self._transition(state, ReleaseState.ABORTED)
            return ReleaseReport.failure_result(
                version=version,
                state=ReleaseState.ABORTED,
                error_message=f"Failed to create release {version}: {e}",
                error_detail=traceback.format_exc(),
                collisions=discovery.collisions,
            )

        state = self._transition(state, ReleaseState.UPLOADING)
        outcomes = self._upload_all(client, config, build, discovery.artifacts)

        failed = sum(1 for o in outcomes if not o.succeeded)
        if failed:
            logger.warning(f"{failed} of {len(outcomes)} artifact upload(s) failed, finalizing anyway")

        state = self._transition(state, ReleaseState.FINALIZING)
        try:
            client.finalize_release(version)
        except Exception as e:
            logger.error(f"Failed to finalize release {version}: {e}")
            self._transition(state, ReleaseState.DONE)
            return ReleaseReport.failure_result(
                version=version,
                state=ReleaseState.DONE,
                error_message=f"Failed to finalize release {version}: {e}",
                error_detail=traceback.format_exc(),
                outcomes=outcomes,
                collisions=discovery.collisions,
            )

        self._transition(state, ReleaseState.DONE)
        logger.info(f"Release {version} finalized with {len(outcomes) - failed}/{len(outcomes)} artifact(s)")
        return ReleaseReport.success_result(version, outcomes, collisions=discovery.collisions)

    def _upload_all(
        self,
        client: ReleaseClient,
        config: ReleaseConfig,
        build: BuildOutput,
        artifacts: List[Artifact],
    ) -> List[UploadOutcome]:
        """Upload every artifact concurrently and wait for all of them to settle."""
        if not artifacts:
            return []

        max_workers = config.max_concurrency or len(artifacts)
        outcomes: List[UploadOutcome] = []

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="release-upload") as executor:
            futures = {
                executor.submit(
                    self._upload_one,
                    client,
                    config.version,
                    artifact,
                    resolve_public_name(
                        artifact.name,
                        config.public_path_map,
                        config.default_public_path,
                        build.public_path,
                    ),
                ): artifact
                for artifact in artifacts
            }

            for future in as_completed(futures):
                outcomes.append(future.result())

        return outcomes

    @staticmethod
    def _upload_one(client: ReleaseClient, version: str, artifact: Artifact, public_name: str) -> UploadOutcome:
        """Upload a single artifact, turning any failure into an outcome."""
        try:
            response = client.upload_artifact(version, artifact, public_name)
        except Exception as e:
            logger.warning(f"Failed to upload {artifact.name}: {e}")
            return UploadOutcome(
                artifact=artifact,
                public_name=public_name,
                succeeded=False,
                error=str(e) or type(e).__name__,
            )

        logger.debug(f"Uploaded {artifact.name} as {public_name}")
        return UploadOutcome(
            artifact=artifact,
            public_name=public_name,
            succeeded=True,
            response=response or {},
        )

    @staticmethod
    def _transition(current: ReleaseState, new: ReleaseState) -> ReleaseState:
        logger.debug(f"Release state: {current.value} -> {new.value}")
        return new
