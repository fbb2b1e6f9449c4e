"""Result types for the release upload workflow."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .protocol import Artifact


class ReleaseState(str, Enum):
    """Lifecycle of one build invocation."""

    IDLE = "idle"
    DISCOVERING = "discovering"
    RELEASE_CREATING = "release_creating"
    UPLOADING = "uploading"
    FINALIZING = "finalizing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class UploadOutcome:
    """
    Result of a single artifact upload attempt.

    Attributes:
        artifact: The artifact that was uploaded
        public_name: The tilde-prefixed name it was uploaded under
        succeeded: Whether the upload completed successfully
        error: Error message if the upload failed
        response: Parsed API response for successful uploads
    """

    artifact: Artifact
    public_name: str
    succeeded: bool
    error: Optional[str] = None
    response: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate outcome state."""
        if self.succeeded and self.error:
            raise ValueError("Successful outcome should not have error")
        if not self.succeeded and not self.error:
            raise ValueError("Failed outcome must have error")

    @property
    def warning(self) -> Optional[str]:
        """Build warning for a failed upload, keyed by artifact name."""
        if self.succeeded:
            return None
        return f"Failed to upload {self.artifact.name}: {self.error}"


@dataclass
class ReleaseReport:
    """
    Structured completion signal for one build invocation.

    A report is one of:
    - skipped: the workflow was disabled, nothing happened
    - success: release created and finalized, ``warnings`` lists failed uploads
    - failure: release creation or finalize failed, ``error_message`` is set

    Attributes:
        version: Release version the report is about
        state: Final lifecycle state (DONE or ABORTED)
        success: Whether the build should be signalled as successful
        skipped: Whether the workflow was disabled
        outcomes: Per-artifact upload outcomes
        warnings: Non-fatal warnings for the build, one per failed artifact
        collisions: Artifact names that more than one chunk bound to different files
        error_message: Fatal error message
        error_detail: Trace text of the fatal error, when available
    """

    version: str
    state: ReleaseState
    success: bool
    skipped: bool = False
    outcomes: List[UploadOutcome] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    collisions: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    error_detail: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate report state."""
        if self.success and self.error_message:
            raise ValueError("Successful report should not have error_message")
        if not self.success and not self.error_message:
            raise ValueError("Failed report must have error_message")

    @property
    def partial(self) -> bool:
        """Check if the release succeeded with some uploads missing."""
        return self.success and bool(self.failed_uploads)

    @property
    def failed_uploads(self) -> List[UploadOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def uploaded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def build_error(self) -> Optional[str]:
        """Build-level error text: message followed by trace detail."""
        if self.error_message is None:
            return None
        if self.error_detail:
            return f"{self.error_message}\n\n{self.error_detail}"
        return self.error_message

    @classmethod
    def skipped_result(cls, version: str) -> "ReleaseReport":
        """Create a report for a disabled run."""
        return cls(version=version, state=ReleaseState.DONE, success=True, skipped=True)

    @classmethod
    def success_result(
        cls,
        version: str,
        outcomes: List[UploadOutcome],
        collisions: Optional[List[str]] = None,
    ) -> "ReleaseReport":
        """Create a successful report, collecting warnings from failed outcomes."""
        warnings = [o.warning for o in sorted(outcomes, key=lambda o: o.artifact.name) if o.warning]
        return cls(
            version=version,
            state=ReleaseState.DONE,
            success=True,
            outcomes=outcomes,
            warnings=warnings,
            collisions=collisions or [],
        )

    @classmethod
    def failure_result(
        cls,
        version: str,
        state: ReleaseState,
        error_message: str,
        error_detail: Optional[str] = None,
        outcomes: Optional[List[UploadOutcome]] = None,
        collisions: Optional[List[str]] = None,
    ) -> "ReleaseReport":
        """Create a fatal report."""
        outcomes = outcomes or []
        warnings = [o.warning for o in sorted(outcomes, key=lambda o: o.artifact.name) if o.warning]
        return cls(
            version=version,
            state=state,
            success=False,
            outcomes=outcomes,
            warnings=warnings,
            collisions=collisions or [],
            error_message=error_message,
            error_detail=error_detail,
        )
