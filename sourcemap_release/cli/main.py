"""Command line entry point for sourcemap-release.

Every option can also be supplied through an environment variable, which
keeps CI configuration short:

    SENTRY_ORG=acme SENTRY_PROJECT=web SENTRY_AUTH_TOKEN=... \\
        sourcemap-release --release "$GIT_SHA" --stats-file dist/stats.json
"""

import json
import os
import sys
from typing import Any, Optional

import click
import sentry_sdk

from sourcemap_release import __version__
from sourcemap_release._release import (
    DEFAULT_API_BASE_URL,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    VALID_FINALIZE_MODES,
    BuildOutput,
    ReleaseConfig,
    ReleaseReport,
    UploadOrchestrator,
)
from sourcemap_release.build import load_build_from_directory, load_build_from_stats
from sourcemap_release.console import (
    print_banner,
    print_final_failure,
    print_final_success,
    print_release_summary,
)
from sourcemap_release.exceptions import ConfigurationError, FileProcessingError
from sourcemap_release.logging_config import logger, setup_logging

VERSION = __version__
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.strip().lower() in ["true", "yes", "yeah", "1", "on"]


def initialize_sentry() -> None:
    """
    Initialize Sentry for the tool's own error reporting.

    Only active when SENTRY_DSN is set and TELEMETRY is not disabled.
    """
    if not evaluate_boolean(os.getenv("TELEMETRY", "true")):
        return
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        return

    def before_send(event, hint):
        """
        Filter events before sending to Sentry.
        Configuration errors are user input problems, not tool bugs.
        """
        if "exc_info" in hint:
            exc_type, exc_value, tb = hint["exc_info"]
            if isinstance(exc_value, ConfigurationError):
                return None
        return event

    sentry_sdk.init(
        dsn=sentry_dsn,
        send_default_pii=False,
        traces_sample_rate=0.0,
        before_send=before_send,
        release=f"sourcemap-release@{VERSION}",
    )


def _parse_json_option(value: Optional[str], option_name: str, expected: type) -> Any:
    """
    Parse a JSON-valued option.

    Raises:
        ConfigurationError: If the value is not valid JSON of the expected type
    """
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON for {option_name}: {e}")
    if not isinstance(parsed, expected):
        raise ConfigurationError(f"{option_name} must be a JSON {expected.__name__}, got {type(parsed).__name__}")
    return parsed


def build_config(
    org: Optional[str],
    project: Optional[str],
    auth_token: Optional[str],
    release: Optional[str],
    enabled: bool = True,
    public_path: Optional[str] = None,
    public_path_map: Optional[str] = None,
    ref: Optional[str] = None,
    refs: Optional[str] = None,
    commits: Optional[str] = None,
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    timeout: float = DEFAULT_TIMEOUT,
    max_concurrency: Optional[int] = None,
    finalize_mode: str = "release",
    api_url: str = DEFAULT_API_BASE_URL,
) -> ReleaseConfig:
    """
    Build a validated ReleaseConfig from raw CLI values.

    Raises:
        ConfigurationError: If a value is missing or invalid
    """
    path_map = _parse_json_option(public_path_map, "--public-path-map", dict) or {}
    return ReleaseConfig(
        organization=org or "",
        project=project or "",
        auth_token=auth_token or "",
        version=release or "",
        enabled=enabled,
        public_path_map=path_map,
        default_public_path=public_path,
        ref=ref or None,
        refs=_parse_json_option(refs, "--refs", list),
        commits=_parse_json_option(commits, "--commits", list),
        api_base_url=api_url,
        retries=retries,
        retry_delay=retry_delay,
        timeout=timeout,
        max_concurrency=max_concurrency,
        finalize_mode=finalize_mode,  # type: ignore[arg-type]
    )


def load_build(stats_file: Optional[str], output_dir: Optional[str], public_path: Optional[str]) -> BuildOutput:
    """
    Load the build description from a stats file or an output directory.

    Raises:
        ConfigurationError: If neither source is given
        FileProcessingError: If the source cannot be read
    """
    if stats_file:
        return load_build_from_stats(stats_file, output_dir=output_dir, public_path=public_path)
    if output_dir:
        return load_build_from_directory(output_dir, public_path=public_path or "")
    raise ConfigurationError("Please provide --stats-file or --output-dir")


def run_pipeline(config: ReleaseConfig, build: BuildOutput) -> ReleaseReport:
    """Run the release workflow and print its summary."""
    logger.info(f"Uploading release {config.version} to {config.api_base_url} ({config.organization}/{config.project})")
    report = UploadOrchestrator().run(config, build)
    print_release_summary(report)
    return report


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(VERSION, prog_name="sourcemap-release")
@click.option("--org", envvar="SENTRY_ORG", help="Organization slug. [env: SENTRY_ORG]")
@click.option("--project", envvar="SENTRY_PROJECT", help="Project slug. [env: SENTRY_PROJECT]")
@click.option("--auth-token", envvar="SENTRY_AUTH_TOKEN", help="API auth token. [env: SENTRY_AUTH_TOKEN]")
@click.option(
    "--release",
    envvar=["RELEASE_VERSION", "SENTRY_RELEASE"],
    help="Release version to create. [env: RELEASE_VERSION, SENTRY_RELEASE]",
)
@click.option(
    "--stats-file",
    envvar="STATS_FILE",
    type=click.Path(dir_okay=False),
    help="webpack stats JSON describing the build. [env: STATS_FILE]",
)
@click.option(
    "--output-dir",
    envvar="OUTPUT_DIR",
    type=click.Path(file_okay=False),
    help="Build output directory (overrides the stats outputPath). [env: OUTPUT_DIR]",
)
@click.option("--public-path", envvar="PUBLIC_PATH", help="Public base path of the artifacts. [env: PUBLIC_PATH]")
@click.option(
    "--public-path-map",
    envvar="PUBLIC_PATH_MAP",
    help='JSON object of per-artifact public paths, e.g. \'{"vendor.js": "/cdn/"}\'. [env: PUBLIC_PATH_MAP]',
)
@click.option("--ref", envvar="RELEASE_REF", help="Commit ref attached to the release. [env: RELEASE_REF]")
@click.option("--refs", envvar="RELEASE_REFS", help="JSON list of repository refs. [env: RELEASE_REFS]")
@click.option("--commits", envvar="RELEASE_COMMITS", help="JSON list of commits. [env: RELEASE_COMMITS]")
@click.option("--retries", envvar="RETRIES", type=click.IntRange(min=0), default=DEFAULT_RETRIES, show_default=True)
@click.option(
    "--retry-delay",
    envvar="RETRY_DELAY",
    type=click.FloatRange(min=0),
    default=DEFAULT_RETRY_DELAY,
    show_default=True,
    help="Seconds between retries.",
)
@click.option(
    "--timeout",
    envvar="REQUEST_TIMEOUT",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request timeout in seconds.",
)
@click.option(
    "--max-concurrency",
    envvar="MAX_CONCURRENCY",
    type=click.IntRange(min=1),
    default=None,
    help="Upper bound on parallel uploads (default: one per artifact).",
)
@click.option(
    "--finalize-mode",
    envvar="FINALIZE_MODE",
    type=click.Choice(VALID_FINALIZE_MODES),
    default="release",
    show_default=True,
    help="'release' finalizes with PUT releases/{version}/, 'deploy' with POST releases/{version}/deploy.",
)
@click.option("--api-url", envvar="SENTRY_URL", default=DEFAULT_API_BASE_URL, show_default=True)
@click.option(
    "--enabled/--disabled",
    envvar="UPLOAD_ENABLED",
    default=True,
    show_default=True,
    help="Skip the upload entirely with --disabled.",
)
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option("--structured-logs", is_flag=True, default=False, help="Emit JSON log lines.")
def cli(
    org: Optional[str],
    project: Optional[str],
    auth_token: Optional[str],
    release: Optional[str],
    stats_file: Optional[str],
    output_dir: Optional[str],
    public_path: Optional[str],
    public_path_map: Optional[str],
    ref: Optional[str],
    refs: Optional[str],
    commits: Optional[str],
    retries: int,
    retry_delay: float,
    timeout: float,
    max_concurrency: Optional[int],
    finalize_mode: str,
    api_url: str,
    enabled: bool,
    log_level: str,
    structured_logs: bool,
) -> None:
    """Upload build scripts and source maps to an error-tracking release."""
    setup_logging(level=log_level, structured=structured_logs)
    print_banner(VERSION)
    initialize_sentry()

    try:
        config = build_config(
            org=org,
            project=project,
            auth_token=auth_token,
            release=release,
            enabled=enabled,
            public_path=public_path,
            public_path_map=public_path_map,
            ref=ref,
            refs=refs,
            commits=commits,
            retries=retries,
            retry_delay=retry_delay,
            timeout=timeout,
            max_concurrency=max_concurrency,
            finalize_mode=finalize_mode,
            api_url=api_url,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print_final_failure(f"Configuration error: {e}")
        sys.exit(1)

    if not config.enabled:
        run_pipeline(config, BuildOutput(chunks=[]))
        print_final_success()
        return

    try:
        build = load_build(stats_file, output_dir, public_path)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print_final_failure(f"Configuration error: {e}")
        sys.exit(1)
    except FileProcessingError as e:
        logger.error(f"Failed to load build output: {e}")
        print_final_failure(str(e))
        sys.exit(1)

    report = run_pipeline(config, build)
    if not report.success:
        print_final_failure(report.build_error or "Failed to upload source maps")
        sys.exit(1)

    print_final_success(partial=report.partial)


def main() -> None:
    """Console script entry point."""
    cli()
