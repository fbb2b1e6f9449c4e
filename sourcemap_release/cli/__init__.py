"""CLI module for sourcemap-release.

Options can be given as arguments or through environment variables.
"""

from .main import (
    VERSION,
    build_config,
    cli,
    evaluate_boolean,
    initialize_sentry,
    load_build,
    main,
    run_pipeline,
)

__all__ = [
    "cli",
    "main",
    "VERSION",
    "build_config",
    "evaluate_boolean",
    "initialize_sentry",
    "load_build",
    "run_pipeline",
]
