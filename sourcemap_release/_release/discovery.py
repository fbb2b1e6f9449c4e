"""Artifact discovery and public path resolution."""

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from sourcemap_release.logging_config import logger

from .protocol import SCRIPT_SUFFIX, SOURCE_MAP_SUFFIX, Artifact, BuildOutput

# Marks a public name as valid for any origin
ANY_ORIGIN_PREFIX = "~"


def is_uploadable(file_name: str) -> bool:
    """Check whether an emitted file is a script or a source map."""
    return file_name.endswith(SCRIPT_SUFFIX) or file_name.endswith(SOURCE_MAP_SUFFIX)


@dataclass
class DiscoveryResult:
    """
    Artifacts selected from a build.

    Attributes:
        artifacts: Selected artifacts, in first-seen order
        collisions: Names bound to different files by different chunks
    """

    artifacts: List[Artifact] = field(default_factory=list)
    collisions: List[str] = field(default_factory=list)


def discover_artifacts(build: BuildOutput) -> DiscoveryResult:
    """
    Select every script and source map emitted by the build's chunks.

    Names are pooled across chunks. When two chunks emit the same name the
    later chunk wins; if they point at different files the name is reported
    as a collision.

    Args:
        build: The completed build

    Returns:
        DiscoveryResult with the selected artifacts
    """
    locations: Dict[str, str] = {}
    collisions: List[str] = []

    for chunk in build.chunks:
        for file_name in chunk.files:
            if not is_uploadable(file_name):
                continue

            location = chunk.paths.get(file_name) or build.asset_paths.get(file_name)
            if not location:
                logger.debug(f"Skipping {file_name}: no emitted file found")
                continue

            previous = locations.get(file_name)
            if previous is not None and previous != location:
                logger.warning(f"Artifact {file_name} emitted twice ({previous}, {location}), using {location}")
                if file_name not in collisions:
                    collisions.append(file_name)

            locations[file_name] = location

    artifacts = [Artifact(name=name, file_system_path=path) for name, path in locations.items()]
    logger.info(f"Discovered {len(artifacts)} artifact(s) to upload")
    return DiscoveryResult(artifacts=artifacts, collisions=collisions)


def _base_path(public_path: str) -> str:
    """Reduce a public path or URL to its path component."""
    parsed = urlparse(public_path)
    if parsed.scheme and parsed.netloc:
        return parsed.path
    if public_path.startswith("//"):
        # Protocol-relative URL
        return urlparse(f"http:{public_path}").path
    return public_path


def resolve_public_name(
    artifact_name: str,
    public_path_map: Mapping[str, str],
    default_public_path: Optional[str],
    build_public_path: str = "",
) -> str:
    """
    Compute the public, origin-agnostic name of an artifact.

    The base path is the artifact's override from ``public_path_map`` when
    present, otherwise ``default_public_path``, otherwise the build's own
    public path. Only the path part of URL bases is kept.

    Examples:
        >>> resolve_public_name("app.js", {}, "/static/")
        '~/static/app.js'
        >>> resolve_public_name("app.js", {"app.js": "https://cdn.example.com/js/"}, "/static/")
        '~/js/app.js'

    Args:
        artifact_name: Output name of the artifact
        public_path_map: Per-artifact base path overrides
        default_public_path: Base path for artifacts without an override
        build_public_path: Fallback base path from the build tool

    Returns:
        Public name starting with ``~/``
    """
    if artifact_name in public_path_map:
        base = public_path_map[artifact_name]
    elif default_public_path is not None:
        base = default_public_path
    else:
        base = build_public_path or ""

    joined = posixpath.normpath(posixpath.join("/", _base_path(base), artifact_name))
    # normpath keeps a leading "//"
    joined = "/" + joined.lstrip("/")
    return f"{ANY_ORIGIN_PREFIX}{joined}"
