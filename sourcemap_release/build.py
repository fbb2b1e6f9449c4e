"""Load build output descriptions from disk.

Two sources are supported:

- webpack stats (``webpack --json > stats.json``): chunks, output path and
  public path come from the stats file. Source maps are listed under
  ``auxiliaryFiles`` since webpack 5 and under ``files`` before that.
- a plain output directory: every script and source map under it becomes
  part of a single chunk.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from sourcemap_release._release import BuildOutput, Chunk, is_uploadable
from sourcemap_release.exceptions import FileProcessingError
from sourcemap_release.logging_config import logger

# webpack's runtime-detected public path, meaningless outside the browser
AUTO_PUBLIC_PATH = "auto"


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileProcessingError(f"Stats file not found: {path}")
    except json.JSONDecodeError as e:
        raise FileProcessingError(f"Invalid JSON in stats file {path}: {e}")
    except OSError as e:
        raise FileProcessingError(f"Failed to read stats file {path}: {e}")

    if not isinstance(data, dict):
        raise FileProcessingError(f"Stats file {path} must contain a JSON object")
    return data


def _chunk_files(chunk: Any) -> List[str]:
    if not isinstance(chunk, dict):
        raise FileProcessingError(f"Chunk entries must be JSON objects, got {type(chunk).__name__}")
    files: List[str] = []
    for key in ("files", "auxiliaryFiles"):
        value = chunk.get(key) or []
        if not isinstance(value, list):
            raise FileProcessingError(f"Chunk {key} must be a list, got {type(value).__name__}")
        files.extend(str(name) for name in value)
    return files


def load_build_from_stats(
    stats_file: str,
    output_dir: Optional[str] = None,
    public_path: Optional[str] = None,
) -> BuildOutput:
    """
    Build a BuildOutput from a webpack stats JSON file.

    Multi-compiler stats (a ``children`` list) are flattened, each child
    resolving files against its own output path.

    Args:
        stats_file: Path to the stats JSON file
        output_dir: Overrides the stats ``outputPath``
        public_path: Overrides the stats ``publicPath``

    Returns:
        BuildOutput describing the build

    Raises:
        FileProcessingError: If the stats file is missing or malformed
    """
    stats_path = Path(stats_file)
    stats = _load_json(stats_path)

    compilations = stats.get("children") or [stats]
    chunks: List[Chunk] = []
    build_public_path = ""

    if not isinstance(compilations, list):
        raise FileProcessingError(f"Stats file {stats_path} children must be a list")

    for compilation in compilations:
        if not isinstance(compilation, dict):
            raise FileProcessingError(
                f"Stats file {stats_path} children must be JSON objects, got {type(compilation).__name__}"
            )
        raw_output = output_dir or compilation.get("outputPath") or stats.get("outputPath")
        if not raw_output:
            raise FileProcessingError(f"Stats file {stats_path} has no outputPath, pass an output directory")
        if not isinstance(raw_output, str):
            raise FileProcessingError(f"Stats file {stats_path} outputPath must be a string")

        base = Path(raw_output)
        if not base.is_absolute():
            base = stats_path.parent / base

        raw_chunks = compilation.get("chunks")
        if not isinstance(raw_chunks, list):
            raise FileProcessingError(f"Stats file {stats_path} has no chunks list (use --json with chunks enabled)")

        for raw_chunk in raw_chunks:
            files = _chunk_files(raw_chunk)
            paths = {name: str(base / name) for name in files if is_uploadable(name)}
            chunks.append(Chunk(files=files, paths=paths))

        if not build_public_path:
            build_public_path = compilation.get("publicPath") or stats.get("publicPath") or ""

    if public_path is not None:
        build_public_path = public_path
    if not isinstance(build_public_path, str):
        raise FileProcessingError(f"Stats file {stats_path} publicPath must be a string")
    if build_public_path == AUTO_PUBLIC_PATH:
        logger.warning("Stats publicPath is 'auto', using an empty public path; pass --public-path to override")
        build_public_path = ""

    logger.info(f"Loaded {len(chunks)} chunk(s) from {stats_path}")
    return BuildOutput(chunks=chunks, public_path=build_public_path)


def load_build_from_directory(output_dir: str, public_path: str = "") -> BuildOutput:
    """
    Build a BuildOutput from every script and source map under a directory.

    Artifact names are POSIX paths relative to ``output_dir``.

    Args:
        output_dir: Build output directory
        public_path: Public base path the directory is served from

    Returns:
        BuildOutput with a single chunk

    Raises:
        FileProcessingError: If the directory does not exist
    """
    root = Path(output_dir)
    if not root.is_dir():
        raise FileProcessingError(f"Output directory not found: {output_dir}")

    asset_paths: Dict[str, str] = {}
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in sorted(filenames):
            if not is_uploadable(filename):
                continue
            full_path = Path(dirpath) / filename
            asset_paths[full_path.relative_to(root).as_posix()] = str(full_path)

    names = sorted(asset_paths)
    logger.info(f"Found {len(names)} script/source map file(s) in {root}")
    return BuildOutput(chunks=[Chunk(files=names)], asset_paths=asset_paths, public_path=public_path)
