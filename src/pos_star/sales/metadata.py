"""Metadata tracking for persisted pipeline stages.

This module handles idempotence by recording which source a persisted stage
was built from, with which logic version, and whether the run succeeded.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class StageMetadata:
    """Metadata for a completed pipeline stage.

    Attributes:
        stage: Stage name, e.g. "star_schema".
        source: Fingerprint of the raw exports the stage was built from.
        version: Version string for the stage logic.
        last_run: ISO timestamp of when stage was run.
        status: "ok" or "failed".
        row_counts: Rows written per table.
    """

    stage: str
    source: str
    version: str
    last_run: str
    status: str
    row_counts: dict[str, int] = field(default_factory=dict)


def _meta_path(stage_dir: Path, stage: str) -> Path:
    """Get path to the metadata file of a stage."""
    meta_dir = stage_dir / "_meta"
    meta_dir.mkdir(parents=True, exist_ok=True)
    return meta_dir / f"{stage}.json"


def write_metadata(stage_dir: Path, metadata: StageMetadata) -> None:
    """Write metadata file for a stage completion."""
    path = _meta_path(stage_dir, metadata.stage)
    path.write_text(json.dumps(asdict(metadata), indent=2))
    logger.debug("Wrote metadata: %s", path)


def read_metadata(stage_dir: Path, stage: str) -> Optional[StageMetadata]:
    """Read the metadata file of a stage, if it exists and is readable."""
    path = _meta_path(stage_dir, stage)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return StageMetadata(**data)
    except (ValueError, TypeError) as e:
        logger.warning("Error reading metadata %s: %s", path, e)
        return None


def should_run_stage(stage_dir: Path, stage: str, source: str, version: str) -> bool:
    """Check if a stage needs to run based on metadata.

    Returns True if:
    - No metadata exists for this stage
    - Metadata status is not "ok"
    - Metadata was built from a different source or logic version
    """
    meta = read_metadata(stage_dir, stage)
    if meta is None:
        return True
    if meta.status != "ok":
        return True
    if meta.source != source or meta.version != version:
        return True
    return False
