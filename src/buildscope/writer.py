"""Persist an AnalysisResult as four line-oriented artifact files."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from buildscope.model import AnalysisResult

ARTIFACT_NAMES = ("targets", "includes", "excludes", "developer-included-tests")


def serialize(entries: list[str]) -> str:
    """One entry per line, ``\\n`` terminated; empty lists produce an empty file."""
    return "".join(f"{entry}\n" for entry in entries)


def write_artifacts(result: AnalysisResult, output_dir: Path) -> list[Path]:
    """Write the four artifacts of *result* into *output_dir*.

    Files are staged in a scratch directory inside *output_dir* and moved
    into place only once all of them have been written. If a move fails,
    the artifacts already moved are restored to their previous state.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    artifacts = result.artifacts()
    staging = Path(tempfile.mkdtemp(prefix=".buildscope-", dir=output_dir))
    try:
        for name in ARTIFACT_NAMES:
            (staging / name).write_text(
                serialize(artifacts[name]), encoding="utf-8", newline="\n"
            )
        _swap_into_place(staging, output_dir)
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    return [output_dir / name for name in ARTIFACT_NAMES]


def _swap_into_place(staging: Path, output_dir: Path) -> None:
    backups: dict[str, Path] = {}
    moved: list[str] = []
    try:
        for name in ARTIFACT_NAMES:
            target = output_dir / name
            if target.exists():
                backups[name] = staging / f"{name}.previous"
                os.replace(target, backups[name])
            os.replace(staging / name, target)
            moved.append(name)
    except OSError:
        for name in moved:
            (output_dir / name).unlink(missing_ok=True)
        for name, backup in backups.items():
            os.replace(backup, output_dir / name)
        raise
