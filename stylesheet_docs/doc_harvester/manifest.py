"""Manifest of scanned source files and the declarations each one documents."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .parser import FileScanResult

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


@dataclass
class FileChange:
    """How one file differs from what the manifest last recorded."""

    file: str
    status: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)


def now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def new_manifest() -> dict[str, Any]:
    return {"version": MANIFEST_VERSION, "last_run": None, "files": {}}


def load_manifest(path: Path) -> dict[str, Any]:
    if not path.exists():
        return new_manifest()
    data = json.loads(path.read_text(encoding="utf-8"))
    if data.get("version") != MANIFEST_VERSION:
        logger.warning("Ignoring manifest %s with unsupported version %r", path, data.get("version"))
        return new_manifest()
    return data


def save_manifest(path: Path, manifest: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, indent=2, sort_keys=True), encoding="utf-8")


def diff_file(previous: Mapping[str, Any] | None, result: FileScanResult) -> FileChange:
    if not result.ok:
        return FileChange(result.file, "error")
    if previous is None:
        return FileChange(result.file, "new", added=list(result.declarations))
    known = list(previous.get("declarations", []))
    added = [name for name in result.declarations if name not in known]
    removed = [name for name in known if name not in result.declarations]
    status = "unchanged" if previous.get("sha256") == result.sha256 else "modified"
    return FileChange(result.file, status, added=added, removed=removed)


def compare_scan(
    manifest: Mapping[str, Any],
    scan_results: Mapping[str, FileScanResult],
) -> list[FileChange]:
    """Diff a fresh scan against ``manifest`` without changing it."""
    known: Mapping[str, Any] = manifest.get("files", {})
    changes = [diff_file(known.get(path), result) for path, result in scan_results.items()]
    for path, entry in known.items():
        if path not in scan_results:
            changes.append(FileChange(path, "missing", removed=list(entry.get("declarations", []))))
    return sorted(changes, key=lambda change: change.file)


def record_scan(
    manifest: dict[str, Any],
    scan_results: Mapping[str, FileScanResult],
    run_timestamp: str,
) -> list[FileChange]:
    changes = compare_scan(manifest, scan_results)
    files: dict[str, Any] = manifest.setdefault("files", {})
    for change in changes:
        if change.status == "missing":
            files.pop(change.file, None)
            continue
        result = scan_results[change.file]
        entry = result.to_dict()
        entry["status"] = change.status
        previous = files.get(change.file)
        if change.status == "unchanged" and previous:
            entry["parsed_at"] = previous.get("parsed_at", run_timestamp)
        else:
            entry["parsed_at"] = run_timestamp
        files[change.file] = entry
    manifest["last_run"] = run_timestamp
    return changes
