#!/usr/bin/env python3
"""CLI entrypoint for the stylesheet documentation harvester."""
from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from stylesheet_docs.doc_harvester import manifest, parser, renderer

DEFAULT_ROOT = Path.cwd()

logger = logging.getLogger("stylesheet_docs.doc_harvester.cli")


class HarvesterPaths:
    def __init__(self, root: Path, target: Path, index_dir: Path | None = None) -> None:
        self.root = root
        self.target = target
        self.index_dir = (index_dir or root / "_index").resolve()
        self.docs_path = self.index_dir / "docs.jsonl"
        self.scan_report_path = self.index_dir / "scan_report.json"
        self.manifest_path = self.index_dir / "manifest.json"

    def default_output(self, fmt: str) -> Path:
        suffix = "html" if fmt == "html" else "md"
        return self.index_dir / f"REFERENCE.{suffix}"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def resolve_root(path: str | None) -> Path:
    if path:
        return Path(path).expanduser().resolve()
    return DEFAULT_ROOT.resolve()


def resolve_target(root: Path, target: str | None) -> Path:
    resolved = Path(target).expanduser().resolve() if target else root
    if not resolved.exists():
        raise SystemExit(f"Target directory not found: {resolved}")
    return resolved


def resolve_paths(args: argparse.Namespace) -> HarvesterPaths:
    root = resolve_root(args.root)
    target = resolve_target(root, args.target)
    index_dir = Path(args.index_dir).expanduser() if args.index_dir else None
    return HarvesterPaths(root, target, index_dir)


def parse_extension_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    parts = [entry.strip() for entry in value.split(",") if entry.strip()]
    return parts or None


def command_scan(args: argparse.Namespace) -> None:
    paths = resolve_paths(args)
    extensions = parser.resolve_extensions(parse_extension_list(args.extensions))
    logger.info("Scanning %s for %s", paths.target, ", ".join(extensions))
    docs, files = parser.scan_directory(paths.target, paths.root, extensions=extensions)
    timestamp = manifest.now_iso()
    write_jsonl(paths.docs_path, [doc.to_dict() for doc in docs])
    write_scan_report(paths, files, timestamp)
    manifest_data = manifest.load_manifest(paths.manifest_path)
    changes = manifest.record_scan(manifest_data, files, timestamp)
    manifest.save_manifest(paths.manifest_path, manifest_data)
    errors = sum(1 for result in files.values() if not result.ok)
    logger.info("Extracted %d declarations from %d files", len(docs), len(files))
    logger.info(
        "Declarations added: %d, removed: %d",
        sum(len(change.added) for change in changes),
        sum(len(change.removed) for change in changes),
    )
    if errors:
        logger.warning("%d files could not be parsed", errors)


def command_render(args: argparse.Namespace) -> None:
    paths = resolve_paths(args)
    if not paths.docs_path.exists():
        raise SystemExit("No extraction output found. Run 'scan' first.")
    docs = [parser.SourceDoc.from_dict(entry) for entry in read_jsonl(paths.docs_path)]
    if args.format == "html":
        content = renderer.render_html(docs)
    else:
        content = renderer.render_markdown(docs)
    output_path = Path(args.output).expanduser() if args.output else paths.default_output(args.format)
    renderer.write_output(output_path, content)
    logger.info("Reference written to %s (%d characters)", output_path, len(content))


def command_check(args: argparse.Namespace) -> None:
    paths = resolve_paths(args)
    manifest_data = manifest.load_manifest(paths.manifest_path)
    extensions = parse_extension_list(args.extensions)
    _, scan_results = parser.scan_directory(paths.target, paths.root, extensions=extensions)
    changes = manifest.compare_scan(manifest_data, scan_results)
    print_status_table(changes, manifest_data)


def write_jsonl(path: Path, items: Iterable[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        for item in items:
            fh.write(json.dumps(item, ensure_ascii=False))
            fh.write("\n")


def read_jsonl(path: Path) -> Iterable[dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            if line.strip():
                yield json.loads(line)


def write_scan_report(
    paths: HarvesterPaths, files: dict[str, parser.FileScanResult], timestamp: str
) -> None:
    if paths.target.is_relative_to(paths.root):
        target_path = str(paths.target.relative_to(paths.root))
    else:
        target_path = str(paths.target)
    report = {
        "timestamp": timestamp,
        "target": target_path,
        "files": {file: data.to_dict() for file, data in files.items()},
        "counts": {
            "files": len(files),
            "declarations": sum(result.extracted_count for result in files.values()),
        },
    }
    paths.scan_report_path.parent.mkdir(parents=True, exist_ok=True)
    with paths.scan_report_path.open("w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2)


def print_status_table(
    changes: Iterable[manifest.FileChange],
    manifest_data: Mapping[str, Any],
) -> None:
    print("File".ljust(60), "Status".ljust(12), "Added".ljust(20), "Removed")
    print("-" * 110)
    for change in changes:
        print(
            change.file.ljust(60),
            change.status.ljust(12),
            (", ".join(change.added) or "-").ljust(20),
            ", ".join(change.removed) or "-",
        )
    print("\nLast run:", manifest_data.get("last_run") or "never")


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Harvest function and mixin documentation")
    parser_obj.add_argument("--root", help="Project root (defaults to the working directory)")
    parser_obj.add_argument("--target", help="Directory to scan (defaults to the root)")
    parser_obj.add_argument("--index-dir", help="Where scan output is stored (defaults to ROOT/_index)")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser_obj.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="Extract documentation records")
    scan_parser.add_argument(
        "--extensions",
        help="Comma-separated file extensions to scan (overrides DOC_HARVEST_EXTENSIONS)",
    )
    scan_parser.set_defaults(func=command_scan)

    render_parser = subparsers.add_parser("render", help="Render the extracted reference")
    render_parser.add_argument("--format", choices=["markdown", "html"], default="markdown")
    render_parser.add_argument("--output", help="Output file (defaults to INDEX_DIR/REFERENCE.md|html)")
    render_parser.set_defaults(func=command_render)

    check_parser = subparsers.add_parser("check", help="Dry-run status check")
    check_parser.add_argument(
        "--extensions",
        help="Comma-separated file extensions to scan (overrides DOC_HARVEST_EXTENSIONS)",
    )
    check_parser.set_defaults(func=command_check)

    return parser_obj


def main(argv: list[str] | None = None) -> None:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return
    configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
