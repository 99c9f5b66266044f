"""Parsing utilities for harvesting annotated function and mixin docs."""
from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from hashlib import sha256
from pathlib import Path
from typing import Any

from . import patterns

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = [".scss", ".sass", ".css", ".js"]

# Only "\n" ends a line; other Unicode breaks stay inside it.
LINE_BREAK_RE = re.compile(r"\r?\n")


@dataclass
class Parameter:
    type: str
    name: str
    default: str | None = None
    description: str = ""


@dataclass
class ReturnInfo:
    type: list[str] | None = None
    description: str | bool = False


@dataclass
class Link:
    url: str
    caption: str = ""


@dataclass(frozen=True)
class ClassifiedLine:
    """A single comment line reduced to its tag and payload."""

    tag: str
    value: Any
    multiple: bool = False


@dataclass
class DocRecord:
    """Documentation gathered for one function or mixin declaration."""

    type: str = ""
    name: str = ""
    description: str = ""
    access: str = "public"
    deprecated: str | bool = False
    author: str | bool = False
    returns: ReturnInfo = field(default_factory=ReturnInfo)
    parameters: list[Parameter] = field(default_factory=list)
    throws: list[str] = field(default_factory=list)
    todos: list[str] = field(default_factory=list)
    alias: list[str] = field(default_factory=list)
    link: list[Link] = field(default_factory=list)

    def apply(self, line: ClassifiedLine) -> None:
        if line.multiple:
            self._sequence(line.tag).append(line.value)
        elif line.tag == "description":
            self.description += line.value
        elif line.tag == "return":
            self.returns = line.value
        elif line.tag == "deprecated":
            self.deprecated = line.value
        elif line.tag == "author":
            self.author = line.value
        elif line.tag == "access":
            self.access = line.value
        else:
            raise ValueError(f"unknown scalar tag: {line.tag}")

    def _sequence(self, tag: str) -> list[Any]:
        if tag == "parameters":
            return self.parameters
        if tag == "throws":
            return self.throws
        if tag == "todos":
            return self.todos
        if tag == "alias":
            return self.alias
        if tag == "link":
            return self.link
        raise ValueError(f"unknown sequence tag: {tag}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "access": self.access,
            "deprecated": self.deprecated,
            "author": self.author,
            "return": asdict(self.returns),
            "parameters": [asdict(parameter) for parameter in self.parameters],
            "throws": list(self.throws),
            "todos": list(self.todos),
            "alias": list(self.alias),
            "link": [asdict(link) for link in self.link],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocRecord:
        returns = data.get("return") or {}
        return cls(
            type=str(data.get("type", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            access=str(data.get("access", "public")),
            deprecated=data.get("deprecated", False),
            author=data.get("author", False),
            returns=ReturnInfo(
                type=returns.get("type"),
                description=returns.get("description", False),
            ),
            parameters=[Parameter(**entry) for entry in data.get("parameters", [])],
            throws=list(data.get("throws", [])),
            todos=list(data.get("todos", [])),
            alias=list(data.get("alias", [])),
            link=[Link(**entry) for entry in data.get("link", [])],
        )


@dataclass
class SourceDoc:
    """A documentation record together with where it was found."""

    record: DocRecord
    source_file: str
    line_number: int
    file_sha: str | None = None

    @property
    def anchor(self) -> str:
        file_part = re.sub(r"[/\\._]+", " ", self.source_file)
        return slugify(f"{file_part} {self.record.type} {self.record.name}")

    @property
    def signature(self) -> str:
        return f"{self.record.type} {self.record.name}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "file": self.source_file,
            "line": self.line_number,
            "file_sha256": self.file_sha,
        }
        data.update(self.record.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SourceDoc:
        return cls(
            record=DocRecord.from_dict(data),
            source_file=str(data.get("file", "")),
            line_number=int(data.get("line", 0)),
            file_sha=data.get("file_sha256"),
        )


@dataclass
class FileScanResult:
    """Outcome of parsing one source file.

    ``declarations`` holds ``"<kind> <name>"`` signatures in file order so
    later scans can tell which declarations appeared or went away.
    """

    file: str
    sha256: str = ""
    declarations: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def extracted_count(self) -> int:
        return len(self.declarations)

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "sha256": self.sha256,
            "declarations": list(self.declarations),
            "error": self.error,
        }


def _return_line(match: re.Match[str]) -> ClassifiedLine:
    types = [part.strip() for part in match.group(1).split("|") if part.strip()]
    value = ReturnInfo(type=list(dict.fromkeys(types)), description=match.group(2))
    return ClassifiedLine("return", value)


def _param_line(match: re.Match[str]) -> ClassifiedLine:
    value = Parameter(
        type=match.group(1),
        name=match.group(2),
        default=match.group(3) or None,
        description=match.group(4),
    )
    return ClassifiedLine("parameters", value, multiple=True)


def _deprecated_line(match: re.Match[str]) -> ClassifiedLine:
    return ClassifiedLine("deprecated", match.group(1) or True)


def _link_line(match: re.Match[str]) -> ClassifiedLine:
    return ClassifiedLine("link", Link(url=match.group(1), caption=match.group(2)), multiple=True)


def _scalar(tag: str) -> Callable[[re.Match[str]], ClassifiedLine]:
    return lambda match: ClassifiedLine(tag, match.group(1))


def _multi(tag: str) -> Callable[[re.Match[str]], ClassifiedLine]:
    return lambda match: ClassifiedLine(tag, match.group(1), multiple=True)


# First match wins; anything left over is description text.
TAG_RULES: list[
    tuple[Callable[[str], re.Match[str] | None], Callable[[re.Match[str]], ClassifiedLine]]
] = [
    (patterns.is_returns, _return_line),
    (patterns.is_param, _param_line),
    (patterns.is_deprecated, _deprecated_line),
    (patterns.is_author, _scalar("author")),
    (patterns.is_access, _scalar("access")),
    (patterns.is_throws, _multi("throws")),
    (patterns.is_todo, _multi("todos")),
    (patterns.is_alias, _multi("alias")),
    (patterns.is_link, _link_line),
]


def parse_line(line: str) -> ClassifiedLine | None:
    """Classify an uncommented line, or return ``None`` when it should be skipped."""
    if patterns.is_empty(line) or patterns.is_separator(line) or patterns.is_ignore(line):
        return None
    for recognizer, build in TAG_RULES:
        match = recognizer(line)
        if match:
            return build(match)
    return ClassifiedLine("description", "\n" + line)


def find_comment_block(index: int, lines: Sequence[str]) -> list[str]:
    """Return the run of comment lines directly above ``lines[index]``.

    The scan stops at the first non-comment line, or at a blank line once
    at least one comment line has been collected.
    """
    if not 0 <= index <= len(lines):
        raise IndexError(f"declaration index {index} outside 0..{len(lines)}")
    comments: list[str] = []
    scan_index = index - 1
    while scan_index >= 0:
        candidate = lines[scan_index]
        if comments and patterns.is_empty(candidate):
            break
        if not patterns.is_comment(candidate):
            break
        comments.insert(0, candidate)
        scan_index -= 1
    return comments


def parse_comment_block(comments: Iterable[str]) -> DocRecord:
    record = DocRecord()
    for raw_line in comments:
        line = parse_line(patterns.uncomment(raw_line))
        if line is None:
            continue
        record.apply(line)
    # Every description line starts with a break; drop the first one.
    record.description = record.description[1:]
    return record


def iter_declarations(content: str) -> Iterator[tuple[int, DocRecord]]:
    """Yield ``(line_index, record)`` for every declaration in ``content``."""
    if not isinstance(content, str):
        raise TypeError(f"expected str content, got {type(content).__name__}")
    lines = LINE_BREAK_RE.split(content)
    for index, line in enumerate(lines):
        match = patterns.is_function_or_mixin(line)
        if not match:
            continue
        record = parse_comment_block(find_comment_block(index, lines))
        record.type = match.group(1)
        record.name = match.group(2)
        yield index, record


def parse_file(content: str) -> list[DocRecord]:
    return [record for _, record in iter_declarations(content)]


def resolve_extensions(extensions: Iterable[str] | None = None) -> list[str]:
    if extensions:
        order = [value.strip() for value in extensions if value and value.strip()]
    else:
        env_value = os.environ.get("DOC_HARVEST_EXTENSIONS")
        if env_value:
            order = [value.strip() for value in env_value.split(",") if value.strip()]
        else:
            order = list(DEFAULT_EXTENSIONS)
    resolved: list[str] = []
    for value in order:
        suffix = value.lower() if value.startswith(".") else f".{value.lower()}"
        if suffix not in resolved:
            resolved.append(suffix)
    return resolved or list(DEFAULT_EXTENSIONS)


def iter_supported_files(target_dir: Path, extensions: Iterable[str] | None = None) -> Iterator[Path]:
    suffixes = set(resolve_extensions(extensions))
    for path in sorted(target_dir.rglob("*")):
        if "_index" in path.parts or path.suffix.lower() not in suffixes:
            continue
        if path.is_file():
            yield path


def slugify(text: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9\s-]", "", text.strip().lower())
    cleaned = re.sub(r"\s+", "-", cleaned)
    cleaned = re.sub(r"-+", "-", cleaned)
    return cleaned


def source_label(path: Path, base_path: Path, target_dir: Path | None = None) -> str:
    """Name ``path`` relative to the project root, else to the scanned directory."""
    for anchor in (base_path, target_dir):
        if anchor is not None and path.is_relative_to(anchor):
            return path.relative_to(anchor).as_posix()
    return path.as_posix()


def parse_source(
    path: Path,
    base_path: Path,
    *,
    target_dir: Path | None = None,
) -> tuple[list[SourceDoc], FileScanResult]:
    label = source_label(path, base_path, target_dir)
    try:
        raw_bytes = path.read_bytes()
    except OSError as exc:
        logger.error("Failed to read %s: %s", path, exc)
        return [], FileScanResult(file=label, error=str(exc))
    file_sha = sha256(raw_bytes).hexdigest()
    text = raw_bytes.decode("utf-8", errors="ignore")
    docs = [
        SourceDoc(record=record, source_file=label, line_number=index + 1, file_sha=file_sha)
        for index, record in iter_declarations(text)
    ]
    result = FileScanResult(
        file=label,
        sha256=file_sha,
        declarations=[doc.signature for doc in docs],
    )
    return docs, result


def scan_directory(
    target_dir: Path,
    base_path: Path,
    *,
    extensions: Iterable[str] | None = None,
) -> tuple[list[SourceDoc], dict[str, FileScanResult]]:
    docs: list[SourceDoc] = []
    files: dict[str, FileScanResult] = {}
    for file_path in iter_supported_files(target_dir, extensions):
        parsed, result = parse_source(file_path, base_path, target_dir=target_dir)
        logger.debug("Parsed %d declarations from %s", result.extracted_count, result.file)
        docs.extend(parsed)
        files[result.file] = result
    return docs, files
