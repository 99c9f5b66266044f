"""Rendering utilities for harvested documentation."""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from itertools import groupby
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from .parser import DocRecord, SourceDoc

TITLE = "Stylesheet API Reference"


def _by_file(docs: Iterable[SourceDoc]) -> list[tuple[str, list[SourceDoc]]]:
    ordered = sorted(docs, key=lambda doc: (doc.source_file, doc.line_number))
    return [(file, list(group)) for file, group in groupby(ordered, key=lambda doc: doc.source_file)]


def _kind_summary(docs: Iterable[SourceDoc]) -> str:
    counts: Counter[str] = Counter(doc.record.type for doc in docs)
    return ", ".join(f"{kind} ({count})" for kind, count in sorted(counts.items()))


def format_types(types: Iterable[str] | None) -> str:
    if not types:
        return ""
    return " | ".join(types)


def escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", "<br>")


def render_markdown(docs: Iterable[SourceDoc]) -> str:
    entries = list(docs)
    lines = [f"# {TITLE}", ""]
    lines.append(f"**Total declarations:** {len(entries)}")
    lines.append("")
    if entries:
        lines.append(f"**By kind:** {_kind_summary(entries)}")
        lines.append("")
    for source_file, group in _by_file(entries):
        lines.append(f"## `{source_file}`")
        lines.append("")
        for doc in group:
            lines.extend(format_record_markdown(doc))
    return "\n".join(lines)


def format_record_markdown(doc: SourceDoc) -> list[str]:
    record = doc.record
    lines = [f"### {record.type} `{record.name}`", ""]
    if record.deprecated is not False:
        reason = "" if record.deprecated is True else f" {record.deprecated}"
        lines.append(f"> **Deprecated.**{reason}")
        lines.append("")
    if record.description:
        lines.append(record.description)
        lines.append("")
    if record.parameters:
        lines.append("| Parameter | Type | Default | Description |")
        lines.append("| --- | --- | --- | --- |")
        for parameter in record.parameters:
            default = f"`{escape_cell(parameter.default)}`" if parameter.default else "-"
            lines.append(
                f"| `{parameter.name}` | `{escape_cell(parameter.type)}` | {default} | "
                f"{escape_cell(parameter.description)} |"
            )
        lines.append("")
    if record.returns.type is not None:
        returns = f"**Returns:** `{format_types(record.returns.type)}`"
        if record.returns.description:
            returns += f" - {record.returns.description}"
        lines.append(returns)
        lines.append("")
    for label, values in (("Throws", record.throws), ("Todo", record.todos)):
        if values:
            lines.append(f"**{label}:**")
            lines.append("")
            lines.extend(f"- {value}" for value in values)
            lines.append("")
    if record.alias:
        lines.append("**Aliases:** " + ", ".join(f"`{alias}`" for alias in record.alias))
        lines.append("")
    if record.link:
        links = ", ".join(f"[{link.caption or link.url}]({link.url})" for link in record.link)
        lines.append(f"**See also:** {links}")
        lines.append("")
    lines.append(_footer(doc))
    lines.append("")
    return lines


def _footer(doc: SourceDoc) -> str:
    parts = [f"access: {doc.record.access}"]
    if doc.record.author:
        parts.append(f"author: {doc.record.author}")
    parts.append(f"defined in `{doc.source_file}:{doc.line_number}`")
    return "_" + " · ".join(parts) + "_"


def render_html(docs: Iterable[SourceDoc]) -> str:
    entries = list(docs)
    soup = BeautifulSoup(
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"/></head><body></body></html>",
        "lxml",
    )
    title = soup.new_tag("title")
    title.string = TITLE
    soup.head.append(title)
    body = soup.body
    heading = soup.new_tag("h1")
    heading.string = TITLE
    body.append(heading)
    summary = soup.new_tag("p", attrs={"class": "summary"})
    summary_text = f"Total declarations: {len(entries)}"
    if entries:
        summary_text += f" ({_kind_summary(entries)})"
    summary.string = summary_text
    body.append(summary)
    for source_file, group in _by_file(entries):
        file_section = soup.new_tag("section", attrs={"class": "source-file"})
        file_heading = soup.new_tag("h2")
        file_heading.string = source_file
        file_section.append(file_heading)
        for doc in group:
            file_section.append(build_record_html(soup, doc))
        body.append(file_section)
    return str(soup)


def build_record_html(soup: BeautifulSoup, doc: SourceDoc) -> Tag:
    record = doc.record
    article = soup.new_tag("article", id=doc.anchor, attrs={"class": record.type})
    heading = soup.new_tag("h3")
    heading.string = f"{record.type} {record.name}"
    article.append(heading)
    if record.deprecated is not False:
        notice = soup.new_tag("p", attrs={"class": "deprecated"})
        notice.string = "Deprecated." if record.deprecated is True else f"Deprecated. {record.deprecated}"
        article.append(notice)
    if record.description:
        paragraph = soup.new_tag("p", attrs={"class": "description"})
        for index, text in enumerate(record.description.split("\n")):
            if index:
                paragraph.append(soup.new_tag("br"))
            paragraph.append(text)
        article.append(paragraph)
    if record.parameters:
        article.append(_parameter_table(soup, record))
    if record.returns.type is not None:
        returns = soup.new_tag("p", attrs={"class": "returns"})
        returns_text = f"Returns: {format_types(record.returns.type)}"
        if record.returns.description:
            returns_text += f" - {record.returns.description}"
        returns.string = returns_text
        article.append(returns)
    for css_class, values in (("throws", record.throws), ("todos", record.todos), ("alias", record.alias)):
        if values:
            listing = soup.new_tag("ul", attrs={"class": css_class})
            for value in values:
                item = soup.new_tag("li")
                item.string = value
                listing.append(item)
            article.append(listing)
    if record.link:
        listing = soup.new_tag("ul", attrs={"class": "links"})
        for link in record.link:
            item = soup.new_tag("li")
            anchor = soup.new_tag("a", href=link.url)
            anchor.string = link.caption or link.url
            item.append(anchor)
            listing.append(item)
        article.append(listing)
    footer = soup.new_tag("footer")
    footer.string = _footer(doc).strip("_").replace("`", "")
    article.append(footer)
    return article


def _parameter_table(soup: BeautifulSoup, record: DocRecord) -> Tag:
    table = soup.new_tag("table", attrs={"class": "parameters"})
    header = soup.new_tag("tr")
    for label in ("Parameter", "Type", "Default", "Description"):
        cell = soup.new_tag("th")
        cell.string = label
        header.append(cell)
    table.append(header)
    for parameter in record.parameters:
        row = soup.new_tag("tr")
        for value in (parameter.name, parameter.type, parameter.default or "-", parameter.description):
            cell = soup.new_tag("td")
            cell.string = value
            row.append(cell)
        table.append(row)
    return table


def write_output(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
