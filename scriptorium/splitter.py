"""
Content splitting for oversized workspace files.

Large documents are divided into bounded parts written next to the
original (``notes.md`` -> ``notes_part1.md``, ``notes_part2.md``, ...),
while the original path receives a small markdown index of the parts.
"""

from __future__ import annotations

from scriptorium.types import FileSplit, LargeFileReport

DEFAULT_MAX_LINES = 500
DEFAULT_MAX_CHARS = 8000


def _split_name(path: str) -> tuple[str, str, str]:
    """Split a path into (directory prefix, stem, extension).

    The directory prefix keeps its trailing slash so that parts can be
    rebuilt as f"{prefix}{stem}_part{k}{ext}".
    """
    prefix, sep, filename = path.rpartition("/")
    prefix = prefix + sep
    dot = filename.rfind(".")
    if dot <= 0:
        return prefix, filename, ""
    return prefix, filename[:dot], filename[dot:]


def part_path(path: str, part: int) -> str:
    """Return the path of part ``part`` (1-based) of a split file."""
    prefix, stem, ext = _split_name(path)
    return f"{prefix}{stem}_part{part}{ext}"


def split_content(
    content: str,
    path: str,
    max_lines: int = DEFAULT_MAX_LINES,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> list[FileSplit]:
    """
    Split file content into parts bounded by line and character limits.

    A chunk is closed before the next line is added if it already holds
    ``max_lines`` lines or if the line would push it past ``max_chars``.
    Lines are never cut, so a single line longer than ``max_chars`` becomes
    a part of its own.

    Args:
        content: The file content.
        path: The path the content is destined for.
        max_lines: Maximum number of lines per part.
        max_chars: Maximum number of characters per part.

    Returns:
        One FileSplit with the unchanged path and content if no split is
        needed, otherwise one FileSplit per part in order. Every part but the
        last keeps its trailing newline, so concatenating the parts restores
        the original content.
    """
    if max_lines < 1:
        raise ValueError("max_lines must be at least 1")
    if max_chars < 1:
        raise ValueError("max_chars must be at least 1")

    lines = content.split("\n")
    last_index = len(lines) - 1

    chunks: list[list[str]] = []
    current: list[str] = []
    current_chars = 0

    for i, line in enumerate(lines):
        # The final line has no newline after it
        line_cost = len(line) + (0 if i == last_index else 1)

        if current and (
            len(current) >= max_lines or current_chars + line_cost > max_chars
        ):
            chunks.append(current)
            current = []
            current_chars = 0

        current.append(line)
        current_chars += line_cost

    if current:
        chunks.append(current)

    if len(chunks) <= 1:
        return [
            FileSplit(
                path=path,
                content=content,
                part=1,
                total_parts=1,
                line_count=len(lines),
            )
        ]

    parts: list[FileSplit] = []
    for k, chunk in enumerate(chunks, start=1):
        chunk_content = "\n".join(chunk)
        if k < len(chunks):
            chunk_content += "\n"
        parts.append(
            FileSplit(
                path=part_path(path, k),
                content=chunk_content,
                part=k,
                total_parts=-1,  # stamped below
                line_count=len(chunk),
            )
        )

    total = len(parts)
    for part in parts:
        part.total_parts = total

    return parts


def build_index(path: str, parts: list[FileSplit]) -> str:
    """
    Build the markdown index written at the original path of a split file.

    Args:
        path: The original file path.
        parts: The parts returned by split_content().

    Returns:
        The index document, or an empty string if the file was not split.
    """
    if len(parts) <= 1:
        return ""

    file_name = path.rsplit("/", 1)[-1] or path
    lines = [
        f"# {file_name} (Split File Index)",
        "",
        "This file was split due to size limitations.",
        "",
        f"Original file: {file_name}",
        "",
        "## Parts:",
    ]
    for part in parts:
        part_name = part.path.rsplit("/", 1)[-1]
        lines.append(f"{part.part}. [Part {part.part}]({part_name}) - {part.line_count} lines")

    return "\n".join(lines) + "\n"


def detect_large(content: str, max_lines: int = DEFAULT_MAX_LINES) -> LargeFileReport:
    """
    Cheap pre-check that only counts lines.

    This is advisory: split_content() also applies a character limit, so a
    file reported as not large can still be split.
    """
    line_count = content.count("\n") + 1

    if line_count <= max_lines:
        return LargeFileReport(is_large=False, line_count=line_count)

    return LargeFileReport(
        is_large=True,
        line_count=line_count,
        message=(
            f"Large file detected ({line_count} lines) - This file will be split "
            "into multiple parts based on line and character limits to ensure "
            "processability."
        ),
    )


def split_notice(content: str, parts: list[FileSplit], max_lines: int = DEFAULT_MAX_LINES) -> str:
    """Human-readable notice returned to callers when a write was split."""
    report = detect_large(content, max_lines)
    if report.is_large:
        return report.message
    return (
        f"Large file detected ({len(content)} characters) - This file was split "
        f"into {len(parts)} parts based on line and character limits to ensure "
        "processability."
    )
