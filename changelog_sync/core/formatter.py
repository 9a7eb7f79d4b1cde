"""Formatting of user input into changelog entries and merging them into a log."""

import re

from ..models.config import DEFAULT_TITLE

# Only "\n" and "\r\n" end a line; form feeds and U+2028 stay inside it
_LINE_BREAK = re.compile(r"\r?\n")


def format_entry(raw_text: str, heading: str) -> list[str]:
    """Format user input as a Markdown list below a heading.

    Blank lines are dropped. Lines that are not list items get a `- ` prefix
    and items written as `-text` are rewritten to `- text`.

    Args:
        raw_text: Text as entered by the user, one item per line
        heading: Entry headline, already formatted as Markdown

    Returns:
        `[heading, "", *items]`; heading and blank line are always present
    """
    lines = [heading, ""]

    for line in _LINE_BREAK.split(raw_text):
        stripped = line.strip()
        if not stripped:
            continue

        if not stripped.startswith("-"):
            lines.append(f"- {line}")
        elif stripped.startswith("- "):
            lines.append(line)
        else:
            # "-text" -> "- text"
            lines.append(f"- {line.lstrip()[1:]}")

    return lines


def merge(existing: list[str], new_block: list[str], title: str = DEFAULT_TITLE) -> list[str]:
    """Insert a new entry directly below the title of an existing log.

    The first two lines of the old log are only kept if they differ from the
    title and blank line written at the same position, so the title is never
    duplicated. Everything after them is kept verbatim.

    Args:
        existing: Lines of the current changelog (empty for a new file)
        new_block: Lines of the entry to add
        title: Title line of the changelog document

    Returns:
        Lines of the updated changelog
    """
    merged = [title, ""]
    merged.extend(new_block)

    for index, line in enumerate(existing):
        if index < 2 and merged[index].strip() == line.strip():
            continue
        merged.append(line)

    return merged


def prepend_entry(existing: list[str], new_block: list[str], title: str = DEFAULT_TITLE) -> list[str]:
    """Merge a new entry into a log, separated from older history by a blank line.

    No separator is added when the log has no history below its title, or
    when the entry already ends with a blank line.
    """
    block = list(new_block)
    history = merge(existing, [], title)[2:]
    if history and block and block[-1].strip():
        block.append("")
    return merge(existing, block, title)
