"""Editing the NTP= line of systemd-timesyncd's config file."""
import re
from pathlib import Path
from typing import List, Optional

from timewarden.core.logger import get_logger

logger = get_logger(__name__)

TIME_SECTION = "[Time]"
ACTIVE_NTP_LINE = re.compile(r"^\s*NTP\s*=")
SECTION_HEADER = re.compile(r"^\s*\[[^\]]+\]\s*$")
ENCODING_ERRORS = "surrogateescape"


def read_config(path: Path) -> Optional[str]:
    """Return the file's text, or None if it does not exist.

    Bytes that are not UTF-8 survive a read-then-write unchanged.

    Raises:
        OSError: If the path exists but cannot be read
    """
    path = Path(path)
    if not path.exists():
        return None
    return path.read_text(errors=ENCODING_ERRORS)


def contains_line(path: Path, line: str) -> bool:
    """True if the file exists and contains `line` as a substring."""
    text = read_config(path)
    return text is not None and line in text


def append_line(path: Path, line: str) -> None:
    """Append `line` to the file, creating it if needed.

    Repeated calls append repeated lines; nothing is de-duplicated.
    """
    path = Path(path)
    existing = read_config(path)
    with open(path, "a", errors=ENCODING_ERRORS) as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    logger.debug(f"Appended '{line}' to {path}")


def upsert_line(path: Path, line: str) -> bool:
    """Make `line` the only active NTP= entry in the file.

    The first active NTP= line is replaced in place and later ones are
    dropped. Without one, the line goes at the end of the [Time] section,
    which is created when missing.

    Returns:
        True if the file content changed
    """
    path = Path(path)
    existing = read_config(path)

    if existing is None:
        path.write_text(f"{TIME_SECTION}\n{line}\n", errors=ENCODING_ERRORS)
        logger.debug(f"Created {path} with '{line}'")
        return True

    lines = existing.splitlines()
    updated: List[str] = []
    replaced = False
    for current in lines:
        if ACTIVE_NTP_LINE.match(current):
            if not replaced:
                updated.append(line)
                replaced = True
            continue
        updated.append(current)

    if not replaced:
        updated = _insert_in_time_section(updated, line)

    new_text = "\n".join(updated) + "\n"
    if new_text == existing:
        return False

    path.write_text(new_text, errors=ENCODING_ERRORS)
    logger.debug(f"Wrote '{line}' to {path}")
    return True


def _insert_in_time_section(lines: List[str], line: str) -> List[str]:
    try:
        start = next(i for i, text in enumerate(lines) if text.strip() == TIME_SECTION)
    except StopIteration:
        while lines and not lines[-1].strip():
            lines = lines[:-1]
        return lines + [TIME_SECTION, line]

    end = len(lines)
    for i in range(start + 1, len(lines)):
        if SECTION_HEADER.match(lines[i]):
            end = i
            break

    # keep blank lines that separate the next section
    insert_at = end
    while insert_at > start + 1 and not lines[insert_at - 1].strip():
        insert_at -= 1

    return lines[:insert_at] + [line] + lines[insert_at:]


def count_lines(path: Path, line: str) -> int:
    """Number of lines in the file exactly equal to `line`."""
    text = read_config(path)
    if text is None:
        return 0
    return sum(1 for current in text.splitlines() if current.strip() == line)
