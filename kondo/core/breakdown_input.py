"""Breakdown Input — extracts the text a breakdown is generated from.

Invariants:
    - Content is a numbered list: "1/ ... 2/ ... N/ ..."
    - Input = text between "1/" and "2/" plus the text of the highest-numbered line
    - Returns None when the content has no "1/ ... 2/" section (caller maps to ValidationError)
    - PURE: no IO
"""

import re

_FIRST_SECTION = re.compile(r"1/\s*([\s\S]*?)\s*2/")
_LINE_NUMBER = re.compile(r"(\d+)/")


def extract_breakdown_input(content: str) -> str | None:
    """Combine the first numbered section with the last numbered line."""
    match = _FIRST_SECTION.search(content)
    if not match or not match.group(1).strip():
        return None
    first_section = match.group(1).strip()

    last_number = max(int(n) for n in _LINE_NUMBER.findall(content))
    last_line = re.search(rf"{last_number}/\s*([^\r\n]*)", content)
    original_input = last_line.group(1).strip() if last_line else ""

    return f"{first_section}\n{original_input}"
