"""Collection Label — picks the public label a published post is filed under.

Invariants:
    - Precedence: first non-reserved title > first title > default label
    - Titles are taken in the order given (caller orders by collection creation time)
    - PURE: no IO
"""

from collections.abc import Iterable, Sequence


def resolve_post_label(
    collection_titles: Sequence[str],
    reserved_titles: Iterable[str],
    default_label: str,
) -> str:
    """Resolve the human label for a post from its item's collection titles."""
    reserved = set(reserved_titles)
    for title in collection_titles:
        if title not in reserved:
            return title
    if collection_titles:
        return collection_titles[0]
    return default_label
