"""Evidence formatting shared by checkers and the requirement collapser."""

from typing import Iterable

# Items listed before the rest is summarized as "+N more".
MAX_EVIDENCE_ITEMS = 5


def truncate_items(items: Iterable[str], limit: int = MAX_EVIDENCE_ITEMS) -> tuple[list[str], int]:
    """Split items into the shown prefix and the hidden count."""
    items = list(items)
    if limit <= 0 or len(items) <= limit:
        return items, 0
    return items[:limit], len(items) - limit


def format_resource_ids(ids: Iterable[str], limit: int = MAX_EVIDENCE_ITEMS) -> str:
    """Format offending resource IDs as ``[a b c +2 more]``."""
    shown, hidden = truncate_items(ids, limit)
    if hidden:
        shown.append(f"+{hidden} more")
    return "[" + " ".join(shown) + "]"


def merge_evidence(texts: Iterable[str], limit: int = MAX_EVIDENCE_ITEMS) -> str:
    """Join evidence strings with ``; `` and summarize the overflow."""
    shown, hidden = truncate_items([t for t in texts if t], limit)
    merged = "; ".join(shown)
    if hidden:
        merged += f" (+{hidden} more)"
    return merged
