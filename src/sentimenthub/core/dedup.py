"""Near-duplicate removal for multi-source snippet batches."""

import re
from typing import List, Sequence

from .constants import DedupConstants
from .models import Snippet

_WS = re.compile(r"\s+")


def dedup_key(text: str) -> str:
    """Lower-case, truncate, then collapse whitespace."""
    return _WS.sub(" ", text.lower()[:DedupConstants.KEY_PREFIX_LENGTH])


def dedupe(snippets: Sequence[Snippet]) -> List[Snippet]:
    """Drop short snippets and keep the first snippet seen for each key.

    Only exact key equality counts as a duplicate, so two snippets that
    differ inside their first 100 characters both survive.
    """
    seen = set()
    out = []
    for snippet in snippets:
        if len(snippet.text) <= DedupConstants.MIN_TEXT_LENGTH:
            continue
        key = dedup_key(snippet.text)
        if key in seen:
            continue
        seen.add(key)
        out.append(snippet)
    return out
