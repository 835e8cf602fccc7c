"""Word-level diff between an original and an improved text.

A greedy walk with a short look-ahead, good enough to highlight the edits a
writing assistant makes. It is not a minimal edit script.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_TOKEN_RE = re.compile(r"(\s+)")
LOOKAHEAD = 5


class DiffType(str, Enum):
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    ADDED = "added"


@dataclass
class DiffPart:
    type: DiffType
    text: str


def tokenize(text: str) -> list[str]:
    """Split on whitespace, keeping the whitespace runs as tokens."""
    return _TOKEN_RE.split(text)


def generate_diff(original: str, improved: str) -> list[DiffPart]:
    """Diff two texts token by token.

    On a mismatch, look ahead (up to four tokens) in the improved text for
    the current original token, then in the original text for the current
    improved token; otherwise record a replacement.
    """
    old = tokenize(original)
    new = tokenize(improved)
    diff: list[DiffPart] = []
    i = j = 0

    while i < len(old) or j < len(new):
        if i >= len(old):
            diff.append(DiffPart(DiffType.ADDED, new[j]))
            j += 1
        elif j >= len(new):
            diff.append(DiffPart(DiffType.REMOVED, old[i]))
            i += 1
        elif old[i] == new[j]:
            diff.append(DiffPart(DiffType.UNCHANGED, old[i]))
            i += 1
            j += 1
        else:
            found = False

            for k in range(j + 1, min(j + LOOKAHEAD, len(new))):
                if old[i] == new[k]:
                    diff.extend(DiffPart(DiffType.ADDED, token) for token in new[j:k])
                    diff.append(DiffPart(DiffType.UNCHANGED, old[i]))
                    i += 1
                    j = k + 1
                    found = True
                    break

            if not found:
                for k in range(i + 1, min(i + LOOKAHEAD, len(old))):
                    if new[j] == old[k]:
                        diff.extend(DiffPart(DiffType.REMOVED, token) for token in old[i:k])
                        diff.append(DiffPart(DiffType.UNCHANGED, new[j]))
                        i = k + 1
                        j += 1
                        found = True
                        break

            if not found:
                diff.append(DiffPart(DiffType.REMOVED, old[i]))
                diff.append(DiffPart(DiffType.ADDED, new[j]))
                i += 1
                j += 1

    return diff


def summarize_diff(parts: list[DiffPart]) -> dict[str, int]:
    """Count non-whitespace tokens per change type."""
    counts = {t.value: 0 for t in DiffType}
    for part in parts:
        if part.text.strip():
            counts[part.type.value] += 1
    return counts
