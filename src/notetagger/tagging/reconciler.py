"""
Tag reconciliation against an existing vocabulary.

Freshly generated tags are replaced by an existing tag when the two are
similar enough, so recommendations reuse the labels a collection already has
(e.g. "Golang" becomes "golang").
"""

from typing import Callable, Iterable, List, Optional, Sequence


SIMILARITY_THRESHOLD = 0.7

SimilarityFunc = Callable[[str, str], float]


def similarity(first: str, second: str) -> float:
    """
    Case-insensitive character-set similarity between two tags.

    Both strings are lowercased and reduced to their sets of unique
    characters; the score is the size of the intersection divided by the
    size of the larger set. Identical strings score 1.0.

    Args:
        first: First tag
        second: Second tag

    Returns:
        Score in [0, 1]

    Example:
        >>> similarity("Golang", "golang")
        1.0
    """
    first = first.lower()
    second = second.lower()
    if first == second:
        return 1.0

    first_chars = set(first)
    second_chars = set(second)
    return len(first_chars & second_chars) / max(len(first_chars), len(second_chars))


def find_similar_tag(
    candidate: str,
    existing_tags: Iterable[str],
    threshold: float = SIMILARITY_THRESHOLD,
    similarity_func: SimilarityFunc = similarity
) -> Optional[str]:
    """
    Return the existing tag most similar to ``candidate``.

    Only scores strictly above ``threshold`` count. On ties the tag seen
    first wins. Returns None when no existing tag qualifies.
    """
    best_tag = None
    best_score = 0.0

    for existing in existing_tags:
        score = similarity_func(candidate, existing)
        if score > threshold and score > best_score:
            best_tag = existing
            best_score = score

    return best_tag


def reconcile(
    candidates: Sequence[str],
    existing_tags: Sequence[str],
    threshold: float = SIMILARITY_THRESHOLD,
    similarity_func: SimilarityFunc = similarity
) -> List[str]:
    """
    Prefer existing tags over near-duplicate candidates.

    Each candidate is replaced in place by its most similar existing tag, if
    any; otherwise it is kept as generated. Order is preserved and the output
    is not deduplicated.

    Example:
        >>> reconcile(["Golang", "databases"], ["golang", "storage"])
        ['golang', 'databases']
    """
    if not existing_tags:
        return list(candidates)

    reconciled = []
    for candidate in candidates:
        match = find_similar_tag(candidate, existing_tags, threshold, similarity_func)
        reconciled.append(match if match is not None else candidate)
    return reconciled
