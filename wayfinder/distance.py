"""
Edit distance for typo-tolerant command suggestions.

Only used for did-you-mean hints; suggestions never change control flow.
"""
import functools


@functools.cache
def levenshtein(source, target, /):
    """
    Return the Levenshtein distance between two strings (case-sensitive).

    Insertions, deletions and substitutions all cost 1.

    Examples
    - levenshtein("buidl", "build") -> 2
    - levenshtein("", "abc")        -> 3
    """
    if not isinstance(source, str) or not isinstance(target, str):
        raise TypeError("levenshtein() arguments must be strings")

    # Single rolling row over the target; previous[j] holds the distance of
    # source[:i - 1] to target[:j].
    previous = list(range(len(target) + 1))
    for i, left in enumerate(source, 1):
        current = [i]
        for j, right in enumerate(target, 1):
            current.append(min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + (left != right),  # substitution
            ))
        previous = current
    return previous[-1]


def suggest(token, candidates, /, threshold=2):
    """
    Pick the candidate closest to token, or None when nothing is close enough.

    Rules
    - distance is computed with levenshtein(token, candidate).
    - the minimum wins; ties go to the first candidate in iteration order.
    - the winner is returned only when its distance is <= threshold.

    Examples
    - suggest("buidl", ["build", "deploy"]) -> "build"
    - suggest("xyz", ["build", "deploy"])   -> None
    """
    best, minimum = None, None
    for candidate in candidates:
        distance = levenshtein(token, candidate)
        if minimum is None or distance < minimum:
            best, minimum = candidate, distance
    if minimum is None or minimum > threshold:
        return None
    return best


__all__ = (
    "levenshtein",
    "suggest",
)
