"""Branch pattern matching.

Patterns recognised by ``matches_pattern``:
- ``*`` or an exact branch name
- ``!name`` / ``-name``: every branch except ``name``
- ``prefix*``, ``*suffix``, ``*substring*``
"""

BranchSpec = str | list[str]

NEGATION_PREFIXES = ("!", "-")


def matches_pattern(actual: str, pattern: str) -> bool:
    """Check whether a branch name matches a single pattern.

    Args:
        actual: The branch name being tested.
        pattern: A pattern in one of the supported forms.

    Returns:
        True if the branch matches.
    """
    if pattern == "*" or pattern == actual:
        return True
    if pattern.startswith(NEGATION_PREFIXES):
        return actual != pattern[1:]

    first = pattern.find("*")
    if first == -1:
        return False

    last = pattern.rfind("*")
    if last > first:
        return pattern[first + 1 : last] in actual
    if first == 0:
        return actual.endswith(pattern[1:])
    return actual.startswith(pattern[:first])


def should_track(actual: str, spec: BranchSpec) -> bool:
    """Check whether a branch is tracked by the configured branch spec.

    A list spec tracks the branch if any of its patterns matches. An empty
    spec tracks nothing.
    """
    if isinstance(spec, str):
        return bool(spec) and matches_pattern(actual, spec)
    return any(matches_pattern(actual, pattern) for pattern in spec)
