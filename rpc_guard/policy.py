"""Protection policy: does a set of requested methods need a key?"""

from typing import AbstractSet, Iterable


def requires_auth(methods: Iterable[str], protected: AbstractSet[str]) -> bool:
    """
    True iff any requested method is protected.

    Evaluated once per batch, so one protected call gates the whole batch.
    """
    return any(method in protected for method in methods)
