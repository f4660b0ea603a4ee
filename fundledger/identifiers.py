"""Mini README: Deterministic identifier sequences for ledger entities.

New campaigns, pledges and expenses receive ids such as ``camp_0001``. Ids
loaded from a snapshot are kept verbatim; the sequence simply continues past
the largest numeric suffix it has observed.
"""

from __future__ import annotations


def sequence_of(identifier: str) -> int:
    """Numeric suffix of ``identifier``, or 0 when it has none."""

    suffix = str(identifier).split("_")[-1]
    return int(suffix) if suffix.isdigit() else 0


class IdentifierSequence:
    """Generate ``<prefix>_NNNN`` identifiers."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self._last = 0

    def observe(self, identifier: str) -> None:
        self._last = max(self._last, sequence_of(identifier))

    def next(self) -> str:
        self._last += 1
        return f"{self.prefix}_{self._last:04d}"
