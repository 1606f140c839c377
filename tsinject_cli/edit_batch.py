"""Ordered insertion batches applied against the original source bytes."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from .errors import StructureError
from .models import EditDirective

logger = logging.getLogger(__name__)

_SIDE_RANK = {"left": 0, "right": 1}


class EditBatch:
    """A list of insertions for one file, applied in ascending offset order.

    Every offset refers to the *unmodified* source. Directives are kept in the
    order they were added, but :meth:`apply` always splices them from the
    lowest offset upwards, so producers never have to order their output to
    keep offsets valid. Directives sharing an offset keep ``left`` before
    ``right`` and otherwise their insertion order.
    """

    def __init__(self, path: str, directives: Optional[Iterable[EditDirective]] = None) -> None:
        self.path = path
        self._directives: List[EditDirective] = []
        for directive in directives or ():
            self.add(directive)

    def add(self, directive: EditDirective) -> None:
        if directive.path != self.path:
            raise ValueError(f"Directive for {directive.path} added to batch for {self.path}")
        self._directives.append(directive)

    def __iter__(self) -> Iterator[EditDirective]:
        return iter(self._directives)

    def __len__(self) -> int:
        return len(self._directives)

    @property
    def is_noop(self) -> bool:
        return all(d.is_noop for d in self._directives)

    def ordered(self) -> List[EditDirective]:
        """Effective directives in application order (no-ops dropped)."""
        effective = [d for d in self._directives if not d.is_noop]
        return sorted(effective, key=lambda d: (d.offset, _SIDE_RANK[d.side]))

    def apply(self, source: bytes) -> bytes:
        """Return *source* with every insertion spliced in.

        All offsets are validated before any output is built, so a bad
        directive never yields half-applied text.
        """
        ordered = self.ordered()
        for directive in ordered:
            if not 0 <= directive.offset <= len(source):
                raise StructureError(
                    self.path,
                    f"offset out of range: {directive.offset} (file has {len(source)} bytes)",
                )

        pieces: List[bytes] = []
        cursor = 0
        for directive in ordered:
            pieces.append(source[cursor:directive.offset])
            pieces.append(directive.text.encode("utf-8"))
            cursor = directive.offset
        pieces.append(source[cursor:])

        if ordered:
            logger.debug("Applied %d insertion(s) to %s", len(ordered), self.path)
        return b"".join(pieces)

    def apply_text(self, source: str) -> str:
        return self.apply(source.encode("utf-8")).decode("utf-8")
