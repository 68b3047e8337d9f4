"""In-memory editing buffer with markers, text properties, and narrowing

Positions are 0-based character offsets. A Marker tracks a position through
edits; its insertion type decides whether text inserted exactly at the
marker lands before it (marker advances) or after it (marker stays).
TextSpans carry the read-only and face properties of protected context.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, Optional, Union

from mdctx.errors import ReadOnlyError, RegionError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Marker:
    """A buffer position that moves with surrounding edits."""
    position: Optional[int]
    insertion_type: bool = False    # True: advance past text inserted at position

    @property
    def valid(self) -> bool:
        return self.position is not None


@dataclass
class TextSpan:
    """Properties attached to the half-open range [start, end)."""
    start: int
    end: int
    read_only: bool = False
    rear_nonsticky: bool = False    # inserting right after the span is not blocked
    face: Optional[str] = None


Pos = Union[int, Marker]


def _pos(value: Pos) -> int:
    if isinstance(value, Marker):
        if value.position is None:
            raise RegionError("Marker does not point anywhere")
        return value.position
    return value


class Buffer:
    """A text buffer in the style of an editor buffer."""

    def __init__(self, text: str = "", file_path: Optional[Path] = None):
        self._text = text
        self.point = 0
        self.file_path = file_path
        self.spans: list[TextSpan] = []
        self._markers: list[Marker] = []
        self._narrowing: Optional[tuple[Marker, Marker]] = None
        self._inhibit_read_only = False

    def __len__(self) -> int:
        return len(self._text)

    @property
    def text(self) -> str:
        """Whole buffer text, ignoring narrowing."""
        return self._text

    @property
    def point_min(self) -> int:
        return self._narrowing[0].position if self._narrowing else 0

    @property
    def point_max(self) -> int:
        return self._narrowing[1].position if self._narrowing else len(self._text)

    @property
    def narrowed(self) -> bool:
        return self._narrowing is not None

    @property
    def visible_text(self) -> str:
        return self._text[self.point_min:self.point_max]

    def substring(self, start: Pos, end: Pos) -> str:
        return self._text[_pos(start):_pos(end)]

    def goto_char(self, pos: Pos) -> None:
        self.point = min(max(_pos(pos), self.point_min), self.point_max)

    # --- markers ---

    def make_marker(self, pos: Pos, insertion_type: bool = False) -> Marker:
        position = _pos(pos)
        if not 0 <= position <= len(self._text):
            raise RegionError(f"Position {position} outside buffer of size {len(self._text)}")
        marker = Marker(position, insertion_type)
        self._markers.append(marker)
        return marker

    def delete_marker(self, marker: Marker) -> None:
        """Detach marker so it no longer points anywhere."""
        marker.position = None
        if marker in self._markers:
            self._markers.remove(marker)

    # --- narrowing ---

    def narrow_to_region(self, start: Pos, end: Pos) -> None:
        s, e = sorted((_pos(start), _pos(end)))
        self.widen()
        self._narrowing = (self.make_marker(s), self.make_marker(e, insertion_type=True))
        self.goto_char(self.point)

    def widen(self) -> None:
        if self._narrowing:
            for marker in self._narrowing:
                self.delete_marker(marker)
            self._narrowing = None

    # --- text properties ---

    def add_span(self, start: Pos, end: Pos, **props) -> TextSpan:
        span = TextSpan(_pos(start), _pos(end), **props)
        self.spans.append(span)
        return span

    def spans_at(self, pos: int) -> list[TextSpan]:
        return [s for s in self.spans if s.start <= pos < s.end]

    def segments(self) -> Iterator[tuple[str, Optional[str]]]:
        """Yield (text, face) runs covering the visible text."""
        lo, hi = self.point_min, self.point_max
        cuts = {lo, hi}
        for s in self.spans:
            cuts.update(p for p in (s.start, s.end) if lo < p < hi)
        edges = sorted(cuts)
        for a, b in zip(edges, edges[1:]):
            faces = [s.face for s in self.spans_at(a) if s.face]
            yield self._text[a:b], faces[0] if faces else None

    @contextmanager
    def inhibit_read_only(self):
        """Allow edits to protected text inside the block."""
        previous = self._inhibit_read_only
        self._inhibit_read_only = True
        try:
            yield self
        finally:
            self._inhibit_read_only = previous

    @contextmanager
    def atomic_change(self):
        """Restore text, point, markers, spans, and narrowing if the block raises."""
        text, point = self._text, self.point
        markers = [(m, m.position, m.insertion_type) for m in self._markers]
        spans = [replace(s) for s in self.spans]
        narrowing = self._narrowing
        try:
            yield self
        except Exception:
            known = {id(m) for m, _, _ in markers}
            for marker in self._markers:
                if id(marker) not in known:
                    marker.position = None
            for marker, position, insertion_type in markers:
                marker.position, marker.insertion_type = position, insertion_type
            self._markers = [m for m, _, _ in markers]
            self._text, self.point = text, point
            self.spans = spans
            self._narrowing = narrowing
            logger.debug("Rolled back buffer change")
            raise

    # --- editing ---

    def _check_region(self, start: int, end: int) -> None:
        if not self.point_min <= start <= end <= self.point_max:
            raise RegionError(
                f"Range {start}..{end} outside accessible region {self.point_min}..{self.point_max}"
            )

    def _check_insert(self, pos: int) -> None:
        if self._inhibit_read_only:
            return
        for s in self.spans:
            if not s.read_only:
                continue
            if s.start < pos < s.end or (pos == s.end and not s.rear_nonsticky):
                raise ReadOnlyError(s.start, s.end)

    def _check_delete(self, start: int, end: int) -> None:
        if self._inhibit_read_only:
            return
        for s in self.spans:
            if s.read_only and s.start < end and start < s.end:
                raise ReadOnlyError(s.start, s.end)

    def insert(self, pos: Pos, text: str, **props) -> Optional[TextSpan]:
        """Insert text at pos; keyword props create a span over the inserted text."""
        at = _pos(pos)
        self._check_region(at, at)
        self._check_insert(at)
        if not text:
            return None
        n = len(text)
        self._text = self._text[:at] + text + self._text[at:]

        for m in self._markers:
            if m.position is not None and (m.position > at or (m.position == at and m.insertion_type)):
                m.position += n
        if self.point >= at:
            self.point += n
        for s in self.spans:
            if s.start >= at:
                s.start += n
                s.end += n
            elif at < s.end:
                s.end += n

        return self.add_span(at, at + n, **props) if props else None

    def delete(self, start: Pos, end: Pos) -> str:
        """Delete [start, end) and return the removed text."""
        a, b = sorted((_pos(start), _pos(end)))
        self._check_region(a, b)
        if a == b:
            return ""
        self._check_delete(a, b)
        removed = self._text[a:b]
        n = b - a
        self._text = self._text[:a] + self._text[b:]

        def shift(p: int) -> int:
            if p >= b:
                return p - n
            return min(p, a)

        for m in self._markers:
            if m.position is not None:
                m.position = shift(m.position)
        self.point = shift(self.point)
        for s in self.spans:
            s.start, s.end = shift(s.start), shift(s.end)
        self.spans = [s for s in self.spans if s.end > s.start]
        return removed

    def replace_region(self, start: Pos, end: Pos, text: str) -> None:
        """Replace [start, end) with text as one atomic edit."""
        a = min(_pos(start), _pos(end))
        with self.atomic_change():
            self.delete(a, end)
            self.insert(a, text)
