"""Map character offsets in a template to 1-based line numbers."""

from bisect import bisect_right


class LineIndex:
    """Ordered (start_offset, line_number) breakpoints for one file's content.

    Built once per file and read-only afterwards.
    """

    def __init__(self, breakpoints: list[tuple[int, int]]) -> None:
        self._offsets = [offset for offset, _ in breakpoints]
        self._lines = [line for _, line in breakpoints]

    @classmethod
    def build(cls, content: str) -> "LineIndex":
        """Scan content once, recording where each line starts.

        Only "\\n" ends a line (so "\\r\\n" counts once); form feeds, vertical
        tabs and Unicode line separators do not, matching what editors show.

        Args:
            content: Full file content.

        Returns:
            LineIndex over the content.
        """
        breakpoints: list[tuple[int, int]] = []
        offset = 0
        number = 1
        while offset < len(content):
            breakpoints.append((offset, number))
            newline = content.find("\n", offset)
            if newline < 0:
                break
            offset = newline + 1
            number += 1
        return cls(breakpoints)

    def __len__(self) -> int:
        return len(self._offsets)

    def line_for(self, offset: int | None) -> int | None:
        """Return the line containing offset.

        Args:
            offset: Character offset into the content, or None.

        Returns:
            Line of the last breakpoint at or before offset. None when offset
            is None; 1 when the index is empty or offset precedes every
            breakpoint.
        """
        if offset is None:
            return None
        if not self._offsets:
            return 1
        idx = bisect_right(self._offsets, offset) - 1
        if idx < 0:
            return 1
        return self._lines[idx]
