from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from p2lens.contracts import SampleSource

logger = logging.getLogger(__name__)


class TextSampleSource(SampleSource):
    """Parse one number per line.

    Blank lines and lines starting with ``#`` are skipped. Lines are read
    lazily, so a file or ``sys.stdin`` can be streamed without buffering.
    """

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = lines

    def iter_samples(self) -> Iterator[float]:
        for line_number, raw in enumerate(self._lines, start=1):
            text = raw.strip()
            if not text or text.startswith("#"):
                continue
            try:
                value = float(text)
            except ValueError:
                logger.error("Line %d is not a number: %r.", line_number, text)
                raise ValueError(
                    f"Line {line_number}: cannot parse {text!r} as a number."
                ) from None
            yield value
