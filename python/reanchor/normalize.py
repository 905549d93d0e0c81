"""
Loose text normalization with provenance.

Loose text canonicalizes typographic variants (curly quotes, dashes,
non-breaking spaces, whitespace runs) so that a quote echoed back by the
model can still be found in the source paragraph. Every loose character
remembers the [start, end) range of the original string it came from, so a
match found in loose space can be projected back onto the exact source text.
"""

from dataclasses import dataclass, field
from typing import List, Optional

_LOOSE_EQUIVALENTS = {
    "\u2018": "'",  # left single quote
    "\u2019": "'",  # right single quote
    "`": "'",  # grave accent
    "\u00b4": "'",  # acute accent
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",  # en dash
    "\u2014": "-",  # em dash
    "\u2212": "-",  # minus sign
    "\u00a0": " ",  # no-break space
}


@dataclass(frozen=True)
class Span:
    start: int
    end: int


@dataclass
class LooseText:
    text: str
    spans: List[Span] = field(default_factory=list)

    def map_back(self, loose_start: int, loose_len: int) -> Optional[Span]:
        """
        Convert a (start, length) match in loose text to the [start, end)
        range of the original string it covers.
        Returns None for an empty or inverted range.
        """
        if loose_len <= 0 or loose_start < 0 or loose_start + loose_len > len(self.spans):
            return None
        first = self.spans[loose_start]
        last = self.spans[loose_start + loose_len - 1]
        if last.end <= first.start:
            return None
        return Span(first.start, last.end)


def normalize_loose_char(ch: str) -> str:
    return _LOOSE_EQUIVALENTS.get(ch, ch)


def build_loose_text(text: str) -> LooseText:
    """
    Build the loose form of `text`.

    Known punctuation variants map to their ASCII form; any whitespace run
    (after mapping) collapses to one space whose span covers the whole run.
    """
    out: List[str] = []
    spans: List[Span] = []

    i = 0
    length = len(text)
    while i < length:
        ch = normalize_loose_char(text[i])

        if ch.isspace():
            run_start = i
            i += 1
            while i < length and normalize_loose_char(text[i]).isspace():
                i += 1
            if not out or out[-1] != " ":
                out.append(" ")
                spans.append(Span(run_start, i))
            continue

        out.append(ch)
        spans.append(Span(i, i + 1))
        i += 1

    return LooseText("".join(out), spans)


def to_loose(text: str) -> str:
    return build_loose_text(text).text
