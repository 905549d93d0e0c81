"""
CriticMarkup preview of resolved edits.

Renders each paragraph with its edits applied as {--deleted--}{++inserted++}
markup, diffed word by word so unchanged words stay outside the markup.
"""

import re
from typing import Dict, List, Sequence, Tuple

import structlog
from diff_match_patch import diff_match_patch

from reanchor.models import Paragraph, ResolvedEdit

logger = structlog.get_logger(__name__)


_WORD_TOKENS = re.compile(r"\S+|\s+")


def _tokens_to_chars(text: str, vocabulary: List[str], codes: Dict[str, str]) -> str:
    """Map each word or whitespace run of `text` to one character indexing `vocabulary`."""
    encoded = []
    for token in _WORD_TOKENS.findall(text):
        if token not in codes:
            codes[token] = chr(len(vocabulary))
            vocabulary.append(token)
        encoded.append(codes[token])
    return "".join(encoded)


def diff_words(old_text: str, new_text: str) -> List[Tuple[int, str]]:
    """
    Word-level diff of two strings as (op, text) pairs, op being -1, 0 or 1.
    Punctuation stays attached to its word and whitespace runs are their
    own tokens, so joining the pieces of either side rebuilds it exactly.
    """
    if not old_text and not new_text:
        return []

    # Slot 0 stays empty, matching diff-match-patch's own line vocabulary.
    vocabulary: List[str] = [""]
    codes: Dict[str, str] = {}
    old_chars = _tokens_to_chars(old_text, vocabulary, codes)
    new_chars = _tokens_to_chars(new_text, vocabulary, codes)

    dmp = diff_match_patch()
    diffs = dmp.diff_main(old_chars, new_chars, False)
    dmp.diff_cleanupSemantic(diffs)
    dmp.diff_charsToLines(diffs, vocabulary)
    return [(op, text) for op, text in diffs if text]


def build_critic_markup(old_text: str, new_text: str) -> str:
    parts = []
    for op, text in diff_words(old_text, new_text):
        if op == 0:
            parts.append(text)
        elif op == -1:
            parts.append(f"{{--{text}--}}")
        else:
            parts.append(f"{{++{text}++}}")
    return "".join(parts)


def render_paragraph(text: str, edits: Sequence[ResolvedEdit]) -> str:
    """Apply edits to one paragraph's text; overlapping edits after the first are skipped."""
    matched: List[Tuple[int, int, ResolvedEdit]] = []
    for edit in edits:
        start = text.find(edit.old_text)
        if start == -1 or not edit.old_text:
            logger.warning("Skipping edit: oldText not in paragraph", para=edit.para_index)
            continue
        end = start + len(edit.old_text)
        if any(start < m_end and end > m_start for m_start, m_end, _ in matched):
            logger.warning("Skipping edit: overlaps with previously matched edit", para=edit.para_index)
            continue
        matched.append((start, end, edit))

    # Apply from the end so earlier offsets stay valid.
    result = text
    for start, end, edit in sorted(matched, key=lambda m: m[0], reverse=True):
        result = result[:start] + build_critic_markup(edit.old_text, edit.new_text) + result[end:]
    return result


def render_markup(paragraphs: Sequence[Paragraph], edits: Sequence[ResolvedEdit]) -> List[Paragraph]:
    by_para: Dict[int, List[ResolvedEdit]] = {}
    for edit in edits:
        by_para.setdefault(edit.para_index, []).append(edit)

    rendered = []
    for paragraph in paragraphs:
        para_edits = by_para.get(paragraph.index)
        if para_edits:
            rendered.append(Paragraph(index=paragraph.index, text=render_paragraph(paragraph.text, para_edits)))
        else:
            rendered.append(paragraph)
    return rendered
