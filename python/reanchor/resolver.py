"""
Anchor resolution against a single paragraph.

Strategies run in priority order and the first hit wins:
1. Exact substring of the proposed old text.
2. Loose match (quotes, dashes, whitespace), mapped back to the exact source slice.
3. The character range of the paragraph's only comment.
4. The selected text of the paragraph's only comment.

Whatever is returned is always carved out of the paragraph itself,
never taken from the model's spelling.
"""

from typing import Optional, Sequence

import structlog

from reanchor.models import Comment
from reanchor.normalize import build_loose_text

logger = structlog.get_logger(__name__)


def resolve_old_text(
    paragraph_text: Optional[str],
    proposed_old_text: Optional[str],
    paragraph_comments: Sequence[Comment] = (),
) -> Optional[str]:
    """
    Returns an exact substring of `paragraph_text` to anchor the edit on,
    or None if no strategy finds one.
    """
    if not paragraph_text or not isinstance(paragraph_text, str):
        return None

    if isinstance(proposed_old_text, str) and proposed_old_text:
        # 1. Exact
        if proposed_old_text in paragraph_text:
            return proposed_old_text

        # 2. Loose
        repaired = _find_loose_slice(paragraph_text, proposed_old_text)
        if repaired:
            logger.debug("Repaired old text via loose match", proposed=proposed_old_text, resolved=repaired)
            return repaired

    # 3/4. Only a lone comment is an unambiguous anchor.
    comments = list(paragraph_comments or ())
    if len(comments) == 1:
        return _anchor_from_comment(paragraph_text, comments[0])

    return None


def _find_loose_slice(paragraph_text: str, proposed_old_text: str) -> Optional[str]:
    target = build_loose_text(proposed_old_text).text.strip()
    if not target:
        return None

    loose_para = build_loose_text(paragraph_text)
    loose_idx = loose_para.text.find(target)
    if loose_idx == -1:
        return None

    span = loose_para.map_back(loose_idx, len(target))
    if span is None:
        return None
    return paragraph_text[span.start : span.end] or None


def _anchor_from_comment(paragraph_text: str, comment: Comment) -> Optional[str]:
    if comment.range_within(len(paragraph_text)):
        logger.debug("Anchored on comment range", start=comment.start, end=comment.end)
        return paragraph_text[comment.start : comment.end]

    if comment.selected_text and comment.selected_text in paragraph_text:
        logger.debug("Anchored on comment selection", selected=comment.selected_text)
        return comment.selected_text

    return None
