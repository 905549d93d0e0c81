"""
Cross-paragraph remapping for edits the model attributed to the wrong paragraph.

Only paragraphs that were actually sent to the model are candidates, and
only a unique candidate is ever chosen: zero or several matches leave the
edit unresolved rather than guessing.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

import structlog

from reanchor.models import Comment, Paragraph, ProposedEdit, RemapReason
from reanchor.normalize import to_loose
from reanchor.resolver import resolve_old_text

logger = structlog.get_logger(__name__)


@dataclass
class RemapResult:
    para_index: int
    old_text: str
    reason: RemapReason


@dataclass
class ResolutionContext:
    """Lookup tables for one revision round, built once and shared by every edit."""

    paragraph_lookup: Dict[int, str]
    valid_indices: FrozenSet[int]
    comments_by_para: Dict[int, List[Comment]] = field(default_factory=dict)
    all_comments: List[Comment] = field(default_factory=list)

    @classmethod
    def build(cls, paragraphs: Iterable[Paragraph], comments: Iterable[Comment] = ()) -> "ResolutionContext":
        paragraphs = list(paragraphs)
        all_comments = list(comments)

        comments_by_para: Dict[int, List[Comment]] = {}
        for comment in all_comments:
            if comment.para_index is None:
                continue
            comments_by_para.setdefault(comment.para_index, []).append(comment)

        return cls(
            paragraph_lookup={p.index: p.text for p in paragraphs},
            valid_indices=frozenset(p.index for p in paragraphs),
            comments_by_para=comments_by_para,
            all_comments=all_comments,
        )

    def ordered_indices(self) -> List[int]:
        return sorted(self.valid_indices)

    def comments_for(self, para_index: int) -> List[Comment]:
        return self.comments_by_para.get(para_index, [])


def find_unique_paragraph_exact(
    paragraph_lookup: Mapping[int, str], indices: Iterable[int], text: Optional[str]
) -> Optional[int]:
    """Index of the only paragraph containing `text` verbatim, else None."""
    if not isinstance(text, str) or not text:
        return None

    matches = []
    for idx in indices:
        para_text = paragraph_lookup.get(idx)
        if isinstance(para_text, str) and text in para_text:
            matches.append(idx)
        if len(matches) > 1:
            return None
    return matches[0] if len(matches) == 1 else None


def find_unique_paragraph_loose(
    paragraph_lookup: Mapping[int, str], indices: Iterable[int], text: Optional[str]
) -> Optional[int]:
    """Index of the only paragraph containing the loose form of `text`, else None."""
    if not isinstance(text, str) or not text.strip():
        return None
    target = to_loose(text).strip()
    if not target:
        return None

    matches = []
    for idx in indices:
        para_text = paragraph_lookup.get(idx)
        if not isinstance(para_text, str) or not para_text:
            continue
        if target in to_loose(para_text):
            matches.append(idx)
        if len(matches) > 1:
            return None
    return matches[0] if len(matches) == 1 else None


def remap_unresolved_edit(edit: ProposedEdit, context: ResolutionContext) -> Optional[RemapResult]:
    """
    Look for the paragraph an edit really belongs to.
    Called only after the edit failed to resolve against its stated paragraph.
    """
    # Strongest anchor: the whole request carries exactly one comment.
    if len(context.all_comments) == 1:
        result = _remap_to_single_comment(edit, context.all_comments[0], context)
        if result:
            return result

    indices = context.ordered_indices()

    exact_idx = find_unique_paragraph_exact(context.paragraph_lookup, indices, edit.old_text)
    if exact_idx is not None:
        resolved = resolve_old_text(
            context.paragraph_lookup.get(exact_idx), edit.old_text, context.comments_for(exact_idx)
        )
        if resolved:
            return RemapResult(exact_idx, resolved, RemapReason.UNIQUE_EXACT)

    loose_idx = find_unique_paragraph_loose(context.paragraph_lookup, indices, edit.old_text)
    if loose_idx is not None:
        resolved = resolve_old_text(
            context.paragraph_lookup.get(loose_idx), edit.old_text, context.comments_for(loose_idx)
        )
        if resolved:
            return RemapResult(loose_idx, resolved, RemapReason.UNIQUE_LOOSE)

    logger.debug("No unique paragraph for edit", old_text=edit.old_text)
    return None


def _remap_to_single_comment(
    edit: ProposedEdit, anchor: Comment, context: ResolutionContext
) -> Optional[RemapResult]:
    if anchor.para_index is None:
        return None

    anchor_text = context.paragraph_lookup.get(anchor.para_index)
    anchor_comments = context.comments_for(anchor.para_index) or [anchor]

    resolved = resolve_old_text(anchor_text, edit.old_text, anchor_comments) or resolve_old_text(
        anchor_text, anchor.selected_text, anchor_comments
    )
    if not resolved:
        return None
    return RemapResult(anchor.para_index, resolved, RemapReason.SINGLE_COMMENT_ANCHOR)
