"""
Validation pipeline for model-proposed edits.

Each raw edit is classified independently; a bad edit is dropped with a
reason and never aborts the batch. Every edit that survives carries an
old_text that is a literal substring of its target paragraph.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import structlog
from pydantic import ValidationError

from reanchor.config import preview
from reanchor.models import DropReason, ProposedEdit, RemapReason, ResolvedEdit, RevisionRequest
from reanchor.remap import ResolutionContext, remap_unresolved_edit
from reanchor.resolver import resolve_old_text

logger = structlog.get_logger(__name__)


@dataclass
class EditOutcome:
    """What happened to the n-th proposed edit."""

    position: int
    para_index: Optional[int] = None
    repaired: bool = False
    remapped: bool = False
    remap_reason: Optional[RemapReason] = None
    drop_reason: Optional[DropReason] = None

    @property
    def status(self) -> str:
        if self.drop_reason:
            return "dropped"
        if self.remapped:
            return "remapped"
        if self.repaired:
            return "repaired"
        return "accepted"


@dataclass
class ValidationStats:
    accepted: int = 0
    repaired: int = 0
    remapped: int = 0
    drop_reasons: Dict[DropReason, int] = field(default_factory=lambda: {reason: 0 for reason in DropReason})

    @property
    def dropped(self) -> int:
        return sum(self.drop_reasons.values())

    def record_drop(self, reason: DropReason) -> None:
        self.drop_reasons[reason] += 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "repaired": self.repaired,
            "remapped": self.remapped,
            "dropped": self.dropped,
            "dropReasons": {reason.value: count for reason, count in self.drop_reasons.items()},
        }


@dataclass
class ValidationResult:
    edits: List[ResolvedEdit] = field(default_factory=list)
    stats: ValidationStats = field(default_factory=ValidationStats)
    outcomes: List[EditOutcome] = field(default_factory=list)

    def to_wire(self, include_stats: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"changes": [edit.to_wire() for edit in self.edits]}
        if include_stats:
            payload["stats"] = self.stats.as_dict()
        return payload


def coerce_proposed_edit(raw: Any) -> Optional[ProposedEdit]:
    """Parse one raw model record; None when its shape is wrong."""
    if not isinstance(raw, dict):
        return None
    try:
        return ProposedEdit.model_validate(raw)
    except (ValidationError, ValueError, OverflowError):
        return None


def validate_edits(proposed_edits: Iterable[Any], context: ResolutionContext) -> ValidationResult:
    result = ValidationResult()

    for position, raw in enumerate(proposed_edits or []):
        outcome = _validate_one(position, raw, context, result)
        result.outcomes.append(outcome)
        if outcome.drop_reason:
            result.stats.record_drop(outcome.drop_reason)

    result.stats.accepted = len(result.edits)
    _log_summary(result.stats)
    return result


def resolve_revision(request: RevisionRequest) -> ValidationResult:
    """Run the pipeline over the proposed edits carried by a request."""
    context = ResolutionContext.build(request.paragraphs, request.comments)
    return validate_edits(request.proposed_edits, context)


def _validate_one(position: int, raw: Any, context: ResolutionContext, result: ValidationResult) -> EditOutcome:
    outcome = EditOutcome(position=position)

    edit = coerce_proposed_edit(raw)
    if edit is None:
        outcome.drop_reason = DropReason.INVALID_SHAPE
        return outcome

    stated_idx = edit.index
    if stated_idx is None or stated_idx not in context.valid_indices:
        outcome.drop_reason = DropReason.INVALID_INDEX
        return outcome

    para_text = context.paragraph_lookup.get(stated_idx)
    if not isinstance(para_text, str) or not para_text:
        outcome.drop_reason = DropReason.MISSING_PARAGRAPH
        return outcome

    target_idx = stated_idx
    resolved = resolve_old_text(para_text, edit.old_text, context.comments_for(stated_idx))

    if not resolved:
        remapped = remap_unresolved_edit(edit, context)
        if remapped and remapped.para_index in context.valid_indices:
            target_idx = remapped.para_index
            resolved = remapped.old_text
            # A re-resolve on the stated paragraph is a repair, not a move.
            if target_idx != stated_idx:
                outcome.remapped = True
                outcome.remap_reason = remapped.reason
                result.stats.remapped += 1
                logger.info(
                    "Remapped change",
                    from_para=stated_idx,
                    to_para=target_idx,
                    reason=remapped.reason.value,
                )

    if not resolved:
        outcome.drop_reason = DropReason.UNRESOLVED_OLD_TEXT
        logger.info("Dropped change: oldText not resolved", para=stated_idx, old_text=preview(edit.old_text))
        return outcome

    if resolved != edit.old_text:
        outcome.repaired = True
        result.stats.repaired += 1

    outcome.para_index = target_idx
    result.edits.append(ResolvedEdit(para_index=target_idx, old_text=resolved, new_text=edit.new_text))
    return outcome


def _log_summary(stats: ValidationStats) -> None:
    if not (stats.repaired or stats.remapped or stats.dropped):
        return
    logger.info(
        "Revision validation",
        accepted=stats.accepted,
        repaired=stats.repaired,
        remapped=stats.remapped,
        dropped=stats.dropped,
    )
    if stats.dropped:
        logger.info("Drop reasons", **{reason.value: count for reason, count in stats.drop_reasons.items()})
