"""
Tests for reanchor.resolver — anchoring old text inside one paragraph.

Run: python3 test_resolver.py
From: python/
"""

import sys

sys.path.insert(0, '.')

from reanchor.models import Comment
from reanchor.resolver import resolve_old_text

FOX = "The quick brown fox"


def test_exact_match_passthrough():
    assert resolve_old_text(FOX, "quick brown") == "quick brown"
    print("PASS: test_exact_match_passthrough")


def test_loose_repair_keeps_source_spelling():
    para = "He said “hello—world”"
    resolved = resolve_old_text(para, "hello-world")
    assert resolved == "hello—world"
    assert resolved in para

    # Outer whitespace in the proposal is trimmed before matching
    assert resolve_old_text(para, "  hello-world ") == "hello—world"

    # Straight quotes match curly ones and the curly ones come back
    assert resolve_old_text(para, '"hello-world"') == "“hello—world”"
    print("PASS: test_loose_repair_keeps_source_spelling")


def test_loose_repair_across_whitespace_variants():
    para = "The  quick brown\tfox"
    assert resolve_old_text(para, "quick brown fox") == "quick brown\tfox"
    assert resolve_old_text(para, "The quick") == "The  quick"
    print("PASS: test_loose_repair_across_whitespace_variants")


def test_whitespace_only_proposal_is_not_a_loose_match():
    assert resolve_old_text("ab", "   ") is None
    print("PASS: test_whitespace_only_proposal_is_not_a_loose_match")


def test_single_comment_range_overrides_proposal():
    comment = Comment(paraIndex=0, start=4, end=9, comment="punchier")
    resolved = resolve_old_text(FOX, "completely unrelated text", [comment])
    assert resolved == FOX[4:9] == "quick"
    print("PASS: test_single_comment_range_overrides_proposal")


def test_single_comment_invalid_range_falls_back_to_selection():
    out_of_bounds = Comment(paraIndex=0, start=4, end=99, selectedText="brown fox")
    assert resolve_old_text(FOX, "nothing like it", [out_of_bounds]) == "brown fox"

    inverted = Comment(paraIndex=0, start=9, end=4, selectedText="fox")
    assert resolve_old_text(FOX, "nothing like it", [inverted]) == "fox"

    missing_selection = Comment(paraIndex=0, start=9, end=4, selectedText="wolf")
    assert resolve_old_text(FOX, "nothing like it", [missing_selection]) is None
    print("PASS: test_single_comment_invalid_range_falls_back_to_selection")


def test_text_match_wins_over_comment():
    comment = Comment(paraIndex=0, start=0, end=3)
    assert resolve_old_text(FOX, "brown", [comment]) == "brown"
    print("PASS: test_text_match_wins_over_comment")


def test_multiple_comments_never_override():
    comments = [
        Comment(paraIndex=0, start=4, end=9),
        Comment(paraIndex=0, start=10, end=15),
    ]
    assert resolve_old_text(FOX, "completely unrelated text", comments) is None
    print("PASS: test_multiple_comments_never_override")


def test_missing_inputs():
    assert resolve_old_text("", "quick") is None
    assert resolve_old_text(None, "quick") is None
    assert resolve_old_text(FOX, "") is None
    assert resolve_old_text(FOX, None) is None

    # No proposal at all still lets a lone comment anchor the edit
    comment = Comment(paraIndex=0, selectedText="fox")
    assert resolve_old_text(FOX, None, [comment]) == "fox"
    print("PASS: test_missing_inputs")


def test_non_integer_comment_offsets_are_ignored():
    comment = Comment.model_validate({"paraIndex": 0, "start": "4", "end": True, "selectedText": "quick"})
    assert comment.start is None and comment.end is None
    assert resolve_old_text(FOX, "nope", [comment]) == "quick"
    print("PASS: test_non_integer_comment_offsets_are_ignored")


def test_integral_float_comment_offsets_are_used():
    comment = Comment.model_validate({"paraIndex": 0.0, "start": 4.0, "end": 9.0})
    assert (comment.para_index, comment.start, comment.end) == (0, 4, 9)
    assert resolve_old_text(FOX, "nope", [comment]) == "quick"

    fractional = Comment.model_validate({"paraIndex": 0, "start": 4.5, "end": 9, "selectedText": "brown"})
    assert fractional.start is None
    assert resolve_old_text(FOX, "nope", [fractional]) == "brown"
    print("PASS: test_integral_float_comment_offsets_are_used")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

if __name__ == '__main__':
    tests = [
        test_exact_match_passthrough,
        test_loose_repair_keeps_source_spelling,
        test_loose_repair_across_whitespace_variants,
        test_whitespace_only_proposal_is_not_a_loose_match,
        test_single_comment_range_overrides_proposal,
        test_single_comment_invalid_range_falls_back_to_selection,
        test_text_match_wins_over_comment,
        test_multiple_comments_never_override,
        test_missing_inputs,
        test_non_integer_comment_offsets_are_ignored,
        test_integral_float_comment_offsets_are_used,
    ]

    passed = 0
    failed = 0
    for t in tests:
        try:
            t()
            passed += 1
        except Exception as e:
            print(f"FAIL: {t.__name__} — {e}")
            failed += 1

    print(f"\nResults: {passed} passed, {failed} failed out of {len(tests)} tests")
    if failed > 0:
        sys.exit(1)
