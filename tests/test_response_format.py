from __future__ import annotations

from mood_budget.response_format import bullet_trend, format_response, parse_inline, parse_response

REPLY = """## Your month so far

You have **₱450** left.
That is fine.

* Groceries are **high** this week
- Coffee decreased
1. Set a cap
2) Review on Sunday

**Budget:** on track
---
Breathe in for four counts."""


def test_parse_response_blocks() -> None:
    blocks = parse_response(REPLY)
    assert [b.kind for b in blocks] == [
        "heading", "paragraph", "bullet_list", "ordered_list", "paragraph", "paragraph",
    ]
    heading, intro, bullets, ordered, budget, breathe = blocks
    assert heading.text == "Your month so far"
    assert heading.level == 2
    assert intro.text == "You have ₱450 left. That is fine."
    assert bullets.item_texts == ["Groceries are high this week", "Coffee decreased"]
    assert ordered.item_texts == ["Set a cap", "Review on Sunday"]
    assert budget.spans[0].bold and budget.spans[0].text == "Budget:"
    assert breathe.text == "Breathe in for four counts."


def test_parse_inline_bold() -> None:
    spans = parse_inline("a **b** c")
    assert [(s.text, s.bold) for s in spans] == [("a ", False), ("b", True), (" c", False)]


def test_empty_input() -> None:
    assert parse_response("") == []
    assert parse_response(None) == []
    assert format_response(None) == ""


def test_bullet_trend() -> None:
    assert bullet_trend("Spending INCREASED on food") == "up"
    assert bullet_trend("A high share went to rent") == "up"
    assert bullet_trend("Coffee spending dropped") == "down"


def test_format_response_escapes_html() -> None:
    rendered = format_response("Use <script>alert(1)</script> **now**\n\n- one")
    assert "<script>" not in rendered
    assert "&lt;script&gt;" in rendered
    assert "<strong>now</strong>" in rendered
    assert rendered.endswith("<ul><li>one</li></ul>")
