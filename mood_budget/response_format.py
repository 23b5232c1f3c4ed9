"""Structure parser for advisor replies.

Gemini answers in loose markdown.  :func:`parse_response` turns that text
into a flat list of blocks the UI can render safely:

* ``heading``      -- a line starting with one or more ``#``
* ``bullet_list``  -- consecutive lines starting with ``*``, ``-`` or ``•``
  followed by whitespace
* ``ordered_list`` -- consecutive lines starting with ``1.`` or ``1)``
* ``paragraph``    -- any other run of non-blank lines

Blank lines close the current paragraph or list.  Inside every block,
``**bold**`` runs become bold spans.  A line such as ``**Budget:** ok``
is a paragraph, not a bullet, because the leading ``*`` is not followed by
whitespace.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import List, Optional

HEADING_RE = re.compile(r'^(#{1,6})\s*(.*?)\s*#*$')
BULLET_RE = re.compile(r'^[*\-•]\s+(.*)$')
ORDERED_RE = re.compile(r'^\d+[.)]\s+(.*)$')
RULE_RE = re.compile(r'^(?:-{3,}|\*{3,}|_{3,})$')
BOLD_RE = re.compile(r'(\*\*.+?\*\*)')

TREND_UP_KEYWORDS = ('increase', 'high')


@dataclass(frozen=True)
class Span:
    text: str
    bold: bool = False


@dataclass
class Block:
    kind: str
    spans: List[Span] = field(default_factory=list)
    items: List[List[Span]] = field(default_factory=list)
    level: int = 0

    @property
    def text(self) -> str:
        return spans_text(self.spans)

    @property
    def item_texts(self) -> List[str]:
        return [spans_text(item) for item in self.items]


def spans_text(spans: List[Span]) -> str:
    return ''.join(span.text for span in spans)


def parse_inline(text: str) -> List[Span]:
    """Split a line into plain and ``**bold**`` spans."""
    spans: List[Span] = []
    for part in BOLD_RE.split(text):
        if not part:
            continue
        if len(part) > 4 and part.startswith('**') and part.endswith('**'):
            spans.append(Span(part[2:-2], bold=True))
        else:
            spans.append(Span(part))
    return spans


def parse_response(text: Optional[str]) -> List[Block]:
    blocks: List[Block] = []
    paragraph: List[str] = []
    list_block: Optional[Block] = None

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(Block('paragraph', spans=parse_inline(' '.join(paragraph))))
            paragraph.clear()

    def flush_list() -> None:
        nonlocal list_block
        if list_block is not None:
            blocks.append(list_block)
            list_block = None

    for raw in (text or '').replace('\r\n', '\n').split('\n'):
        line = raw.strip()
        if not line or RULE_RE.match(line):
            flush_paragraph()
            flush_list()
            continue

        heading = HEADING_RE.match(line)
        if heading:
            flush_paragraph()
            flush_list()
            blocks.append(Block('heading', spans=parse_inline(heading.group(2)), level=len(heading.group(1))))
            continue

        bullet = BULLET_RE.match(line)
        ordered = None if bullet else ORDERED_RE.match(line)
        if bullet or ordered:
            kind = 'bullet_list' if bullet else 'ordered_list'
            flush_paragraph()
            if list_block is not None and list_block.kind != kind:
                flush_list()
            if list_block is None:
                list_block = Block(kind)
            list_block.items.append(parse_inline((bullet or ordered).group(1)))
            continue

        flush_list()
        paragraph.append(line)

    flush_paragraph()
    flush_list()
    return blocks


def bullet_trend(text: str) -> str:
    """``"up"`` for items that talk about increases or high values, else ``"down"``."""
    lowered = text.lower()
    return 'up' if any(word in lowered for word in TREND_UP_KEYWORDS) else 'down'


def render_spans(spans: List[Span]) -> str:
    out = []
    for span in spans:
        escaped = html.escape(span.text)
        out.append(f"<strong>{escaped}</strong>" if span.bold else escaped)
    return ''.join(out)


def render_html(blocks: List[Block]) -> str:
    """HTML for ``st.markdown(..., unsafe_allow_html=True)``; all text is escaped."""
    parts = []
    for block in blocks:
        if block.kind == 'heading':
            parts.append(f"<h4>{render_spans(block.spans)}</h4>")
        elif block.kind == 'paragraph':
            parts.append(f"<p>{render_spans(block.spans)}</p>")
        else:
            tag = 'ul' if block.kind == 'bullet_list' else 'ol'
            items = ''.join(f"<li>{render_spans(item)}</li>" for item in block.items)
            parts.append(f"<{tag}>{items}</{tag}>")
    return ''.join(parts)


def format_response(text: Optional[str]) -> str:
    return render_html(parse_response(text))
