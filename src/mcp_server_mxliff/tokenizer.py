"""
Inline content tokenizer.

Splits segment content into alternating text runs and placeholder runs.
Placeholders come from two places:
- short inline codes inside the text, e.g. {1}, <b>, {ab>
- element children of the segment node, kept as serialized markup

Both share one running display index per tokenized node, starting at 1.
"""

from typing import Iterator, Optional

from lxml import etree

from .constants import INLINE_CODE_PATTERN
from .models import PlaceholderTag, Run, Segment, TextRun
from .tags import TagAllocationState


def _placeholder(
    content: str,
    index: int,
    state: TagAllocationState,
    is_source: bool,
    from_element: bool = False
) -> PlaceholderTag:
    return PlaceholderTag(
        content=content,
        display_index=index,
        tag_id=state.allocate(is_source),
        is_source=is_source,
        from_element=from_element,
    )


def tokenize_text(
    text: str,
    state: TagAllocationState,
    is_source: bool,
    start_index: int = 1
) -> Iterator[Run]:
    """
    Split a text run on inline codes.

    Args:
        text: Raw text, possibly containing inline codes
        state: Tag counters; one id is consumed per inline code
        is_source: Whether the text belongs to the source side
        start_index: Display index of the first inline code

    Yields:
        TextRun and PlaceholderTag items in order. Empty text is dropped.
    """
    index = start_index
    # With a capturing group, odd positions are the matched codes
    for position, chunk in enumerate(INLINE_CODE_PATTERN.split(text)):
        if position % 2:
            yield _placeholder(chunk, index, state, is_source)
            index += 1
        elif chunk:
            yield TextRun(chunk)


def _serialize(element: etree._Element) -> str:
    return etree.tostring(element, encoding='unicode', with_tail=False)


def tokenize_node(
    node: etree._Element,
    state: TagAllocationState,
    is_source: bool
) -> Iterator[Run]:
    """
    Walk a segment node's mixed content in document order.

    Text (the node's text and each child's tail) is split on inline codes.
    Each element child becomes one placeholder holding its markup. Comments
    and processing instructions are skipped, their tails are still text.
    """
    index = 1

    def text_runs(text: Optional[str]) -> Iterator[Run]:
        nonlocal index
        if not text:
            return
        for run in tokenize_text(text, state, is_source, start_index=index):
            if isinstance(run, PlaceholderTag):
                index += 1
            yield run

    yield from text_runs(node.text)
    for child in node:
        if isinstance(child.tag, str):
            yield _placeholder(_serialize(child), index, state, is_source, from_element=True)
            index += 1
        yield from text_runs(child.tail)


def build_segment(
    node: Optional[etree._Element],
    state: TagAllocationState,
    is_source: bool
) -> Segment:
    """
    Rebalance the counters for one side of a unit and tokenize its node.

    A missing node still rebalances, so numbering of later units does not
    depend on whether the element exists.
    """
    state.begin(is_source)
    segment = Segment()
    if node is not None:
        segment.runs.extend(tokenize_node(node, state, is_source))
    return segment
