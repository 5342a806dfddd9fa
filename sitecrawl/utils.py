"""Text helpers shared by the document model, storage and CLI."""

import sys
from typing import Any, Iterable, Optional, TextIO


def process_str(value: Optional[str]) -> Optional[str]:
    """Strip a string, passing None through."""
    if value is None:
        return None
    return str(value).strip()


def process_list(values: Optional[Iterable[Any]]) -> list:
    """Clean a list of extracted values.

    Strings are stripped; None and empty strings are dropped; duplicates are
    removed keeping first-seen order.

    Args:
        values: Iterable of values (strings, Urls, ...).

    Returns:
        New list of cleaned, unique values.
    """
    if not values:
        return []

    result = []
    seen = set()
    for value in values:
        if isinstance(value, str):
            value = value.strip()
        if value is None or (hasattr(value, "__len__") and len(value) == 0):
            continue
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def format_sentence_length(sentence: str, index: int, sentence_limit: int) -> str:
    """Cut a window of ``sentence_limit`` characters around ``index``.

    The window is centred on ``index`` and shifted to stay within the
    sentence. The sentence is returned unchanged if it already fits or if
    ``sentence_limit`` is 0.

    Examples:
        >>> format_sentence_length("For what of the flower if not for soil beneath it?", 23, 10)
        'ower if no'

    Args:
        sentence: The text to shorten.
        index: Position that must stay visible, e.g. a search match.
        sentence_limit: Even maximum length of the result.

    Returns:
        The shortened sentence.

    Raises:
        ValueError: For an empty sentence, an odd limit or an index outside
            the sentence.
    """
    if not sentence:
        raise ValueError("A sentence value must be provided")
    if sentence_limit % 2 != 0:
        raise ValueError("The sentence_limit value must be even")
    if index < 0 or index > len(sentence):
        raise ValueError(f"Incorrect index value: {index}")

    if sentence_limit == 0 or len(sentence) <= sentence_limit:
        return sentence

    half = sentence_limit // 2
    start = index - half
    finish = index + half

    if start < 0:
        finish = min(finish - start, len(sentence))
        start = 0
    elif finish > len(sentence):
        start = max(start - (finish - len(sentence)), 0)
        finish = len(sentence)

    return sentence[start:finish]


def print_search_results(
    results: Iterable[Any],
    query: str,
    sentence_limit: int = 80,
    keyword_limit: int = 5,
    stream: Optional[TextIO] = None,
) -> None:
    """Print documents returned by a search, one block per document.

    Each block holds the title, up to ``keyword_limit`` keywords, the best
    matching sentence of the document's text and its URL, followed by a
    blank line.
    """
    stream = stream or sys.stdout
    for doc in results:
        sentences = doc.search(query, sentence_limit)

        if doc.title:
            stream.write(f"{doc.title}\n")
        if doc.keywords:
            stream.write(", ".join(doc.keywords[:keyword_limit]) + "\n")
        if sentences:
            stream.write(f"{sentences[0]}\n")
        stream.write(f"{doc.url}\n\n")
