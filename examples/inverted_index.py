"""
Inverted index MapReduce example.
Creates an index mapping each word to the documents it appears in.
"""

import re

from common.keyvalue import KeyValue

WORD_PATTERN = re.compile(r'[a-zA-Z]+')


def map_function(filename, contents):
    """
    Map function: emit (word, filename) for each distinct word in a document.
    """
    words = {word.lower() for word in WORD_PATTERN.findall(contents)}
    return [KeyValue(word, filename) for word in sorted(words)]


def reduce_function(key, values):
    """
    Reduce function: collect all documents for a word.

    Args:
        key: Word
        values: Document names, one per document containing the word

    Returns:
        'count docA,docB,...' with documents sorted and de-duplicated
    """
    unique_docs = sorted(set(values))
    return f"{len(unique_docs)} {','.join(unique_docs)}"
