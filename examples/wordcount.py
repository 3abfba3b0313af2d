"""
Classic MapReduce word count example.
Counts the frequency of each word in the input text.
"""

import re

from common.keyvalue import KeyValue

WORD_PATTERN = re.compile(r'[a-zA-Z]+')


def map_function(filename, contents):
    """
    Map function: emit (word, "") for each word.

    Args:
        filename: Name of the input file (unused)
        contents: Text of the input file

    Returns:
        List of KeyValue pairs, one per word occurrence
    """
    return [KeyValue(word, '') for word in WORD_PATTERN.findall(contents)]


def reduce_function(key, values):
    """
    Reduce function: count the occurrences of a word.

    Args:
        key: Word
        values: One (empty) value per occurrence

    Returns:
        Occurrence count as a string
    """
    return str(len(values))
