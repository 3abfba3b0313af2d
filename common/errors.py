"""
Error types raised by the reduce phase
"""


class ReduceTaskError(Exception):
    """Base class for reduce task failures that should fail the whole task"""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class IntermediateReadError(ReduceTaskError):
    """An intermediate partition file is missing or cannot be read"""


class IntermediateDecodeError(ReduceTaskError):
    """An intermediate partition file is not a list of key/value records"""


class OutputWriteError(ReduceTaskError):
    """The reduce output file cannot be created or fully written"""


class OutputDecodeError(ReduceTaskError):
    """A reduce output file is not a key to value mapping"""
