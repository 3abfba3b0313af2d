"""
Key/value records and intermediate file naming
Shared by the map side (producer) and the reduce side (consumer)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class KeyValue:
    """One intermediate pair emitted by a map task"""
    key: str
    value: str


def reduce_name(job_name: str, map_task: int, reduce_task: int) -> str:
    """
    Name of the intermediate file map task `map_task` wrote for reduce task `reduce_task`

    Args:
        job_name: Name of the whole MapReduce job
        map_task: Index of the map task that produced the file
        reduce_task: Index of the reduce task that consumes it

    Returns:
        Relative file name, e.g. 'mrtmp.wc-0-1'
    """
    return f"mrtmp.{job_name}-{map_task}-{reduce_task}"


def merge_name(job_name: str, reduce_task: int) -> str:
    """Name of the output file of reduce task `reduce_task`"""
    return f"mrtmp.{job_name}-res-{reduce_task}"
