#!/usr/bin/env python3
"""
Reduce Task Executor
Executes reduce tasks by reading intermediate data, grouping by key,
applying the reduce function, and writing final output
"""

import argparse
import logging
import os
import stat
import sys
import tempfile
import time
from collections import defaultdict
from typing import Callable, Dict, List

import psutil

from common.codec import DEFAULT_CODEC
from common.config import WorkerConfig
from common.errors import IntermediateReadError, OutputWriteError
from common.keyvalue import merge_name, reduce_name
from worker.function_loader import FunctionLoader

logger = logging.getLogger(__name__)

ReduceFunc = Callable[[str, List[str]], str]


def merge_intermediates(job_name: str, reduce_task: int, n_map: int,
                        intermediate_dir: str = '.', codec=DEFAULT_CODEC) -> Dict[str, List[str]]:
    """
    Read every map task's partition for one reduce task and group values by key

    Args:
        job_name: Name of the whole MapReduce job
        reduce_task: Which reduce task this is
        n_map: Number of map tasks that were run
        intermediate_dir: Directory holding the intermediate files
        codec: Encoding the map phase wrote the files with

    Returns:
        Dictionary mapping key to its values, in map-task order

    Raises:
        IntermediateReadError: If a partition file is missing or unreadable
        IntermediateDecodeError: If a partition file does not decode
    """
    key_groups = defaultdict(list)
    records = 0

    for map_task in range(n_map):
        filepath = os.path.join(intermediate_dir, reduce_name(job_name, map_task, reduce_task))
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise IntermediateReadError(f"Cannot read intermediate file {filepath}: {e}", filepath) from e

        pairs = codec.decode_key_values(content, source=filepath)
        for kv in pairs:
            key_groups[kv.key].append(kv.value)
        records += len(pairs)
        logger.debug(f"Reduce task {reduce_task}: {filepath} held {len(pairs)} records")

    logger.info(f"Reduce task {reduce_task}: Read {n_map} files, "
                f"{records} records, {len(key_groups)} unique keys")
    return dict(key_groups)


def reduce_and_write(key_groups: Dict[str, List[str]], reduce_func: ReduceFunc,
                     out_file: str, codec=DEFAULT_CODEC) -> Dict[str, str]:
    """
    Apply the reduce function once per key, in key order, and write the result

    Args:
        key_groups: Output of merge_intermediates
        reduce_func: Application's reduce function, (key, values) -> value
        out_file: Path of the output file, replaced atomically
        codec: Encoding for the result table

    Returns:
        Result table, keys in ascending order

    Raises:
        TypeError: If the reduce function returns something other than a string
        OutputWriteError: If the output file cannot be written
    """
    results = {}
    for key in sorted(key_groups):  # downstream merging relies on key order
        value = reduce_func(key, key_groups[key])
        if not isinstance(value, str):
            raise TypeError(f"reduce function returned {type(value).__name__} for key {key!r}, expected str")
        results[key] = value

    try:
        data = codec.encode_result(results).encode('utf-8')
    except UnicodeEncodeError as e:
        raise OutputWriteError(f"Cannot encode output for {out_file}: {e}", out_file) from e

    _write_atomically(out_file, data)
    logger.info(f"Wrote {len(results)} keys to {out_file}")
    return results


def _output_mode(path: str) -> int:
    """Mode of the file being replaced, or what open() would create under the current umask"""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _write_atomically(path: str, data: bytes):
    """Write data to a temporary file next to path, then rename it over path"""
    directory = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{os.path.basename(path)}.", suffix='.tmp', dir=directory)
    except OSError as e:
        raise OutputWriteError(f"Cannot create output file {path}: {e}", path) from e

    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, _output_mode(path))
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            os.remove(tmp_path)
        except OSError as cleanup_error:
            logger.warning(f"Could not remove temporary file {tmp_path}: {cleanup_error}")
        raise OutputWriteError(f"Cannot write output file {path}: {e}", path) from e


def do_reduce(job_name: str, reduce_task: int, out_file: str, n_map: int,
              reduce_func: ReduceFunc, intermediate_dir: str = '.', codec=DEFAULT_CODEC) -> Dict[str, str]:
    """
    Run one reduce task: merge the intermediate files, reduce per key, write out_file

    Any read, decode, reduce or write failure propagates and leaves out_file as it was.
    """
    key_groups = merge_intermediates(job_name, reduce_task, n_map, intermediate_dir, codec)
    return reduce_and_write(key_groups, reduce_func, out_file, codec)


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, job_name: str, reduce_task: int, n_map: int, map_reduce_file: str,
                 output_path: str = None, intermediate_dir: str = '.'):
        """
        Initialize the reduce executor

        Args:
            job_name: Name of the whole MapReduce job
            reduce_task: Index of the reduce task to run
            n_map: Number of map tasks whose output is merged
            map_reduce_file: Path to user's job file defining reduce_function
            output_path: Output file path (defaults to the merge name in intermediate_dir)
            intermediate_dir: Directory holding the intermediate files
        """
        self.job_name = job_name
        self.reduce_task = reduce_task
        self.n_map = n_map
        self.map_reduce_file = map_reduce_file
        self.intermediate_dir = intermediate_dir
        self.output_path = output_path or os.path.join(intermediate_dir, merge_name(job_name, reduce_task))
        self.loader = FunctionLoader(map_reduce_file)
        self.process = psutil.Process()

    def execute(self) -> dict:
        """
        Execute the reduce task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message', 'error_type',
            'keys_reduced', 'output_file' and 'memory_rss_bytes' fields
        """
        start_time = time.time()
        keys_reduced = 0
        error_message = ''
        error_type = ''

        try:
            logger.info(f"Reduce task {self.reduce_task}: Loading reduce function from {self.map_reduce_file}")
            reduce_func = self.loader.get_reduce_function()

            results = do_reduce(self.job_name, self.reduce_task, self.output_path, self.n_map,
                                reduce_func, self.intermediate_dir)
            keys_reduced = len(results)
        except Exception as e:
            error_message = str(e)
            error_type = type(e).__name__
            logger.exception(f"Reduce task {self.reduce_task} of job {self.job_name} failed")

        execution_time = int((time.time() - start_time) * 1000)
        if not error_type:
            logger.info(f"Reduce task {self.reduce_task}: Completed in {execution_time}ms")

        return {
            'success': not error_type,
            'execution_time_ms': execution_time,
            'error_message': error_message,
            'error_type': error_type,
            'keys_reduced': keys_reduced,
            'output_file': self.output_path,
            'memory_rss_bytes': self.process.memory_info().rss,
        }


def main(argv=None) -> int:
    """Run one reduce task from the command line"""
    config = WorkerConfig.from_env()

    parser = argparse.ArgumentParser(description='MapReduce Reduce Task')
    parser.add_argument('--job-name', required=True, help='Name of the MapReduce job')
    parser.add_argument('--reduce-task', type=int, required=True, help='Index of this reduce task')
    parser.add_argument('--n-map', type=int, required=True, help='Number of map tasks that ran')
    parser.add_argument('--job-file', required=True, help='Python file defining reduce_function')
    parser.add_argument('--output', help='Output file (default: mrtmp.<job>-res-<task>)')
    parser.add_argument('--intermediate-dir', default=config.intermediate_dir,
                        help='Directory holding intermediate files')
    parser.add_argument('--log-level', default=config.log_level,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = args.output
    if output is None:
        config.intermediate_dir = args.intermediate_dir
        output = os.path.join(config.resolve_output_dir(), merge_name(args.job_name, args.reduce_task))

    executor = ReduceExecutor(
        job_name=args.job_name,
        reduce_task=args.reduce_task,
        n_map=args.n_map,
        map_reduce_file=args.job_file,
        output_path=output,
        intermediate_dir=args.intermediate_dir,
    )
    result = executor.execute()
    return 0 if result['success'] else 1


if __name__ == '__main__':
    sys.exit(main())
