"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import tempfile
import shutil

from common.codec import DEFAULT_CODEC
from common.keyvalue import KeyValue, reduce_name

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def write_partitions(temp_dir):
    """
    Write one intermediate file per map task for a reduce task.

    Usage: write_partitions('job', 0, [[('k', 'v')], [...]]) -> list of paths
    """
    def _write(job_name, reduce_task, partitions):
        paths = []
        for map_task, pairs in enumerate(partitions):
            path = os.path.join(temp_dir, reduce_name(job_name, map_task, reduce_task))
            with open(path, 'w', encoding='utf-8') as f:
                f.write(DEFAULT_CODEC.encode_key_values(KeyValue(k, v) for k, v in pairs))
            paths.append(path)
        return paths
    return _write


@pytest.fixture
def wordcount_job_file():
    """Path to word count example job file"""
    return os.path.join(REPO_ROOT, 'examples', 'wordcount.py')


@pytest.fixture
def inverted_index_job_file():
    """Path to inverted index example job file"""
    return os.path.join(REPO_ROOT, 'examples', 'inverted_index.py')
