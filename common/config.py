"""
Worker configuration read from the environment
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class WorkerConfig:
    intermediate_dir: str = '.'
    output_dir: Optional[str] = None
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ=None) -> 'WorkerConfig':
        """Build a config from MR_* environment variables"""
        environ = os.environ if environ is None else environ
        return cls(
            intermediate_dir=environ.get('MR_INTERMEDIATE_DIR', '.'),
            output_dir=environ.get('MR_OUTPUT_DIR') or None,
            log_level=environ.get('MR_LOG_LEVEL', 'INFO').upper(),
        )

    def resolve_output_dir(self) -> str:
        """Directory that default output file names are placed in"""
        return self.output_dir or self.intermediate_dir
