#!/usr/bin/env python3
"""
Dynamic Function Loader for MapReduce User Functions
Loads the reduce function from a user-provided Python job file
"""

import importlib.util
import logging
import os
import sys

logger = logging.getLogger(__name__)


class FunctionLoader:
    """Dynamically loads user-provided reduce functions from Python files"""

    def __init__(self, map_reduce_file: str):
        """
        Initialize the function loader

        Args:
            map_reduce_file: Path to user's Python file containing the reduce function
        """
        self.map_reduce_file = map_reduce_file
        self.module = None

    def _module_name(self) -> str:
        stem = os.path.splitext(os.path.basename(self.map_reduce_file))[0]
        return f"user_mapreduce_{stem}"

    def load_module(self):
        """
        Dynamically load user-provided module

        Returns:
            The loaded module object

        Raises:
            FileNotFoundError: If the job file doesn't exist
            ImportError: If the job file cannot be loaded as a module
        """
        if not os.path.exists(self.map_reduce_file):
            raise FileNotFoundError(f"Map/Reduce file not found: {self.map_reduce_file}")

        name = self._module_name()
        spec = importlib.util.spec_from_file_location(name, self.map_reduce_file)
        if spec is None or spec.loader is None:
            raise ImportError(f"Failed to load job file: {self.map_reduce_file}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(name, None)
            raise
        self.module = module
        logger.debug(f"Loaded job file {self.map_reduce_file} as {name}")
        return module

    def get_reduce_function(self):
        """
        Get reduce function from loaded module

        Returns:
            The reduce_function callable from the module

        Raises:
            AttributeError: If module doesn't define a callable 'reduce_function'
        """
        if not self.module:
            self.load_module()

        reduce_func = getattr(self.module, 'reduce_function', None)
        if reduce_func is None:
            raise AttributeError("Module must define 'reduce_function'")
        if not callable(reduce_func):
            raise AttributeError("'reduce_function' must be callable")
        return reduce_func
