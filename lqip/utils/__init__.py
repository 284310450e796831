"""
Utility functions for the placeholder service.
"""
from lqip.utils.metrics import (
    get_cpu_mem,
    PerformanceTimer
)

from lqip.utils.file_handling import (
    get_temp_filepath,
    temp_file_context,
    write_and_read_back
)

__all__ = [
    # Metrics utilities
    'get_cpu_mem',
    'PerformanceTimer',

    # File handling utilities
    'get_temp_filepath',
    'temp_file_context',
    'write_and_read_back'
]
