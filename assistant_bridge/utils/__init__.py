"""Utilities package."""

from .logger import get_app_logger, get_component_logger, setup_logger, init_app_logger
from .jsonl_parser import iter_lines, decode_protocol_line
from .file_writer import atomic_write_text

__all__ = [
    "get_app_logger",
    "get_component_logger",
    "setup_logger",
    "init_app_logger",
    "iter_lines",
    "decode_protocol_line",
    "atomic_write_text",
]
