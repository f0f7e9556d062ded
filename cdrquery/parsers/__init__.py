"""
cdrquery/parsers: delimited CDR file parsing.
"""

from cdrquery.parsers.cdr_parser import (
    parse_cdr_directory,
    parse_cdr_file,
    parse_cdr_line,
)

__all__ = [
    "parse_cdr_directory",
    "parse_cdr_file",
    "parse_cdr_line",
]
