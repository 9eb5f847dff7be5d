"""
Spreadsheet parsers module.
"""

from parsers.spreadsheet_codec import (
    CandidateRow,
    decode,
    encode,
    cell_text,
    HEADER,
)

__all__ = [
    "CandidateRow",
    "decode",
    "encode",
    "cell_text",
    "HEADER",
]
