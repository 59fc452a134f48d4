"""Parsing of numeric path segments."""

from typing import Tuple

from fastapi import HTTPException, status

from config import MAX_DB_INT, MODULE_SIZE

# Keeps the module's catalog offset within a stored integer
MAX_MODULE = MAX_DB_INT // MODULE_SIZE


def _to_int(value: str, limit: int = MAX_DB_INT) -> int:
    number = int(value.strip())
    if not -limit <= number <= limit:
        raise ValueError(f"{value!r} is out of range")
    return number


def parse_chapter(chapter: str) -> int:
    """Parse a chapter path segment.

    Raises:
        HTTPException: 400 if the segment is not an integer or does not fit
            a stored integer.
    """
    try:
        return _to_int(chapter)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid chapter number",
        )


def parse_chapter_and_module(chapter: str, module: str) -> Tuple[int, int]:
    """Parse chapter and module path segments.

    Raises:
        HTTPException: 400 if either is not an in-range integer or module
            is below 1.
    """
    try:
        chapter_num = _to_int(chapter)
        module_num = _to_int(module, MAX_MODULE)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid chapter or module number",
        )
    if module_num < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid chapter or module number",
        )
    return chapter_num, module_num
