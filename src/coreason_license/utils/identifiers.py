# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_license

"""
Normalization of publisher, product and environment identifiers.
"""


def strip_braces(value: str | None) -> str:
    """
    Removes surrounding whitespace and GUID braces, e.g. "{ABC-123}" -> "ABC-123".
    """
    return (value or "").strip().removeprefix("{").removesuffix("}").strip()


def normalize_identifier(value: str | None) -> str:
    """
    Canonical form used for identifier comparison: brace-stripped and lowercased.
    """
    return strip_braces(value).lower()


def identifiers_equal(left: str | None, right: str | None) -> bool:
    return normalize_identifier(left) == normalize_identifier(right)
