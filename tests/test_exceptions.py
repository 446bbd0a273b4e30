# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_license

from coreason_license.exceptions import (
    CoreasonLicenseError,
    InvalidClaimsEncodingError,
    KeyImportError,
    MalformedTokenError,
    SignatureVerificationError,
)


def test_exception_hierarchy() -> None:
    """Test that all custom exceptions inherit from CoreasonLicenseError."""
    assert issubclass(MalformedTokenError, CoreasonLicenseError)
    assert issubclass(InvalidClaimsEncodingError, CoreasonLicenseError)
    assert issubclass(KeyImportError, CoreasonLicenseError)
    assert issubclass(SignatureVerificationError, CoreasonLicenseError)


def test_exception_instantiation() -> None:
    """Test that exceptions can be instantiated."""
    err = MalformedTokenError("Expected 3 token segments, got 1")
    assert str(err) == "Expected 3 token segments, got 1"
