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
Custom exceptions for the coreason-license package.
"""


class CoreasonLicenseError(Exception):
    """Base exception for all coreason-license errors."""


class MalformedTokenError(CoreasonLicenseError):
    """
    Raised when a license token does not have the compact three-segment layout,
    or one of its segments is not valid base64url.
    """


class InvalidClaimsEncodingError(CoreasonLicenseError):
    """Raised when a claims or header segment cannot be decoded into its structure."""


class KeyImportError(CoreasonLicenseError):
    """Raised when a PEM string cannot be imported as an RSA key."""


class SignatureVerificationError(CoreasonLicenseError):
    """Raised when a license signature cannot be produced or verified."""
