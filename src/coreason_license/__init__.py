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
Offline issuance and verification of signed software licenses.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import CoreasonLicenseConfig
from .exceptions import CoreasonLicenseError, InvalidClaimsEncodingError, KeyImportError, MalformedTokenError
from .guard import LicenseGuard
from .issuer import IssuerNames, LicenseIssuer
from .models import (
    EnvironmentEntry,
    EnvironmentType,
    GuardedLicenseResult,
    LicenseClaims,
    LicenseInvalid,
    LicenseRecord,
    LicenseValid,
    LicenseValidationResult,
)
from .records import InMemoryLicenseSource, LicenseSource, extract_license_summary, license_identifier
from .validator import LicenseValidator, LicenseValidatorAsync

__all__ = [
    "CoreasonLicenseConfig",
    "CoreasonLicenseError",
    "EnvironmentEntry",
    "EnvironmentType",
    "GuardedLicenseResult",
    "InMemoryLicenseSource",
    "InvalidClaimsEncodingError",
    "IssuerNames",
    "KeyImportError",
    "LicenseClaims",
    "LicenseGuard",
    "LicenseInvalid",
    "LicenseIssuer",
    "LicenseRecord",
    "LicenseSource",
    "LicenseValid",
    "LicenseValidationResult",
    "LicenseValidator",
    "LicenseValidatorAsync",
    "MalformedTokenError",
    "extract_license_summary",
    "license_identifier",
]
