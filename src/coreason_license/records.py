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
License record lookup and record metadata extraction.
"""

import threading
from datetime import UTC, datetime
from typing import Protocol

from coreason_license.codec import decode_claims, split_token
from coreason_license.models import LicenseRecord, LicenseSummary
from coreason_license.utils.identifiers import normalize_identifier, strip_braces


def license_identifier(publisher_id: str, product_id: str) -> str:
    """
    Builds the identifier a license record is stored under: `<publisherId>_<productId>`.
    """
    return f"{strip_braces(publisher_id)}_{strip_braces(product_id)}"


class LicenseSource(Protocol):
    """Protocol for anything that can look up stored license records."""

    def find(self, identifier: str) -> list[LicenseRecord]:
        """
        Returns all active records stored under the identifier.
        """
        ...


class InMemoryLicenseSource:
    """
    In-memory implementation of LicenseSource.
    Useful for tests and for hosts that cache records locally. Not shared across processes.
    """

    def __init__(self, records: list[LicenseRecord] | None = None) -> None:
        self._records: dict[str, LicenseRecord] = {}
        self._lock = threading.Lock()
        for record in records or []:
            self.add(record)

    def add(self, record: LicenseRecord) -> None:
        """Adds or replaces a record, keyed by its license_id."""
        with self._lock:
            self._records[record.license_id] = record

    def remove(self, license_id: str) -> LicenseRecord | None:
        """Removes a record. Returns the removed record, if any."""
        with self._lock:
            return self._records.pop(license_id, None)

    def find(self, identifier: str) -> list[LicenseRecord]:
        wanted = normalize_identifier(identifier)
        with self._lock:
            return [
                record
                for record in self._records.values()
                if record.active and normalize_identifier(record.identifier) == wanted
            ]


def extract_license_summary(token: str) -> LicenseSummary:
    """
    Extracts the descriptive fields a host stores next to a license key.

    The signature is NOT verified: the summary is only used to label and index a record.

    Args:
        token: The compact license token.

    Returns:
        LicenseSummary: identifier, display name and expiry date.

    Raises:
        MalformedTokenError: If the token is not a three-segment token.
        InvalidClaimsEncodingError: If the claims cannot be decoded.
    """
    claims = decode_claims(split_token(token.strip()).claims)

    publisher_name = claims.pub_meta.name if claims.pub_meta else ""
    product_name = claims.prd_meta.name if claims.prd_meta else ""
    expiry_date = datetime.fromtimestamp(claims.exp, tz=UTC) if claims.exp is not None else None

    return LicenseSummary(
        identifier=license_identifier(claims.pub, claims.prd),
        name=f"{publisher_name} - {product_name}",
        expiry_date=expiry_date,
    )
