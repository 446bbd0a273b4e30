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
LicenseGuard component for orchestrating license lookup and validation.
"""

from collections.abc import Sequence

from coreason_license.models import GuardedLicenseResult, LicenseInvalid
from coreason_license.records import LicenseSource, license_identifier
from coreason_license.utils.identifiers import strip_braces
from coreason_license.utils.logger import logger
from coreason_license.validator import MISSING_PRODUCT_ID, MISSING_PUBLIC_KEY, LicenseValidator

USAGE_NOT_PERMITTED = "Your user is not enabled for using this product"
NO_LICENSE_FOUND = "No license found!"


class LicenseGuard:
    """
    Locates the single stored license for a product and validates it.

    This is what a host calls before rendering licensed functionality.
    The result is returned to the caller; nothing is cached between calls.
    """

    def __init__(self, source: LicenseSource, validator: LicenseValidator | None = None) -> None:
        """
        Initialize the LicenseGuard.

        Args:
            source: Where stored license records are looked up.
            validator: The validator to use. Defaults to `LicenseValidator()`.
        """
        self.source = source
        self.validator = validator or LicenseValidator()

    def check(
        self,
        publisher_id: str,
        product_id: str,
        environment_type: str,
        environment_identifier: str,
        public_keys: Sequence[str],
        usage_permission: bool | None = None,
    ) -> GuardedLicenseResult:
        """
        Checks whether the product is licensed for the given environment.

        Args:
            publisher_id: The publisher id.
            product_id: The product id.
            environment_type: The type of the environment the host runs in.
            environment_identifier: The id of the environment the host runs in.
            public_keys: Trusted PEM public keys.
            usage_permission: False if the current user may not use the product. None skips the check.

        Returns:
            GuardedLicenseResult: The validation result and the record that was validated, if any.
        """
        if usage_permission is not None and not usage_permission:
            return GuardedLicenseResult(result=LicenseInvalid(reason=USAGE_NOT_PERMITTED, terminal=True))

        if not strip_braces(product_id):
            return GuardedLicenseResult(result=LicenseInvalid(reason=MISSING_PRODUCT_ID, terminal=True))

        if not public_keys:
            return GuardedLicenseResult(result=LicenseInvalid(reason=MISSING_PUBLIC_KEY, terminal=True))

        identifier = license_identifier(publisher_id, product_id)
        try:
            records = self.source.find(identifier)
        except Exception as e:
            logger.exception(f"License lookup failed for '{identifier}'")
            return GuardedLicenseResult(result=LicenseInvalid(reason=str(e) or NO_LICENSE_FOUND, terminal=True))

        if not records:
            return GuardedLicenseResult(result=LicenseInvalid(reason=NO_LICENSE_FOUND))

        if len(records) > 1:
            return GuardedLicenseResult(
                result=LicenseInvalid(
                    reason=(
                        f"Multiple active licenses for '{identifier}' found, "
                        "please make sure there is only one active license"
                    ),
                    terminal=True,
                )
            )

        record = records[0]
        result = self.validator.validate(
            record.key, publisher_id, product_id, environment_type, environment_identifier, public_keys
        )
        return GuardedLicenseResult(result=result, record=record)
