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
LicenseValidator component for validating license claims and signatures.
"""

import functools
import hashlib
import hmac
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

import anyio
from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from coreason_license.codec import b64url_decode, decode_claims, signing_input, split_token
from coreason_license.config import CoreasonLicenseConfig
from coreason_license.exceptions import InvalidClaimsEncodingError, KeyImportError, MalformedTokenError
from coreason_license.keys import import_public_key, verify_rs256
from coreason_license.models import LicenseClaims, LicenseInvalid, LicenseValid, LicenseValidationResult
from coreason_license.utils.identifiers import identifiers_equal, normalize_identifier, strip_braces
from coreason_license.utils.logger import logger

tracer = trace.get_tracer(__name__)

MISSING_PRODUCT_ID = "No productId found, pass a productId!"
MISSING_PUBLIC_KEY = "No public key found, pass a valid public key!"
NO_LICENSE_KEY = "No license key set!"
INVALID_FORMAT = "Invalid license format!"
UNEXPECTED_ERROR = "Oops, something went wrong while validating your license"
INCOMPLETE_LICENSE = "Incomplete license!"
SIGNATURE_MISMATCH = "Invalid license signature: Verification failed!"
NO_IMPORTABLE_KEY = "Invalid license signature: No valid public key could be imported!"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class LicenseValidator:
    """
    Validates license tokens offline against a set of trusted public keys.

    Claim rules run before the signature check so the first failing rule can be reported precisely.
    Only a verified signature ever produces a `LicenseValid` result.

    Attributes:
        config (CoreasonLicenseConfig): Portal URL, audience, PII salt and leeway.
        clock (Callable[[], datetime]): Returns the current time as an aware UTC datetime.
    """

    def __init__(
        self,
        config: CoreasonLicenseConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the LicenseValidator.

        Args:
            config: The configuration. Defaults to `CoreasonLicenseConfig()` read from the environment.
            clock: Time source for expiry checks. Defaults to the system clock in UTC.
        """
        self.config = config or CoreasonLicenseConfig()
        self.clock = clock or _utc_now

    def _anonymize(self, value: str) -> str:
        """
        Anonymizes a value using HMAC-SHA256 with the configured salt.
        """
        return hmac.new(
            self.config.pii_salt.get_secret_value().encode("utf-8"),
            value.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def validate(
        self,
        token: str | None,
        publisher_id: str,
        product_id: str,
        environment_type: str,
        environment_identifier: str,
        public_keys: Sequence[str],
    ) -> LicenseValidationResult:
        """
        Validates a license token.

        Emits an OpenTelemetry span `validate_license`. Never raises: every failure,
        including unexpected ones, is returned as `LicenseInvalid`.

        Args:
            token: The compact license token.
            publisher_id: The publisher the license must be issued for.
            product_id: The product the license must be issued for.
            environment_type: The type of the environment the caller runs in, e.g. "dataverse".
            environment_identifier: The id of the environment the caller runs in.
            public_keys: Trusted PEM public keys. A signature valid under any of them is accepted.

        Returns:
            LicenseValidationResult: `LicenseValid` with the claims, or `LicenseInvalid` with the first failure.
        """
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("license.publisher_id", publisher_id or "")
            span.set_attribute("license.product_id", product_id or "")
            span.set_attribute("license.environment_type", environment_type or "")

            try:
                result = self._validate(
                    token, publisher_id, product_id, environment_type, environment_identifier, public_keys
                )
            except Exception as e:
                logger.exception("Unexpected error during license validation")
                span.record_exception(e)
                result = LicenseInvalid(reason=UNEXPECTED_ERROR, terminal=True)

            self._record_outcome(span, result)
            return result

    def _record_outcome(self, span: Span, result: LicenseValidationResult) -> None:
        if isinstance(result, LicenseValid):
            subject_hash = self._anonymize(result.claims.sub)
            logger.info(f"License validated for subject {subject_hash}")
            span.set_attribute("enduser.id", subject_hash)
            span.set_status(Status(StatusCode.OK))
        else:
            logger.warning(f"License validation failed: {result.reason}")
            span.set_attribute("license.terminal_error", result.terminal)
            span.set_status(Status(StatusCode.ERROR, result.reason))

    def _validate(
        self,
        token: str | None,
        publisher_id: str,
        product_id: str,
        environment_type: str,
        environment_identifier: str,
        public_keys: Sequence[str],
    ) -> LicenseValidationResult:
        if not strip_braces(product_id):
            return LicenseInvalid(reason=MISSING_PRODUCT_ID, terminal=True)

        if not public_keys:
            return LicenseInvalid(reason=MISSING_PUBLIC_KEY, terminal=True)

        token = (token or "").strip()
        if not token:
            return LicenseInvalid(reason=NO_LICENSE_KEY)

        try:
            segments = split_token(token)
        except MalformedTokenError:
            return LicenseInvalid(reason=INVALID_FORMAT)

        try:
            claims = decode_claims(segments.claims)
        except InvalidClaimsEncodingError:
            logger.opt(exception=True).warning("Validation failed: Claims segment could not be decoded")
            return LicenseInvalid(reason=UNEXPECTED_ERROR, terminal=True)

        failure = self.validate_claims(claims, publisher_id, product_id, environment_type, environment_identifier)
        if failure is not None:
            return failure

        failure = self.verify_signature(
            signing_input(segments.header, segments.claims), segments.signature, public_keys
        )
        if failure is not None:
            return failure

        return LicenseValid(claims=claims)

    def validate_claims(
        self,
        claims: LicenseClaims,
        publisher_id: str,
        product_id: str,
        environment_type: str,
        environment_identifier: str,
    ) -> LicenseInvalid | None:
        """
        Applies the business rules to decoded claims, in order.

        Passing these rules does not make a license valid: the signature still has to be verified.

        Args:
            claims: The decoded, unverified claims.
            publisher_id: Expected publisher.
            product_id: Expected product.
            environment_type: Expected environment type.
            environment_identifier: Expected environment id.

        Returns:
            LicenseInvalid | None: The first failing rule, or None if all rules pass.
        """
        if not claims.env or not claims.aud or not claims.iss:
            return LicenseInvalid(reason=INCOMPLETE_LICENSE)

        valid_issuer = self.config.issuer_for(strip_braces(product_id))
        if claims.iss.strip().lower() != valid_issuer.lower():
            return LicenseInvalid(reason=f"Invalid license issuer: Issuer must be '{valid_issuer}'")

        valid_audience = self.config.audience
        if claims.aud.strip().lower() != valid_audience.lower():
            return LicenseInvalid(reason=f"Invalid license audience: Audience must be '{valid_audience}'")

        if not identifiers_equal(claims.pub, publisher_id):
            return LicenseInvalid(
                reason=f"Invalid license publisher: Publisher must be '{strip_braces(publisher_id)}'"
            )

        if not identifiers_equal(claims.prd, product_id):
            return LicenseInvalid(reason=f"Invalid license product: Product must be '{strip_braces(product_id)}'")

        expected_type = (environment_type or "").strip().lower()
        expected_identifier = normalize_identifier(environment_identifier)
        if not any(
            entry.type.strip().lower() == expected_type and normalize_identifier(entry.identifier) == expected_identifier
            for entry in claims.env
        ):
            licensed = ", ".join(f"{entry.identifier} ({entry.name})" for entry in claims.env)
            return LicenseInvalid(
                reason=(
                    f"Invalid environment: Your license is not intended for usage in "
                    f"'{environment_type}: {strip_braces(environment_identifier)}' but for '{licensed}'"
                )
            )

        # A license without exp claim does not expire
        if claims.exp is not None:
            expiry_date = datetime.fromtimestamp(claims.exp, tz=UTC)
            if expiry_date + timedelta(seconds=self.config.clock_skew_leeway) < self.clock():
                return LicenseInvalid(
                    reason=f"Invalid license expiry: License expired on '{expiry_date:%Y-%m-%d %H:%M:%S} UTC'"
                )

        return None

    def verify_signature(
        self,
        data: bytes,
        signature_segment: str,
        public_keys: Sequence[str],
    ) -> LicenseInvalid | None:
        """
        Verifies the RS256 signature against each candidate key in order.

        Keys that fail to import are skipped. The first key producing a valid signature wins.

        Args:
            data: The signing input, `header_segment + "." + claims_segment` as bytes.
            signature_segment: The base64url signature segment.
            public_keys: Candidate PEM public keys.

        Returns:
            LicenseInvalid | None: None if any key verifies the signature.
        """
        try:
            signature = b64url_decode(signature_segment)
        except MalformedTokenError:
            return LicenseInvalid(reason=INVALID_FORMAT)

        imported_any = False
        for index, pem in enumerate(public_keys):
            try:
                public_key = import_public_key(pem)
            except KeyImportError as e:
                logger.warning(f"Skipping public key #{index}: {e}")
                continue

            imported_any = True
            if verify_rs256(public_key, data, signature):
                logger.debug(f"License signature verified with public key #{index}")
                return None

        if not imported_any:
            logger.error("None of the configured public keys could be imported")
            return LicenseInvalid(reason=NO_IMPORTABLE_KEY)

        return LicenseInvalid(reason=SIGNATURE_MISMATCH)


class LicenseValidatorAsync:
    """
    Async facade over `LicenseValidator`.

    RSA work runs in a worker thread so an event loop serving a UI or API is not blocked.
    """

    def __init__(
        self,
        config: CoreasonLicenseConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._validator = LicenseValidator(config=config, clock=clock)

    @property
    def config(self) -> CoreasonLicenseConfig:
        return self._validator.config

    async def validate(
        self,
        token: str | None,
        publisher_id: str,
        product_id: str,
        environment_type: str,
        environment_identifier: str,
        public_keys: Sequence[str],
    ) -> LicenseValidationResult:
        """
        Validates a license token without blocking the event loop.

        See `LicenseValidator.validate` for arguments and result.
        """
        return await anyio.to_thread.run_sync(
            functools.partial(
                self._validator.validate,
                token,
                publisher_id,
                product_id,
                environment_type,
                environment_identifier,
                public_keys,
            )
        )
