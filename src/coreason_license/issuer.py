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
LicenseIssuer component for creating and signing license tokens.
"""

import uuid
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from authlib.jose import JsonWebSignature
from authlib.jose.errors import JoseError
from pydantic import BaseModel, ConfigDict

from coreason_license.codec import encode_claims, split_token
from coreason_license.config import CoreasonLicenseConfig
from coreason_license.exceptions import SignatureVerificationError
from coreason_license.keys import import_private_key
from coreason_license.models import EnvironmentEntry, LicenseClaims, Meta, TokenHeader
from coreason_license.utils.identifiers import strip_braces
from coreason_license.utils.logger import logger

SCHEMA_VERSION = "1.0"
SECONDS_PER_DAY = 24 * 60 * 60


class IssuerNames(BaseModel):
    """Display names written into the `*_meta` claims. Purely cosmetic."""

    model_config = ConfigDict(frozen=True)

    issuer: str | None = None
    audience: str | None = None
    publisher: str | None = None
    product: str | None = None
    subject: str | None = None


def _meta(name: str | None) -> Meta | None:
    return Meta(name=name) if name else None


def _utc_now() -> datetime:
    return datetime.now(UTC)


class LicenseIssuer:
    """
    Builds license claims and signs them with RS256.

    Attributes:
        key_id (str): Written into the `kid` header so verifiers can tell keys apart.
        config (CoreasonLicenseConfig): Supplies the portal URL and audience.
    """

    def __init__(
        self,
        private_key_pem: str,
        key_id: str,
        config: CoreasonLicenseConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the LicenseIssuer.

        Args:
            private_key_pem: The PEM-encoded RSA private signing key.
            key_id: The key id for the token header.
            config: The configuration. Defaults to `CoreasonLicenseConfig()`.
            clock: Time source for `iat`/`nbf`/`exp`. Defaults to the system clock in UTC.

        Raises:
            KeyImportError: If the private key cannot be imported.
        """
        self._key = import_private_key(private_key_pem)
        self.key_id = key_id
        self.config = config or CoreasonLicenseConfig()
        self.clock = clock or _utc_now
        self._jws = JsonWebSignature(algorithms=["RS256"])

    def build_claims(
        self,
        publisher_id: str,
        product_id: str,
        subject_id: str,
        environments: Sequence[EnvironmentEntry | str],
        expires_in_days: int | None = 30,
        custom: dict[str, Any] | None = None,
        required_roles: Sequence[str] | None = None,
        names: IssuerNames | None = None,
    ) -> LicenseClaims:
        """
        Builds the claims of a new license.

        Args:
            publisher_id: The publisher id.
            product_id: The product id.
            subject_id: The licensed customer id.
            environments: Authorized environments, as entries or `type:identifier:name` strings.
            expires_in_days: Lifetime in days. None issues a license that never expires.
            custom: Publisher-defined extension data.
            required_roles: Reserved role names.
            names: Display names for the `*_meta` claims.

        Returns:
            LicenseClaims: The claims, with a fresh `jti`.

        Raises:
            ValueError: If no environment is given or a lifetime is not positive.
        """
        if not environments:
            raise ValueError("At least one environment is required.")
        if expires_in_days is not None and expires_in_days <= 0:
            raise ValueError("expires_in_days must be positive, or None for a non-expiring license.")

        entries = [EnvironmentEntry.parse(e) if isinstance(e, str) else e for e in environments]
        names = names or IssuerNames()
        now = int(self.clock().timestamp())

        return LicenseClaims(
            jti=str(uuid.uuid4()),
            iss=self.config.issuer_for(strip_braces(product_id)),
            aud=self.config.audience,
            pub=strip_braces(publisher_id),
            prd=strip_braces(product_id),
            sub=subject_id,
            env=entries,
            required_roles=list(required_roles or []),
            iat=now,
            nbf=now,
            exp=None if expires_in_days is None else now + expires_in_days * SECONDS_PER_DAY,
            custom=dict(custom or {}),
            iss_meta=_meta(names.issuer),
            aud_meta=_meta(names.audience),
            pub_meta=_meta(names.publisher),
            prd_meta=_meta(names.product),
            sub_meta=_meta(names.subject),
            ver=SCHEMA_VERSION,
        )

    def sign(self, claims: LicenseClaims) -> str:
        """
        Signs claims into a compact license token.

        Args:
            claims: The claims to sign.

        Returns:
            str: `header.claims.signature`, each segment base64url without padding.

        Raises:
            SignatureVerificationError: If signing fails.
        """
        header = TokenHeader(kid=self.key_id).model_dump(exclude_none=True)
        claims_segment = encode_claims(claims)

        try:
            token = self._jws.serialize_compact(header, claims.model_dump_json(exclude_none=True), self._key)
        except JoseError as e:
            raise SignatureVerificationError(f"Failed to sign license: {e}") from e

        token_str = token.decode("ascii")
        # The signed claims segment must be the codec's encoding of the claims
        if split_token(token_str).claims != claims_segment:
            raise SignatureVerificationError("Signed claims segment does not match the claims encoding")

        logger.info(f"Issued license {claims.jti} for product {claims.prd} with key {self.key_id}")
        return token_str

    def issue(
        self,
        publisher_id: str,
        product_id: str,
        subject_id: str,
        environments: Sequence[EnvironmentEntry | str],
        expires_in_days: int | None = 30,
        custom: dict[str, Any] | None = None,
        required_roles: Sequence[str] | None = None,
        names: IssuerNames | None = None,
    ) -> str:
        """
        Builds and signs a new license. See `build_claims` for arguments.

        Returns:
            str: The compact license token.
        """
        claims = self.build_claims(
            publisher_id,
            product_id,
            subject_id,
            environments,
            expires_in_days=expires_in_days,
            custom=custom,
            required_roles=required_roles,
            names=names,
        )
        return self.sign(claims)
