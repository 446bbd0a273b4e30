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
Configuration for the coreason-license package.
"""

from urllib.parse import urlparse

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORTAL_BASE_URL = "https://www.ianusguard.com"
DEFAULT_AUDIENCE = "ianusguard"


class CoreasonLicenseConfig(BaseSettings):
    """
    Configuration settings for coreason-license.

    Attributes:
        unsafe_local_dev (bool): Allows a plain-HTTP portal URL for local testing.
        portal_base_url (str): Base URL of the licensing portal that issues licenses.
        audience (str): The audience every license of this product line must carry.
        pii_salt (SecretStr): Salt for anonymizing subject ids in logs/traces.
        clock_skew_leeway (int): Seconds a license is still accepted after its expiry.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_LICENSE_",
        case_sensitive=False,
    )

    # Declared first so the portal URL validator can read it from info.data
    unsafe_local_dev: bool = False
    portal_base_url: str = DEFAULT_PORTAL_BASE_URL
    audience: str = Field(default=DEFAULT_AUDIENCE, min_length=1)
    pii_salt: SecretStr = SecretStr("coreason-unsafe-default-salt")
    clock_skew_leeway: int = Field(default=0, ge=0)

    @field_validator("portal_base_url", mode="after")
    @classmethod
    def validate_portal_base_url(cls, v: str, info: ValidationInfo) -> str:
        """
        Normalizes the portal URL and ensures it uses HTTPS, unless strictly opted out for local dev.

        Args:
            v: The configured portal URL.
            info: Validation context holding previously validated fields.

        Returns:
            The portal URL without trailing slashes.

        Raises:
            ValueError: If the URL has no host, or uses plain HTTP outside local dev.
        """
        v = v.strip().rstrip("/")
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid portal base URL '{v}': must be an absolute http(s) URL.")

        if parsed.scheme == "http" and not info.data.get("unsafe_local_dev", False):
            raise ValueError("HTTPS is required for production. Set 'unsafe_local_dev=True' only for local testing.")
        return v

    def issuer_for(self, product_id: str) -> str:
        """
        Builds the issuer every license for the given product must carry.

        Args:
            product_id: The product id.

        Returns:
            str: `<portal_base_url>/api/public/products/<product_id>`.
        """
        return f"{self.portal_base_url}/api/public/products/{product_id}"
