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
Data models for the coreason-license package.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class EnvironmentType(StrEnum):
    DATAVERSE = "dataverse"
    ENTRA = "entra"


class Meta(BaseModel):
    """Human-readable display metadata attached to a claim."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""


class EnvironmentEntry(BaseModel):
    """
    A deployment environment a license is valid for.

    Attributes:
        type (str): The environment kind, e.g. "dataverse" or "entra".
        identifier (str): Opaque id of the environment. Compared case-insensitively, braces ignored.
        name (str): Display name.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    identifier: str
    name: str = ""

    @classmethod
    def parse(cls, value: str) -> "EnvironmentEntry":
        """
        Parses the textual form `type:identifier[:name]`.

        Args:
            value: The environment description.

        Returns:
            EnvironmentEntry: The parsed entry.

        Raises:
            ValueError: If type or identifier is missing.
        """
        parts = value.split(":", 2)
        if len(parts) < 2 or not parts[0].strip() or not parts[1].strip():
            raise ValueError(f"Invalid environment '{value}': expected 'type:identifier:name'.")
        name = parts[2].strip() if len(parts) == 3 else ""
        return cls(type=parts[0].strip(), identifier=parts[1].strip(), name=name)


class TokenHeader(BaseModel):
    """
    The JOSE header of a license token. Only RS256 is ever produced.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    alg: str = "RS256"
    typ: str = "JWT"
    kid: str | None = None


class LicenseClaims(BaseModel):
    """
    The signed payload of a license token.

    This model is frozen (immutable): a license is created once at issuance and only read afterwards.
    Unknown fields are ignored so newer issuers stay readable.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "jti": "0b5b6f2e-8d3c-4c43-9f2f-2a57d3c0b1aa",
                "iss": "https://www.ianusguard.com/api/public/products/d1",
                "aud": "ianusguard",
                "pub": "p1",
                "prd": "d1",
                "sub": "s1",
                "env": [{"type": "dataverse", "identifier": "org1", "name": "Production"}],
                "iat": 1735689600,
                "nbf": 1735689600,
                "exp": 1767225600,
                "ver": "1.0",
            }
        },
    )

    jti: str | None = Field(default=None, description="Unique id of this license instance.")
    iss: str = Field(default="", description="Issuer URL, `<portal>/api/public/products/<productId>`.")
    aud: str = Field(default="", description="Audience constant of the licensing system.")
    pub: str = Field(default="", description="Publisher id.")
    prd: str = Field(default="", description="Product id.")
    sub: str = Field(default="", description="Licensed subject (customer) id.")
    env: list[EnvironmentEntry] = Field(default_factory=list, description="Authorized environments.")
    required_roles: list[str] = Field(default_factory=list, description="Reserved. Not enforced.")
    iat: int | None = None
    nbf: int | None = None
    exp: int | None = Field(default=None, description="Expiry in unix seconds. None means the license never expires.")
    custom: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("custom", "cus"),
        description="Publisher-defined extension data. Not validated.",
    )
    iss_meta: Meta | None = None
    aud_meta: Meta | None = None
    pub_meta: Meta | None = None
    prd_meta: Meta | None = None
    sub_meta: Meta | None = None
    env_meta: dict[str, Meta] | None = None
    ver: str | None = None

    @field_validator("iss", "aud", "pub", "prd", "sub", mode="before")
    @classmethod
    def null_to_empty_string(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("env", "required_roles", mode="before")
    @classmethod
    def null_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("custom", mode="before")
    @classmethod
    def null_to_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def expires(self) -> bool:
        return self.exp is not None


class LicenseValid(BaseModel):
    """Successful validation: the claims passed every rule and the signature verified."""

    model_config = ConfigDict(frozen=True)

    is_valid: Literal[True] = True
    claims: LicenseClaims


class LicenseInvalid(BaseModel):
    """
    Failed validation.

    Attributes:
        reason (str): End-user facing explanation of the first failing check.
        terminal (bool): True when a different license key cannot fix the failure (misconfiguration).
    """

    model_config = ConfigDict(frozen=True)

    is_valid: Literal[False] = False
    reason: str
    terminal: bool = False


LicenseValidationResult = LicenseValid | LicenseInvalid


class LicenseRecord(BaseModel):
    """
    A stored license key as held by a host application.

    Attributes:
        license_id (str): Id of the stored record.
        identifier (str): `<publisherId>_<productId>`.
        key (str): The compact license token.
        active (bool): Inactive records are never returned by sources.
    """

    model_config = ConfigDict(frozen=True)

    license_id: str
    identifier: str
    key: str
    active: bool = True


class LicenseSummary(BaseModel):
    """Descriptive fields extracted from a license key when it is stored."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    name: str
    expiry_date: datetime | None = None


class GuardedLicenseResult(BaseModel):
    """Validation result together with the record that was validated, if one was found."""

    model_config = ConfigDict(frozen=True)

    result: LicenseValidationResult
    record: LicenseRecord | None = None

    @property
    def is_valid(self) -> bool:
        return self.result.is_valid
