# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_license

import json
import time
from collections.abc import Callable
from typing import Any

import pytest
from authlib.jose import JsonWebKey, RSAKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from pydantic import SecretStr

from coreason_license.codec import b64url_encode
from coreason_license.config import CoreasonLicenseConfig
from coreason_license.issuer import LicenseIssuer
from coreason_license.validator import LicenseValidator

PUBLISHER_ID = "P1"
PRODUCT_ID = "D1"
SUBJECT_ID = "S1"
ENV_TYPE = "dataverse"
ENV_ID = "ORG1"
ISSUER = f"https://www.ianusguard.com/api/public/products/{PRODUCT_ID}"
AUDIENCE = "ianusguard"

SignToken = Callable[..., str]


@pytest.fixture(scope="session")
def rsa_key() -> RSAKey:
    return JsonWebKey.generate_key("RSA", 2048, is_private=True)


@pytest.fixture(scope="session")
def rsa_key_rotated() -> RSAKey:
    return JsonWebKey.generate_key("RSA", 2048, is_private=True)


@pytest.fixture(scope="session")
def public_pem(rsa_key: RSAKey) -> str:
    return rsa_key.as_pem(is_private=False).decode("ascii")


@pytest.fixture(scope="session")
def public_pem_rotated(rsa_key_rotated: RSAKey) -> str:
    return rsa_key_rotated.as_pem(is_private=False).decode("ascii")


@pytest.fixture(scope="session")
def private_pem(rsa_key: RSAKey) -> str:
    return rsa_key.as_pem(is_private=True).decode("ascii")


@pytest.fixture
def config() -> CoreasonLicenseConfig:
    return CoreasonLicenseConfig(pii_salt=SecretStr("test-salt"))


@pytest.fixture
def validator(config: CoreasonLicenseConfig) -> LicenseValidator:
    return LicenseValidator(config=config)


@pytest.fixture
def issuer(private_pem: str, config: CoreasonLicenseConfig) -> LicenseIssuer:
    return LicenseIssuer(private_pem, key_id="key-1", config=config)


@pytest.fixture
def valid_claims() -> dict[str, Any]:
    """Claims of the canonical valid license used across the validator tests."""
    return {
        "jti": "7f9c2b1e-0f4a-4c55-9e43-3f0d7b8b2a11",
        "iss": ISSUER,
        "aud": AUDIENCE,
        "pub": PUBLISHER_ID,
        "prd": PRODUCT_ID,
        "sub": SUBJECT_ID,
        "env": [{"type": ENV_TYPE, "identifier": ENV_ID, "name": "n"}],
        "required_roles": [],
        "iat": int(time.time()),
        "nbf": int(time.time()),
        "exp": int(time.time()) + 86400,
        "custom": {},
        "ver": "1.0",
    }


@pytest.fixture
def sign_token(rsa_key: RSAKey) -> SignToken:
    """
    Returns a helper that builds a compact token from raw claims, signed with RS256.
    Bypasses the issuer so tests can craft arbitrary (also invalid) claims.
    """

    def _sign(claims: dict[str, Any], key: RSAKey | None = None, header: dict[str, Any] | None = None) -> str:
        signing_key = key or rsa_key
        header_segment = b64url_encode(json.dumps(header or {"alg": "RS256", "typ": "JWT"}).encode("utf-8"))
        claims_segment = b64url_encode(json.dumps(claims).encode("utf-8"))
        data = f"{header_segment}.{claims_segment}".encode("ascii")
        signature = signing_key.get_private_key().sign(data, padding.PKCS1v15(), hashes.SHA256())
        return f"{header_segment}.{claims_segment}.{b64url_encode(signature)}"

    return _sign
