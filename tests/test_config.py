# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_license

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from coreason_license.config import CoreasonLicenseConfig


def test_defaults() -> None:
    with patch.dict(os.environ, {}, clear=True):
        config = CoreasonLicenseConfig()

    assert config.portal_base_url == "https://www.ianusguard.com"
    assert config.audience == "ianusguard"
    assert config.clock_skew_leeway == 0
    assert config.unsafe_local_dev is False


def test_issuer_for() -> None:
    config = CoreasonLicenseConfig(portal_base_url="https://licensing.example.com/")
    assert config.portal_base_url == "https://licensing.example.com"
    assert config.issuer_for("D1") == "https://licensing.example.com/api/public/products/D1"


def test_env_vars() -> None:
    env = {
        "COREASON_LICENSE_PORTAL_BASE_URL": "https://portal.example.com",
        "COREASON_LICENSE_AUDIENCE": "my-product-line",
        "COREASON_LICENSE_PII_SALT": "pepper",
        "COREASON_LICENSE_CLOCK_SKEW_LEEWAY": "60",
    }
    with patch.dict(os.environ, env, clear=True):
        config = CoreasonLicenseConfig()

    assert config.portal_base_url == "https://portal.example.com"
    assert config.audience == "my-product-line"
    assert config.pii_salt.get_secret_value() == "pepper"
    assert config.clock_skew_leeway == 60


def test_http_requires_local_dev_opt_in() -> None:
    with pytest.raises(ValidationError, match="HTTPS is required"):
        CoreasonLicenseConfig(portal_base_url="http://localhost:8080")

    config = CoreasonLicenseConfig(portal_base_url="http://localhost:8080", unsafe_local_dev=True)
    assert config.issuer_for("D1") == "http://localhost:8080/api/public/products/D1"


@pytest.mark.parametrize("url", ["www.ianusguard.com", "ftp://ianusguard.com", "https://"])
def test_invalid_portal_url(url: str) -> None:
    with pytest.raises(ValidationError, match="Invalid portal base URL"):
        CoreasonLicenseConfig(portal_base_url=url)


def test_negative_leeway_is_rejected() -> None:
    with pytest.raises(ValidationError):
        CoreasonLicenseConfig(clock_skew_leeway=-1)


def test_empty_audience_is_rejected() -> None:
    with pytest.raises(ValidationError):
        CoreasonLicenseConfig(audience="")


def test_pii_salt_is_not_leaked_in_repr() -> None:
    config = CoreasonLicenseConfig(pii_salt="super-secret")
    assert "super-secret" not in repr(config)
