# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_license

import pytest
from pydantic import ValidationError

from coreason_license.models import (
    EnvironmentEntry,
    EnvironmentType,
    GuardedLicenseResult,
    LicenseClaims,
    LicenseInvalid,
    LicenseValid,
)
from coreason_license.utils.identifiers import identifiers_equal, normalize_identifier, strip_braces


class TestEnvironmentEntry:
    def test_parse_with_name(self) -> None:
        entry = EnvironmentEntry.parse("dataverse:ORG1:My Org")
        assert entry == EnvironmentEntry(type="dataverse", identifier="ORG1", name="My Org")

    def test_parse_name_may_contain_colons(self) -> None:
        assert EnvironmentEntry.parse("entra:T1:Tenant: EU").name == "Tenant: EU"

    def test_parse_without_name(self) -> None:
        assert EnvironmentEntry.parse("entra:T1").name == ""

    @pytest.mark.parametrize("value", ["", "dataverse", ":ORG1", "dataverse: "])
    def test_parse_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            EnvironmentEntry.parse(value)

    def test_known_types(self) -> None:
        assert EnvironmentType.DATAVERSE == "dataverse"
        assert EnvironmentType.ENTRA == "entra"


class TestLicenseClaims:
    def test_claims_are_immutable(self) -> None:
        claims = LicenseClaims(iss="i", aud="a")
        with pytest.raises(ValidationError):
            claims.iss = "other"  # type: ignore[misc]

    def test_expires(self) -> None:
        assert LicenseClaims().expires is False
        assert LicenseClaims(exp=0).expires is True

    def test_null_claims_fall_back_to_empty_values(self) -> None:
        claims = LicenseClaims.model_validate_json(
            '{"iss": null, "aud": null, "pub": null, "prd": null, "sub": null,'
            ' "env": null, "required_roles": null, "cus": null}'
        )
        assert (claims.iss, claims.aud, claims.pub, claims.prd, claims.sub) == ("", "", "", "", "")
        assert claims.env == []
        assert claims.required_roles == []
        assert claims.custom == {}


class TestResults:
    def test_invalid_defaults_to_non_terminal(self) -> None:
        result = LicenseInvalid(reason="nope")
        assert result.is_valid is False
        assert result.terminal is False

    def test_valid(self) -> None:
        result = LicenseValid(claims=LicenseClaims(sub="s"))
        assert result.is_valid is True

    def test_guarded_result(self) -> None:
        assert GuardedLicenseResult(result=LicenseInvalid(reason="x")).is_valid is False
        assert GuardedLicenseResult(result=LicenseValid(claims=LicenseClaims())).is_valid is True

    def test_results_serialize_with_tag(self) -> None:
        assert LicenseInvalid(reason="x", terminal=True).model_dump() == {
            "is_valid": False,
            "reason": "x",
            "terminal": True,
        }


class TestIdentifiers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("{ABC-123}", "abc-123"),
            ("abc-123", "abc-123"),
            ("  {Abc-123}  ", "abc-123"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize(self, value: str | None, expected: str) -> None:
        assert normalize_identifier(value) == expected

    def test_strip_braces_keeps_case(self) -> None:
        assert strip_braces("{ABC}") == "ABC"

    def test_equal(self) -> None:
        assert identifiers_equal("{ABC-123}", "abc-123")
        assert not identifiers_equal("abc-123", "abc-124")
