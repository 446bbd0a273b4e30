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
Token codec for the compact `header.claims.signature` license layout.

The signature always covers the segments exactly as they appear in the token.
Claims are never re-serialized for verification.
"""

import base64
import binascii
from typing import NamedTuple, TypeVar

from pydantic import BaseModel, ValidationError

from coreason_license.exceptions import InvalidClaimsEncodingError, MalformedTokenError
from coreason_license.models import LicenseClaims, TokenHeader

SEGMENT_SEPARATOR = "."

ModelT = TypeVar("ModelT", bound=BaseModel)


class TokenSegments(NamedTuple):
    """The three base64url segments of a compact license token."""

    header: str
    claims: str
    signature: str


def split_token(token: str) -> TokenSegments:
    """
    Splits a compact token into its segments.

    Segments beyond the third are ignored.

    Args:
        token: The compact license token.

    Returns:
        TokenSegments: header, claims and signature segments.

    Raises:
        MalformedTokenError: If the token has fewer than three segments.
    """
    parts = token.split(SEGMENT_SEPARATOR)
    if len(parts) < 3:
        raise MalformedTokenError(f"Expected 3 token segments, got {len(parts)}")
    return TokenSegments(parts[0], parts[1], parts[2])


def b64url_encode(data: bytes) -> str:
    """Encodes bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    """
    Decodes unpadded base64url text.

    Padding is synthesized from the length: remainder 2 needs "==", remainder 3 needs "=".
    A remainder of 1 can never be produced by an encoder and is rejected.

    Args:
        segment: The base64url text.

    Returns:
        bytes: The decoded data.

    Raises:
        MalformedTokenError: If the text is not valid base64url.
    """
    remainder = len(segment) % 4
    if remainder == 1:
        raise MalformedTokenError("Invalid base64url length")

    padded = segment + "=" * ((4 - remainder) % 4)
    try:
        standard = padded.encode("ascii").translate(bytes.maketrans(b"-_", b"+/"))
        return base64.b64decode(standard, validate=True)
    except (UnicodeEncodeError, binascii.Error) as e:
        raise MalformedTokenError(f"Invalid base64url segment: {e}") from e


def _decode_model(segment: str, model: type[ModelT]) -> ModelT:
    try:
        raw = b64url_decode(segment)
    except MalformedTokenError as e:
        raise InvalidClaimsEncodingError(f"Cannot decode {model.__name__}: {e}") from e

    try:
        return model.model_validate_json(raw)
    except (ValidationError, UnicodeDecodeError) as e:
        raise InvalidClaimsEncodingError(f"Cannot parse {model.__name__}: {e}") from e


def decode_claims(segment: str) -> LicenseClaims:
    """
    Decodes the claims segment.

    Args:
        segment: The base64url claims segment.

    Returns:
        LicenseClaims: The parsed claims. Unknown fields are dropped, missing optional fields defaulted.

    Raises:
        InvalidClaimsEncodingError: If the segment is not base64url-encoded JSON of the claims structure.
    """
    return _decode_model(segment, LicenseClaims)


def decode_header(segment: str) -> TokenHeader:
    """
    Decodes the header segment.

    Raises:
        InvalidClaimsEncodingError: If the segment is not base64url-encoded JSON of a header.
    """
    return _decode_model(segment, TokenHeader)


def encode_claims(claims: LicenseClaims) -> str:
    """
    Encodes claims as a compact JSON base64url segment.

    None-valued fields are omitted, so a license without expiry carries no `exp` claim at all.
    """
    return b64url_encode(claims.model_dump_json(exclude_none=True).encode("utf-8"))


def encode_header(header: TokenHeader) -> str:
    """Encodes a header as a compact JSON base64url segment."""
    return b64url_encode(header.model_dump_json(exclude_none=True).encode("utf-8"))


def signing_input(header_segment: str, claims_segment: str) -> bytes:
    """
    Returns the exact bytes covered by the signature: `header + "." + claims`.
    """
    return f"{header_segment}{SEGMENT_SEPARATOR}{claims_segment}".encode("utf-8")
