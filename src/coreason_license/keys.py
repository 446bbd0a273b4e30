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
RSA key import and RS256 signature primitives.
"""

import textwrap
from functools import lru_cache

from authlib.jose import JsonWebKey, RSAKey
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from coreason_license.exceptions import KeyImportError

PEM_PUBLIC_HEADER = "-----BEGIN PUBLIC KEY-----"
PEM_PUBLIC_FOOTER = "-----END PUBLIC KEY-----"


def _armor(pem: str) -> str:
    # Some hosts ship only the base64 SubjectPublicKeyInfo body
    body = "".join(pem.split())
    return f"{PEM_PUBLIC_HEADER}\n" + "\n".join(textwrap.wrap(body, 64)) + f"\n{PEM_PUBLIC_FOOTER}\n"


def _import_rsa_key(pem: str) -> RSAKey:
    try:
        key = JsonWebKey.import_key(pem, {"kty": "RSA"})
    except Exception as e:
        raise KeyImportError(f"Cannot import RSA key: {e}") from e
    if not isinstance(key, RSAKey):
        raise KeyImportError(f"Expected an RSA key, got {type(key).__name__}")
    return key


@lru_cache(maxsize=32)
def import_public_key(pem: str) -> rsa.RSAPublicKey:
    """
    Imports a PEM-encoded RSA public key.

    Imported keys are cached by their PEM text. The cache only saves the parsing work:
    every signature is still verified against the key on each call.

    Args:
        pem: PEM text, or the bare base64 body of a SubjectPublicKeyInfo.

    Returns:
        rsa.RSAPublicKey: The imported key.

    Raises:
        KeyImportError: If the text is not an RSA public key.
    """
    text = pem.strip()
    if not text:
        raise KeyImportError("Empty public key")
    if "-----BEGIN" not in text:
        text = _armor(text)

    public_key = _import_rsa_key(text).get_public_key()
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyImportError("Key is not an RSA public key")
    return public_key


def import_private_key(pem: str) -> RSAKey:
    """
    Imports a PEM-encoded RSA private key for signing.

    Raises:
        KeyImportError: If the text is not an RSA private key.
    """
    key = _import_rsa_key(pem.strip())
    if key.get_private_key() is None:
        raise KeyImportError("Key has no private part")
    return key


def verify_rs256(public_key: rsa.RSAPublicKey, data: bytes, signature: bytes) -> bool:
    """
    Verifies an RSASSA-PKCS1-v1_5 / SHA-256 signature.

    Returns:
        bool: True if the signature is valid for the data under the key.
    """
    try:
        public_key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True
