"""
Shared access signature construction and parsing.

A token has the form:

    SharedAccessSignature sr=<resource>&sig=<signature>&se=<expiry>[&skn=<key name>]

where the signature is base64(HMAC-SHA256(base64decode(key), resource + "\\n" + expiry)),
URI-component encoded.
"""

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

from core.errors import SigningError, ValidationError

SAS_PREFIX = "SharedAccessSignature"
REQUIRED_FIELDS = ("sr", "sig", "se")


def encode_uri_component_strict(value: str) -> str:
    """
    Percent-encode everything except unreserved characters.

    Only A-Z a-z 0-9 - _ . ~ are left as-is, so !'()* are encoded too.

    Args:
        value: String to encode (UTF-8)

    Returns:
        Encoded string
    """
    return quote(value, safe="")


def _hmac_hash(key: str, string_to_sign: str) -> str:
    try:
        decoded_key = base64.b64decode(key)
    except (binascii.Error, ValueError) as e:
        raise SigningError("Shared access key is not valid base64", cause=e) from e

    digest = hmac.new(
        decoded_key, string_to_sign.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


@dataclass(frozen=True)
class SharedAccessSignature:
    """Parsed or freshly created shared access signature."""

    sr: str
    sig: str
    se: int
    skn: Optional[str] = None

    @classmethod
    def create(
        cls,
        resource_uri: str,
        key_name: Optional[str],
        key: str,
        expiry: int,
    ) -> "SharedAccessSignature":
        """
        Sign a resource with a shared access key.

        Args:
            resource_uri: Already-encoded resource identifier
            key_name: Policy name, or None/empty for device-scoped keys
            key: Base64 shared access key
            expiry: Expiry time in seconds since the epoch

        Returns:
            SharedAccessSignature for the resource

        Raises:
            SigningError: If the key is missing or not valid base64
        """
        if not key:
            raise SigningError("Shared access key is required to sign a token")

        string_to_sign = f"{resource_uri}\n{expiry}"
        sig = encode_uri_component_strict(_hmac_hash(key, string_to_sign))
        skn = encode_uri_component_strict(key_name) if key_name else None
        return cls(sr=resource_uri, sig=sig, se=int(expiry), skn=skn)

    @classmethod
    def parse(cls, token: str) -> "SharedAccessSignature":
        """
        Parse a serialized shared access signature.

        Raises:
            ValidationError: If the prefix or a required field is missing
        """
        if not token or not token.startswith(SAS_PREFIX + " "):
            raise ValidationError(
                f"Token must start with '{SAS_PREFIX} '",
                context={"field": "prefix"},
            )

        fields: Dict[str, str] = {}
        for part in token[len(SAS_PREFIX) + 1 :].split("&"):
            if not part:
                continue
            name, sep, value = part.partition("=")
            if not sep:
                raise ValidationError(f"Malformed token segment: '{name}'")
            fields[name] = value

        for name in REQUIRED_FIELDS:
            if not fields.get(name):
                raise ValidationError(
                    f"Token is missing the '{name}' field", context={"field": name}
                )

        try:
            expiry = int(fields["se"])
        except ValueError as e:
            raise ValidationError("Token expiry is not an integer", cause=e) from e

        return cls(sr=fields["sr"], sig=fields["sig"], se=expiry, skn=fields.get("skn"))

    def __str__(self) -> str:
        token = f"{SAS_PREFIX} sr={self.sr}&sig={self.sig}&se={self.se}"
        if self.skn:
            token += f"&skn={self.skn}"
        return token


def sign(resource_uri: str, key_name: Optional[str], key: str, expiry: int) -> str:
    """Default signer used by the authentication provider."""
    return str(SharedAccessSignature.create(resource_uri, key_name, key, expiry))
