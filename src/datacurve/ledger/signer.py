"""Ed25519 transaction signing for Sui.

Sui signs the blake2b-256 digest of the intent-prefixed transaction bytes
and transmits the signature as base64(flag || signature || public_key).
"""

import base64
import hashlib

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from datacurve.exceptions import ConfigurationMissing

ED25519_FLAG = 0x00

#: Intent scope TransactionData, version V0, app id Sui.
_TRANSACTION_INTENT = bytes([0, 0, 0])


class SuiSigner:
    """Holds one Ed25519 keypair and derives the matching Sui address."""

    def __init__(self, seed: bytes) -> None:
        if len(seed) != 32:
            raise ConfigurationMissing("Ed25519 private key must be 32 bytes")
        self._private_key = Ed25519PrivateKey.from_private_bytes(seed)
        self._public_key = self._private_key.public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )

    @classmethod
    def from_encoded(cls, encoded: str) -> "SuiSigner":
        """Build a signer from a keystore entry or a hex seed.

        Accepted forms:
        - base64 of 33 bytes, flag byte then seed (sui.keystore entries)
        - 0x-prefixed hex of the 32 byte seed
        """
        encoded = encoded.strip()
        if not encoded:
            raise ConfigurationMissing("SUI_PRIVATE_KEY is not set")

        if encoded.startswith("0x"):
            try:
                return cls(bytes.fromhex(encoded[2:]))
            except ValueError as e:
                raise ConfigurationMissing(f"Invalid hex private key: {e}") from e

        try:
            raw = base64.b64decode(encoded, validate=True)
        except ValueError as e:
            raise ConfigurationMissing(f"Invalid base64 private key: {e}") from e

        if len(raw) != 33 or raw[0] != ED25519_FLAG:
            raise ConfigurationMissing(
                "Private key must be an Ed25519 keystore entry (flag 0x00 + 32 bytes)"
            )
        return cls(raw[1:])

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def address(self) -> str:
        digest = hashlib.blake2b(
            bytes([ED25519_FLAG]) + self._public_key, digest_size=32
        ).hexdigest()
        return f"0x{digest}"

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """Return the serialized signature for raw transaction bytes."""
        digest = hashlib.blake2b(_TRANSACTION_INTENT + tx_bytes, digest_size=32).digest()
        signature = self._private_key.sign(digest)
        return base64.b64encode(
            bytes([ED25519_FLAG]) + signature + self._public_key
        ).decode("ascii")
