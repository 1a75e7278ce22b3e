"""
leagues/identity.py - Caller identity from signed requests.

The HTTP boundary needs to know who is calling before it can ask a league
whether that caller is the owner or a trusted account. Callers sign an
EIP-712 CallerRequest with their Ethereum key; the recovered address is the
caller identity.

A CallerRequest binds the whole request: method, path, raw query string,
SHA-256 of the raw body, a unix timestamp and a random 32-byte nonce. A
signature therefore cannot be moved to another body or query, and
ReplayGuard rejects it once it is stale or has been used before.

Uses eth-account (no RPC connection needed for signing or recovery).
"""

import hashlib
import logging
import secrets
import time
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from .errors import (
    InvalidSignatureError,
    ReplayedSignatureError,
    StaleSignatureError,
)

logger = logging.getLogger(__name__)


# EIP-712 type definitions for a signed request
REQUEST_TYPES = {
    "CallerRequest": [
        {"name": "method", "type": "string"},
        {"name": "path", "type": "string"},
        {"name": "query", "type": "string"},
        {"name": "bodyHash", "type": "bytes32"},
        {"name": "timestamp", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ],
}

DOMAIN_DATA = {"name": "Leagues", "version": "1"}

SIGNATURE_HEADER = "X-Caller-Signature"
TIMESTAMP_HEADER = "X-Caller-Timestamp"
NONCE_HEADER = "X-Caller-Nonce"

# Seconds a signature stays valid on either side of the server clock
MAX_SIGNATURE_AGE = 300


# ============================================================================
# Accounts
# ============================================================================


def generate_account() -> tuple[str, str]:
    """Generate a new caller account.

    Returns:
        (address, private_key_hex). The private key includes the 0x prefix.
    """
    account = Account.create()
    key_hex = account.key.hex()
    if not key_hex.startswith("0x"):
        key_hex = "0x" + key_hex
    return (account.address, key_hex)


def load_account(private_key: str):
    """LocalAccount for a hex private key (0x prefix optional)."""
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return Account.from_key(private_key)


# ============================================================================
# Signing / Recovery
# ============================================================================


def caller_request(
    method: str,
    path: str,
    query: str = "",
    body: bytes = b"",
    timestamp: int = 0,
    nonce: bytes = b"\x00" * 32,
) -> dict[str, Any]:
    """The CallerRequest struct a caller signs for one HTTP request."""
    return {
        "method": method.upper(),
        "path": path,
        "query": query,
        "bodyHash": hashlib.sha256(body).digest(),
        "timestamp": timestamp,
        "nonce": nonce,
    }


def _signable(request: dict[str, Any]):
    return encode_typed_data(
        domain_data=DOMAIN_DATA,
        message_types=REQUEST_TYPES,
        message_data=request,
    )


def sign_request(account, request: dict[str, Any]) -> str:
    """Sign a CallerRequest. Returns the 65-byte signature as 0x-prefixed hex."""
    signature = account.sign_message(_signable(request)).signature.hex()
    if not signature.startswith("0x"):
        signature = "0x" + signature
    return signature


def recover_caller(request: dict[str, Any], signature: str) -> str:
    """Checksummed address that signed the CallerRequest.

    A signature made over different request content recovers a different
    address; it is the authorization checks that turn that away.

    Raises:
        InvalidSignatureError: signature is malformed or unrecoverable
    """
    try:
        return Account.recover_message(_signable(request), signature=signature)
    except Exception as e:
        logger.debug(f"Signature recovery failed for {request['method']} {request['path']}: {e}")
        raise InvalidSignatureError() from e


def new_nonce() -> bytes:
    return secrets.token_bytes(32)


def parse_nonce(value: str) -> bytes:
    """32-byte nonce from its hex header form (0x prefix optional).

    Raises:
        InvalidSignatureError: not 32 bytes of hex
    """
    try:
        nonce = bytes.fromhex(value.removeprefix("0x"))
    except ValueError as e:
        raise InvalidSignatureError("Request nonce is not hex") from e
    if len(nonce) != 32:
        raise InvalidSignatureError("Request nonce must be 32 bytes")
    return nonce


def caller_headers(
    account,
    method: str,
    path: str,
    query: str = "",
    body: bytes = b"",
    timestamp: int | None = None,
    nonce: bytes | None = None,
) -> dict[str, str]:
    """Headers that identify account as the caller of one request."""
    if timestamp is None:
        timestamp = int(time.time())
    if nonce is None:
        nonce = new_nonce()
    request = caller_request(method, path, query, body, timestamp, nonce)
    return {
        SIGNATURE_HEADER: sign_request(account, request),
        TIMESTAMP_HEADER: str(timestamp),
        NONCE_HEADER: "0x" + nonce.hex(),
    }


# ============================================================================
# Replay protection
# ============================================================================


class ReplayGuard:
    """Accepts each (caller, nonce) once, and only while its timestamp is fresh.

    Entries are forgotten once their timestamp is too old to pass the
    freshness check anyway, so memory stays bounded by the request rate.
    """

    def __init__(self, max_age: int = MAX_SIGNATURE_AGE):
        self.max_age = max_age
        self._seen: dict[tuple[str, bytes], int] = {}

    def __len__(self) -> int:
        return len(self._seen)

    def check(self, caller: str, timestamp: int, nonce: bytes, now: int | None = None) -> None:
        """Record a signed request.

        Raises:
            StaleSignatureError: timestamp is further than max_age from now
            ReplayedSignatureError: caller already used this nonce
        """
        if now is None:
            now = int(time.time())
        if abs(now - timestamp) > self.max_age:
            raise StaleSignatureError()

        self._prune(now)
        key = (caller, nonce)
        if key in self._seen:
            raise ReplayedSignatureError()
        self._seen[key] = timestamp + self.max_age

    def _prune(self, now: int) -> None:
        expired = [key for key, expires in self._seen.items() if expires < now]
        for key in expired:
            del self._seen[key]
