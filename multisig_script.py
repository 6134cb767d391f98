"""
multisig_script.py

Builds the secp256k1/blake160 multisig script for an M-of-N policy.

Layout:
    <0x00> <require_first_n> <threshold> <N> <blake160(pub1)> ... <blake160(pubN)>

    reserved          1 byte, always 0x00
    require_first_n   1 byte, the first R keys must all sign
    threshold         1 byte, M signatures needed in total
    N                 1 byte, number of key hashes that follow
    key hashes        N * 20 bytes

Notes:
- Keys must be *compressed* (33 bytes). Curve membership is not checked.
- The order of pubkeys matters because it changes the script bytes, which
  changes the lock args and therefore the address. Signers MUST use the same
  order when unlocking.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ckb_constants import (
    BLAKE160_LENGTH,
    COMPRESSED_PUBKEY_LENGTH,
    MAX_MULTISIG_KEYS,
    MULTISIG_HEADER_LENGTH,
    MULTISIG_RESERVED_BYTE,
    SIGNATURE_LENGTH,
    SINCE_LENGTH,
)
from ckb_errors import InvalidKeyLength, InvalidPolicy, MalformedPayload
from ckb_hash import key_hash160, script_hash

log = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_policy(require_first_n: int, threshold: int, key_count: int) -> None:
    if not _is_int(threshold):
        raise InvalidPolicy(f"threshold must be an integer, got {threshold!r}")
    if not _is_int(require_first_n):
        raise InvalidPolicy(f"require_first_n must be an integer, got {require_first_n!r}")
    if key_count > MAX_MULTISIG_KEYS:
        raise InvalidPolicy(f"at most {MAX_MULTISIG_KEYS} keys allowed, got {key_count}")
    if threshold <= 0:
        raise InvalidPolicy("threshold must be at least 1")
    if threshold > key_count:
        raise InvalidPolicy(f"threshold {threshold} exceeds key count {key_count}")
    if require_first_n < 0:
        raise InvalidPolicy("require_first_n must not be negative")
    if require_first_n > threshold:
        raise InvalidPolicy(f"require_first_n {require_first_n} exceeds threshold {threshold}")


@dataclass(frozen=True)
class MultisigPolicy:
    require_first_n: int
    threshold: int
    pubkey_hashes: Tuple[bytes, ...]

    def __post_init__(self):
        check_policy(self.require_first_n, self.threshold, len(self.pubkey_hashes))
        for i, h in enumerate(self.pubkey_hashes):
            if len(h) != BLAKE160_LENGTH:
                raise InvalidPolicy(f"pubkey hash {i} is {len(h)} bytes, expected {BLAKE160_LENGTH}")

    @classmethod
    def from_public_keys(cls, require_first_n: int, threshold: int, public_keys: Sequence[bytes]) -> "MultisigPolicy":
        # policy errors take precedence over key errors
        check_policy(require_first_n, threshold, len(public_keys))
        for i, pk in enumerate(public_keys):
            if len(pk) != COMPRESSED_PUBKEY_LENGTH:
                raise InvalidKeyLength(
                    f"public key {i} is {len(pk)} bytes, expected {COMPRESSED_PUBKEY_LENGTH} (compressed)"
                )
        hashes = tuple(key_hash160(bytes(pk)) for pk in public_keys)
        return cls(require_first_n, threshold, hashes)

    def serialize(self) -> bytes:
        out = bytearray()
        out.append(MULTISIG_RESERVED_BYTE)
        out.append(self.require_first_n)
        out.append(self.threshold)
        out.append(len(self.pubkey_hashes))
        for h in self.pubkey_hashes:
            out.extend(h)
        return bytes(out)

    def script_hash(self) -> bytes:
        return script_hash(self.serialize())

    def lock_args(self, since: Optional[int] = None) -> bytes:
        return multisig_lock_args(self.serialize(), since)


def build_multisig_script(require_first_n: int, threshold: int, public_keys: Sequence[bytes]) -> bytes:
    policy = MultisigPolicy.from_public_keys(require_first_n, threshold, public_keys)
    script = policy.serialize()
    log.debug(
        "multisig script: require_first_n=%d threshold=%d keys=%d len=%d",
        require_first_n, threshold, len(public_keys), len(script),
    )
    return script


def parse_multisig_script(data: bytes) -> MultisigPolicy:
    data = bytes(data)
    if len(data) < MULTISIG_HEADER_LENGTH:
        raise MalformedPayload(f"multisig script too short: {len(data)} bytes")
    reserved, require_first_n, threshold, key_count = data[:MULTISIG_HEADER_LENGTH]
    if reserved != MULTISIG_RESERVED_BYTE:
        raise MalformedPayload(f"reserved byte must be 0x00, got {reserved:#04x}")
    expected = MULTISIG_HEADER_LENGTH + key_count * BLAKE160_LENGTH
    if len(data) != expected:
        raise MalformedPayload(f"multisig script is {len(data)} bytes, header says {expected}")

    body = data[MULTISIG_HEADER_LENGTH:]
    hashes = tuple(body[i:i + BLAKE160_LENGTH] for i in range(0, len(body), BLAKE160_LENGTH))
    try:
        return MultisigPolicy(require_first_n, threshold, hashes)
    except InvalidPolicy as e:
        raise MalformedPayload(f"multisig script header: {e}") from None


def multisig_lock_args(serialized_script: bytes, since: Optional[int] = None) -> bytes:
    """
    Lock args for the multisig lock:

        blake160(multisig_script)            20 bytes
        blake160(multisig_script) | since    28 bytes, since is u64 little-endian

    A since value time-locks every cell guarded by the lock.
    """
    args = script_hash(serialized_script)
    if since is None:
        return args
    if not _is_int(since) or not 0 <= since < 1 << (8 * SINCE_LENGTH):
        raise InvalidPolicy(f"since must fit in u64, got {since}")
    return args + since.to_bytes(SINCE_LENGTH, "little")


def witness_placeholder(serialized_script: bytes) -> bytes:
    # multisig script followed by `threshold` zeroed 65 byte signatures
    threshold = parse_multisig_script(serialized_script).threshold
    return serialized_script + bytes(SIGNATURE_LENGTH * threshold)
