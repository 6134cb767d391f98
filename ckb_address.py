"""
ckb_address.py

Encodes a lock script (code_hash, hash_type, args) into a CKB address and back.

Short format (bech32), only for the two secp256k1/blake160 system locks:
    <0x01> <code_hash_index> <args>

Full format (bech32m):
    <0x00> <code_hash:32> <hash_type:1> <args>

Deprecated full formats (bech32), decode only:
    <0x02> <code_hash:32> <args>      hash_type = data
    <0x04> <code_hash:32> <args>      hash_type = type

The human readable part is the network prefix: "ckb" (mainnet), "ckt" (testnet).
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from embit.bech32 import CHARSET, Encoding, bech32_encode, bech32_verify_checksum, convertbits

from ckb_constants import (
    CKB_HASH_LENGTH,
    COMPRESSED_PUBKEY_LENGTH,
    MAX_ADDRESS_LENGTH,
    SECP256K1_BLAKE160_MULTISIG_ALL_TYPE_HASH,
    SECP256K1_BLAKE160_SIGHASH_ALL_TYPE_HASH,
    SHORT_CODE_HASH_INDEX,
    AddressFormat,
    HashType,
    Network,
)
from ckb_errors import ChecksumMismatch, EncodingError, InvalidKeyLength, MalformedPayload, UnknownNetwork
from ckb_hash import key_hash160
from multisig_script import MultisigPolicy, build_multisig_script, multisig_lock_args

log = logging.getLogger(__name__)

CHECKSUM_LENGTH = 6
ENCODING_NAMES = {Encoding.BECH32: "bech32", Encoding.BECH32M: "bech32m"}


@dataclass(frozen=True)
class LockScript:
    code_hash: bytes
    hash_type: HashType
    args: bytes

    def __post_init__(self):
        for name in ("code_hash", "args"):
            value = getattr(self, name)
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise MalformedPayload(f"{name} must be bytes, got {type(value).__name__}")
            object.__setattr__(self, name, bytes(value))
        if len(self.code_hash) != CKB_HASH_LENGTH:
            raise MalformedPayload(f"code_hash must be {CKB_HASH_LENGTH} bytes, got {len(self.code_hash)}")
        if not isinstance(self.hash_type, HashType):
            raise MalformedPayload(f"unknown hash_type: {self.hash_type!r}")

    def to_rpc(self) -> Dict[str, str]:
        """JSON shape used by node RPC / indexer search keys."""
        return {
            "code_hash": "0x" + self.code_hash.hex(),
            "hash_type": self.hash_type.value,
            "args": "0x" + self.args.hex(),
        }

    @classmethod
    def from_rpc(cls, obj: Dict[str, Any]) -> "LockScript":
        try:
            code_hash = _from_hex(obj["code_hash"])
            args = _from_hex(obj["args"])
            hash_type = HashType(obj["hash_type"])
        except KeyError as e:
            raise MalformedPayload(f"script is missing field {e}") from None
        except ValueError as e:
            raise MalformedPayload(f"bad script field: {e}") from None
        return cls(code_hash, hash_type, args)


def _from_hex(value: str) -> bytes:
    if value.startswith("0x"):
        value = value[2:]
    return bytes.fromhex(value)


def _short_code_hash_index(lock_script: LockScript) -> Optional[int]:
    if lock_script.hash_type is not HashType.TYPE:
        return None
    for index, (code_hash, args_length) in SHORT_CODE_HASH_INDEX.items():
        if lock_script.code_hash == code_hash and len(lock_script.args) == args_length:
            return index
    return None


def encode(network: Network, lock_script: LockScript, fmt: Optional[AddressFormat] = None) -> str:
    """
    Encode `lock_script` as an address on `network`.

    With fmt=None the short format is used whenever the lock is a secp256k1/blake160
    system lock with plain 20 byte args; everything else gets the full format.
    """
    short_index = _short_code_hash_index(lock_script)
    if fmt is None:
        fmt = AddressFormat.SHORT if short_index is not None else AddressFormat.FULL

    if fmt is AddressFormat.SHORT:
        if short_index is None:
            raise EncodingError("lock script cannot be expressed in the short address format")
        payload = bytes([AddressFormat.SHORT.value, short_index]) + lock_script.args
        encoding = Encoding.BECH32
    elif fmt is AddressFormat.FULL:
        payload = (
            bytes([AddressFormat.FULL.value])
            + lock_script.code_hash
            + bytes([lock_script.hash_type.byte])
            + lock_script.args
        )
        encoding = Encoding.BECH32M
    else:
        raise EncodingError(f"encoding to the deprecated {fmt.name} format is not supported")

    address = bech32_encode(encoding, network.prefix, convertbits(payload, 8, 5))
    if len(address) > MAX_ADDRESS_LENGTH:
        raise EncodingError(f"address would be {len(address)} chars, max is {MAX_ADDRESS_LENGTH}")
    log.debug("encoded %s address, format=%s, payload=%d bytes", network.name, fmt.name, len(payload))
    return address


def decode(address: str) -> Tuple[Network, LockScript]:
    if any(ord(c) < 33 or ord(c) > 126 for c in address):
        raise MalformedPayload("address contains non-printable characters")
    if address.lower() != address:
        raise MalformedPayload("address must be lowercase")
    if len(address) > MAX_ADDRESS_LENGTH:
        raise MalformedPayload(f"address is {len(address)} chars, max is {MAX_ADDRESS_LENGTH}")

    # printable lowercase from here on: a broken structure is a corrupted character
    pos = address.rfind("1")
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(address):
        raise ChecksumMismatch("address has no separator or data part is too short")
    hrp = address[:pos]

    data = []
    for c in address[pos + 1:]:
        value = CHARSET.find(c)
        if value == -1:
            raise ChecksumMismatch(f"invalid character {c!r} in address data")
        data.append(value)

    encoding = bech32_verify_checksum(hrp, data)
    if encoding is None:
        raise ChecksumMismatch("address checksum does not match")

    try:
        network = Network.from_prefix(hrp)
    except KeyError:
        raise UnknownNetwork(f"unknown address prefix {hrp!r}") from None

    decoded = convertbits(data[:-CHECKSUM_LENGTH], 5, 8, False)
    if not decoded:
        raise MalformedPayload("address data has invalid padding or is empty")
    payload = bytes(decoded)

    try:
        fmt = AddressFormat(payload[0])
    except ValueError:
        raise MalformedPayload(f"unknown address format {payload[0]:#04x}") from None

    expected_encoding = Encoding.BECH32M if fmt is AddressFormat.FULL else Encoding.BECH32
    if encoding != expected_encoding:
        raise ChecksumMismatch(f"{fmt.name} address must use {ENCODING_NAMES[expected_encoding]} checksum")

    return network, _parse_payload(fmt, payload)


def _parse_payload(fmt: AddressFormat, payload: bytes) -> LockScript:
    if fmt is AddressFormat.SHORT:
        if len(payload) < 2:
            raise MalformedPayload("short address payload is missing the code hash index")
        index = payload[1]
        if index not in SHORT_CODE_HASH_INDEX:
            raise MalformedPayload(f"unknown short format code hash index {index:#04x}")
        code_hash, args_length = SHORT_CODE_HASH_INDEX[index]
        args = payload[2:]
        if len(args) != args_length:
            raise MalformedPayload(f"short address args must be {args_length} bytes, got {len(args)}")
        return LockScript(code_hash, HashType.TYPE, args)

    if fmt is AddressFormat.FULL:
        if len(payload) < 2 + CKB_HASH_LENGTH:
            raise MalformedPayload("full address payload is too short")
        code_hash = payload[1:1 + CKB_HASH_LENGTH]
        try:
            hash_type = HashType.from_byte(payload[1 + CKB_HASH_LENGTH])
        except KeyError:
            raise MalformedPayload(f"unknown hash type byte {payload[1 + CKB_HASH_LENGTH]:#04x}") from None
        return LockScript(code_hash, hash_type, payload[2 + CKB_HASH_LENGTH:])

    # FULL_DATA / FULL_TYPE
    if len(payload) < 1 + CKB_HASH_LENGTH:
        raise MalformedPayload("full address payload is too short")
    hash_type = HashType.DATA if fmt is AddressFormat.FULL_DATA else HashType.TYPE
    return LockScript(payload[1:1 + CKB_HASH_LENGTH], hash_type, payload[1 + CKB_HASH_LENGTH:])


def multisig_lock_script(
    script: Union[bytes, MultisigPolicy], since: Optional[int] = None
) -> LockScript:
    if isinstance(script, MultisigPolicy):
        script = script.serialize()
    return LockScript(
        SECP256K1_BLAKE160_MULTISIG_ALL_TYPE_HASH,
        HashType.TYPE,
        multisig_lock_args(script, since),
    )


def generate_multisig_address(
    network: Network,
    require_first_n: int,
    threshold: int,
    public_keys: Sequence[bytes],
    since: Optional[int] = None,
    fmt: Optional[AddressFormat] = None,
) -> str:
    script = build_multisig_script(require_first_n, threshold, public_keys)
    return encode(network, multisig_lock_script(script, since), fmt)


def sighash_lock_script(public_key: bytes) -> LockScript:
    if len(public_key) != COMPRESSED_PUBKEY_LENGTH:
        raise InvalidKeyLength(f"public key is {len(public_key)} bytes, expected {COMPRESSED_PUBKEY_LENGTH}")
    args = key_hash160(public_key)
    return LockScript(SECP256K1_BLAKE160_SIGHASH_ALL_TYPE_HASH, HashType.TYPE, args)


def generate_sighash_address(network: Network, public_key: bytes, fmt: Optional[AddressFormat] = None) -> str:
    return encode(network, sighash_lock_script(public_key), fmt)
