"""
ckb_constants.py

Protocol constants for CKB lock scripts and addresses.

System lock scripts are referenced by the type hash of the cell holding their code:
    secp256k1/blake160 sighash-all   -> single key lock
    secp256k1/blake160 multisig-all  -> M-of-N multisig lock

Both are deployed in the genesis block, so the hashes are identical on mainnet
and testnet.
"""
from enum import Enum

# blake2b-256 personalization used for every hash in the protocol
CKB_HASH_PERSONALIZATION = b"ckb-default-hash"
CKB_HASH_LENGTH = 32
BLAKE160_LENGTH = 20

SECP256K1_BLAKE160_SIGHASH_ALL_TYPE_HASH = bytes.fromhex(
    "9bd7e06f3ecf4be0f2fcd2188b23f1b9fcc88e5d4b65a8637b17723bbda3cce8"
)
SECP256K1_BLAKE160_MULTISIG_ALL_TYPE_HASH = bytes.fromhex(
    "5c5069eb0857efc65e1bca0c07df34c31663b3622fd3876c876320fc9634e2a8"
)

COMPRESSED_PUBKEY_LENGTH = 33
MAX_MULTISIG_KEYS = 255
MULTISIG_RESERVED_BYTE = 0x00
MULTISIG_HEADER_LENGTH = 4
# recoverable secp256k1 signature: r(32) + s(32) + recovery id(1)
SIGNATURE_LENGTH = 65
SINCE_LENGTH = 8

# CKB raises the BIP173 90 char limit so full format addresses fit
MAX_ADDRESS_LENGTH = 1023


class Network(Enum):
    MAINNET = "ckb"
    TESTNET = "ckt"

    @property
    def prefix(self) -> str:
        return self.value

    @classmethod
    def from_prefix(cls, prefix: str) -> "Network":
        for network in cls:
            if network.value == prefix:
                return network
        raise KeyError(prefix)


class HashType(Enum):
    """How a script's code_hash is matched against cell deps."""

    DATA = "data"
    TYPE = "type"
    DATA1 = "data1"

    @property
    def byte(self) -> int:
        return _HASH_TYPE_BYTES[self]

    @classmethod
    def from_byte(cls, value: int) -> "HashType":
        for hash_type, b in _HASH_TYPE_BYTES.items():
            if b == value:
                return hash_type
        raise KeyError(value)


_HASH_TYPE_BYTES = {
    HashType.DATA: 0x00,
    HashType.TYPE: 0x01,
    HashType.DATA1: 0x02,
}


class AddressFormat(Enum):
    FULL = 0x00
    SHORT = 0x01
    # deprecated full formats, decode only
    FULL_DATA = 0x02
    FULL_TYPE = 0x04


# short format: index byte -> (code hash, required args length)
SHORT_CODE_HASH_INDEX = {
    0x00: (SECP256K1_BLAKE160_SIGHASH_ALL_TYPE_HASH, BLAKE160_LENGTH),
    0x01: (SECP256K1_BLAKE160_MULTISIG_ALL_TYPE_HASH, BLAKE160_LENGTH),
}
