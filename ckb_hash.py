"""
ckb_hash.py

CKB hashing: blake2b-256 personalized with "ckb-default-hash".

blake160(x) = first 20 bytes of ckb_hash(x). It is used both for a public key
(the identifying hash stored in lock args) and for a serialized multisig script.
"""
import hashlib

from ckb_constants import BLAKE160_LENGTH, CKB_HASH_LENGTH, CKB_HASH_PERSONALIZATION


def blake2b_256(data: bytes) -> bytes:
    h = hashlib.blake2b(digest_size=CKB_HASH_LENGTH, person=CKB_HASH_PERSONALIZATION)
    h.update(data)
    return h.digest()


def blake160(data: bytes) -> bytes:
    return blake2b_256(data)[:BLAKE160_LENGTH]


def key_hash160(public_key: bytes) -> bytes:
    return blake160(public_key)


def script_hash(serialized_script: bytes) -> bytes:
    return blake160(serialized_script)
