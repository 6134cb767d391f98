"""
create_ckb_multisig.py

Creates a CKB address that locks funds with an M-of-N secp256k1/blake160 multisig lock.

Multisig script (2-of-3, no mandatory signers):
    00 00 02 03 <blake160(pub1)> <blake160(pub2)> <blake160(pub3)>

Lock script on chain:
    code_hash = secp256k1/blake160 multisig type hash
    hash_type = type
    args      = blake160(multisig script) [+ since, u64 little-endian]

Notes:
- This script expects *compressed* public keys (33 bytes) in hex form:
  starts with 02 or 03 and length is 66 hex chars.
- --priv derives a cosigner's compressed pubkey from a raw 32 byte private key.
  Keys from --priv come first, then --pub keys, each in the order given.
- The order of pubkeys matters because it changes the multisig script,
  which changes the address. You MUST use the same order when spending.
"""
import argparse
import json
import logging
import re
from typing import List

from ecdsa import SECP256k1, MalformedPointError, SigningKey

from ckb_address import encode, multisig_lock_script
from ckb_constants import AddressFormat, Network
from ckb_errors import AddressError
from multisig_script import build_multisig_script, witness_placeholder

# Compressed pubkey: 33 bytes => 66 hex chars, prefix 02/03
HEX_PUB_RE = re.compile(r"^(02|03)[0-9a-fA-F]{64}$")
HEX_PRIV_RE = re.compile(r"^[0-9a-fA-F]{64}$")

NETWORKS = {"mainnet": Network.MAINNET, "testnet": Network.TESTNET}

log = logging.getLogger("create_ckb_multisig")


def compress_pubkey_from_priv(privkey32: bytes) -> bytes:
    sk = SigningKey.from_string(privkey32, curve=SECP256k1)
    return sk.get_verifying_key().to_string("compressed")


def collect_pubkeys(privs: List[str], pubs: List[str]) -> List[bytes]:
    keys = []
    for i, p in enumerate(privs, start=1):
        p = p.strip().lower()
        if not HEX_PRIV_RE.match(p):
            raise SystemExit(f"ERROR: priv{i} is not a 32 byte hex private key.")
        try:
            keys.append(compress_pubkey_from_priv(bytes.fromhex(p)))
        except MalformedPointError as e:
            raise SystemExit(f"ERROR: priv{i} is not a valid secp256k1 private key: {e}") from None

    for i, p in enumerate(pubs, start=1):
        # Normalize to lowercase/no spaces
        p = p.strip().lower()
        if not HEX_PUB_RE.match(p):
            raise SystemExit(
                f"ERROR: pub{i} is not a compressed pubkey.\n"
                f"Got: {p}\n"
                "Expected: 66 hex chars starting with 02 or 03."
            )
        keys.append(bytes.fromhex(p))
    return keys


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Create a CKB mainnet/testnet address for an M-of-N multisig lock."
    )
    ap.add_argument("--pub", action="append", default=[], help="Compressed pubkey hex (02/03...), repeatable")
    ap.add_argument("--priv", action="append", default=[], help="32 byte private key hex, repeatable")
    ap.add_argument("--threshold", type=int, required=True, help="Signatures required (M)")
    ap.add_argument("--require-first-n", type=int, default=0, help="First N keys must sign")
    ap.add_argument("--since", type=int, default=None, help="Optional since value appended to lock args")
    ap.add_argument("--network", choices=sorted(NETWORKS), default="testnet")
    ap.add_argument("--full", action="store_true", help="Always use the full address format")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pubkeys = collect_pubkeys(args.priv, args.pub)
    if not pubkeys:
        raise SystemExit("ERROR: at least one --pub or --priv is required.")
    network = NETWORKS[args.network]
    log.info("building %d-of-%d multisig on %s", args.threshold, len(pubkeys), network.name.lower())

    try:
        script = build_multisig_script(args.require_first_n, args.threshold, pubkeys)
        lock = multisig_lock_script(script, args.since)
        address = encode(network, lock, AddressFormat.FULL if args.full else None)
    except AddressError as e:
        raise SystemExit(f"ERROR: {e}") from None

    print("Multisig script hex:", script.hex())
    print("Witness placeholder bytes:", len(witness_placeholder(script)))
    print("Lock args:", lock.args.hex())
    print("Lock script:", json.dumps(lock.to_rpc()))
    print("Address:", address)
    print("IMPORTANT: Keep pubkey order the same when spending!")


if __name__ == "__main__":
    main()
