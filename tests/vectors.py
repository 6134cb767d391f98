PUBKEYS_HEX = [
    "032edb83018b57ddeb9bcc7287c5cc5da57e6e0289d31c9e98cb361e88678d6288",
    "033aeb3fdbfaac72e9e34c55884a401ee87115302c146dd9e314677d826375dc8f",
    "029a685b8206550ea1b600e347f18fd6115bffe582089d3567bec7eba57d04df01",
]
PUBKEYS = [bytes.fromhex(p) for p in PUBKEYS_HEX]
TESTNET_2_OF_3_ADDRESS = "ckt1qyqlqn8vsj7r0a5rvya76tey9jd2rdnca8lqh4kcuq"

SIGHASH_PUBKEY = bytes.fromhex("024a501efd328e062c8675f2365970728c859c592beeefd6be8ead3d901330bc01")
SIGHASH_MAINNET_ADDRESS = "ckb1qyqrdsefa43s6m882pcj53m4gdnj4k440axqdt9rtd"
SIGHASH_TESTNET_ADDRESS = "ckt1qyqrdsefa43s6m882pcj53m4gdnj4k440axqswmu83"
