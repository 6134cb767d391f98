"""Errors raised while building multisig scripts and encoding/decoding addresses."""


class AddressError(ValueError):
    pass


class InvalidPolicy(AddressError):
    """threshold / require_first_n / key count out of range."""


class InvalidKeyLength(AddressError):
    """Public key is not a 33 byte compressed point."""


class EncodingError(AddressError):
    pass


class ChecksumMismatch(AddressError):
    pass


class UnknownNetwork(AddressError):
    pass


class MalformedPayload(AddressError):
    pass
