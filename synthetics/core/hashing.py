"""
Deterministic storage key derivation.

Keys are keccak256 digests of the ABI encoding of a typed tuple, exactly as
the settlement layer computes them with ``keccak256(abi.encode(...))``. A
mismatch in any type tag, width or byte order silently addresses a different
slot, so the encoding is delegated to eth_abi and pinned by reference vectors
in the tests.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Sequence, Tuple

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_utils import decode_hex, is_address, keccak, to_checksum_address

from synthetics.core.errors import EncodingError

TypedArg = Tuple[str, Any]


def _normalize(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        if not isinstance(value, str) or not is_address(value.lower()):
            raise EncodingError(f"invalid address argument: {value!r}")
        return to_checksum_address(value)
    if abi_type == "address[]":
        return [_normalize("address", v) for v in value]
    if abi_type[5:].isdigit() and abi_type.startswith("bytes") and isinstance(value, (str, bytes)):
        raw = value
        if isinstance(value, str):
            try:
                raw = decode_hex(value)
            except (ValueError, TypeError) as exc:
                raise EncodingError(f"invalid {abi_type} argument: {value!r}") from exc
        # eth_abi right-pads short values, which would silently name another slot
        if len(raw) != int(abi_type[5:]):
            raise EncodingError(f"{abi_type} argument must be {abi_type[5:]} bytes, got {len(raw)}: {value!r}")
        return raw
    if abi_type.startswith(("uint", "int")) and isinstance(value, bool):
        # bool is an int subclass; never let True slip into a numeric slot
        raise EncodingError(f"bool given for {abi_type}")
    return value


def hash_data(types: Sequence[str], values: Sequence[Any]) -> str:
    """keccak256(abi.encode(types, values)) as a 0x-prefixed hex string."""
    if len(types) != len(values):
        raise EncodingError(
            f"type/value count mismatch: {len(types)} types, {len(values)} values"
        )
    normalized = [_normalize(t, v) for t, v in zip(types, values)]
    try:
        encoded = abi_encode(list(types), normalized)
    except (AbiEncodingError, TypeError, ValueError, OverflowError) as exc:
        raise EncodingError(f"cannot encode {list(types)}: {exc}") from exc
    return "0x" + keccak(encoded).hex()


@lru_cache(maxsize=512)
def hash_string(value: str) -> str:
    """Domain selector for a key name: keccak256(abi.encode(string))."""
    return hash_data(["string"], [value])


def derive_key(domain_name: str, *typed_args: TypedArg) -> str:
    """
    Derive a fixed-width storage key from a domain name and typed arguments.

    The domain name is hashed once into a bytes32 selector which leads the
    encoded tuple:

        derive_key("POOL_AMOUNT", ("address", market), ("address", token))
    """
    selector = hash_string(domain_name)
    types = ["bytes32"]
    values: list = [selector]
    for arg in typed_args:
        try:
            abi_type, value = arg
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"typed argument must be (abi_type, value): {arg!r}") from exc
        types.append(abi_type)
        values.append(value)
    return hash_data(types, values)


def function_selector(signature: str) -> bytes:
    """First four bytes of keccak256(signature), e.g. ``transfer(address,uint256)``."""
    return keccak(text=signature)[:4]
