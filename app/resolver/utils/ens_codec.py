"""
ABI codec for the CCIP-Read handshake.

Covers the three payloads that cross the wire:
  - the ENSIP-10 resolve(bytes name, bytes data) call dispatched to gateways
  - the OffchainLookup revert payload (EIP-3668)
  - the signed gateway response (bytes result, uint64 expires, bytes signature)

Names, inner call data and results stay opaque byte strings.
"""
from dataclasses import dataclass

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from resolver.errors import MalformedResponse


def _selector(signature: str) -> bytes:
  return bytes(Web3.keccak(text=signature)[:4])


# IExtendedResolver.resolve.selector (also the ENSIP-10 interface id)
RESOLVE_SELECTOR = _selector('resolve(bytes,bytes)')
RESOLVE_WITH_PROOF_SELECTOR = _selector('resolveWithProof(bytes,bytes)')
OFFCHAIN_LOOKUP_SELECTOR = _selector('OffchainLookup(address,string[],bytes,bytes4,bytes)')

SIGNATURE_LENGTH = 65


def to_bytes(value: str | bytes) -> bytes:
  """Accept raw bytes or a hex string (with or without 0x)."""
  if isinstance(value, (bytes, bytearray)):
    return bytes(value)
  return bytes.fromhex(value[2:] if value.startswith('0x') else value)


def to_hex(value: bytes) -> str:
  return '0x' + bytes(value).hex()


# ─────────────────────────────────────────────────────────────────────────────
# resolve(bytes name, bytes data)
# ─────────────────────────────────────────────────────────────────────────────

def encode_resolve_call(name: bytes, data: bytes) -> bytes:
  """Build the exact call payload a gateway receives: selector || abi.encode(name, data)."""
  return RESOLVE_SELECTOR + encode(['bytes', 'bytes'], [name, data])


def decode_resolve_call(call_data: bytes) -> tuple[bytes, bytes]:
  """
  Split a resolve() call back into (name, data).

  Raises ValueError if the selector is not resolve(bytes,bytes) or the
  arguments do not decode.
  """
  if call_data[:4] != RESOLVE_SELECTOR:
    raise ValueError(f'Unsupported selector 0x{call_data[:4].hex()}')
  try:
    name, data = decode(['bytes', 'bytes'], call_data[4:])
  except DecodingError as e:
    raise ValueError(f'Invalid resolve() arguments: {e}') from e
  return name, data


# ─────────────────────────────────────────────────────────────────────────────
# Signed gateway response
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SignedResponse:
  """A gateway answer: the opaque result, its expiry and the r||s||v signature."""
  result: bytes
  expires: int
  signature: bytes

  def encode(self) -> bytes:
    return encode_gateway_response(self.result, self.expires, self.signature)

  @classmethod
  def decode(cls, data: bytes) -> 'SignedResponse':
    try:
      result, expires, signature = decode(['bytes', 'uint64', 'bytes'], data)
    except DecodingError as e:
      raise MalformedResponse(f'Cannot decode gateway response: {e}') from e
    return cls(result=result, expires=expires, signature=signature)


def encode_gateway_response(result: bytes, expires: int, signature: bytes) -> bytes:
  """
  ABI-encode the full gateway response for resolveWithProof callback.
  Format: (bytes result, uint64 expires, bytes signature)
  """
  return encode(['bytes', 'uint64', 'bytes'], [result, expires, signature])


def decode_gateway_response(data: bytes) -> SignedResponse:
  return SignedResponse.decode(data)


# ─────────────────────────────────────────────────────────────────────────────
# OffchainLookup(address sender, string[] urls, bytes callData,
#                bytes4 callbackFunction, bytes extraData)
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OffchainLookup:
  """
  The dispatcher's "fetch externally, then call back" instruction.

  Returned as a value rather than raised: it is the expected outcome of
  every resolve() call, not a failure.
  """
  sender: str
  urls: tuple[str, ...]
  call_data: bytes
  callback_function: bytes
  extra_data: bytes

  def encode(self) -> bytes:
    """EIP-3668 revert data, as an on-chain resolver would emit it."""
    return OFFCHAIN_LOOKUP_SELECTOR + encode(
      ['address', 'string[]', 'bytes', 'bytes4', 'bytes'],
      [
        Web3.to_checksum_address(self.sender),
        list(self.urls),
        self.call_data,
        self.callback_function,
        self.extra_data,
      ],
    )

  def to_json(self) -> dict:
    return {
      'sender': self.sender,
      'urls': list(self.urls),
      'callData': to_hex(self.call_data),
      'callbackFunction': to_hex(self.callback_function),
      'extraData': to_hex(self.extra_data),
    }


def decode_offchain_lookup(revert_data: bytes) -> OffchainLookup:
  """Parse EIP-3668 revert data back into an OffchainLookup."""
  if revert_data[:4] != OFFCHAIN_LOOKUP_SELECTOR:
    raise ValueError(f'Not an OffchainLookup revert: 0x{revert_data[:4].hex()}')
  try:
    sender, urls, call_data, callback_function, extra_data = decode(
      ['address', 'string[]', 'bytes', 'bytes4', 'bytes'],
      revert_data[4:],
    )
  except DecodingError as e:
    raise ValueError(f'Invalid OffchainLookup arguments: {e}') from e
  return OffchainLookup(
    sender=Web3.to_checksum_address(sender),
    urls=tuple(urls),
    call_data=call_data,
    callback_function=callback_function,
    extra_data=extra_data,
  )
