"""
CCIP-Read response signer.

Signs gateway responses using the scheme the resolver verifies:
  keccak256(abi.encodePacked(
    0x1900,
    target,
    expires,
    keccak256(request),
    keccak256(result)
  ))

make_signature_hash is shared with the verifier so both sides hash
byte-identical input.
"""
import time

from django.conf import settings
from eth_account import Account
from web3 import Web3


# Default response validity: 5 minutes
DEFAULT_TTL = 300

MAX_UINT64 = 2**64 - 1


def make_signature_hash(
  target: str | bytes,
  expires: int,
  request: bytes,
  result: bytes,
) -> bytes:
  """
  Compute the digest a gateway signs and a resolver verifies.

  Args:
    target: Address of the resolver instance the response is bound to
    expires: Expiry timestamp (uint64, seconds since epoch)
    request: The original resolve() call data
    result: The opaque resolution result

  Returns:
    32-byte keccak256 digest
  """
  if not 0 <= expires <= MAX_UINT64:
    raise ValueError(f'expires out of uint64 range: {expires}')

  request_hash = Web3.solidity_keccak(['bytes'], [request])
  result_hash = Web3.solidity_keccak(['bytes'], [result])

  # 0x1900 keeps this apart from EIP-191 personal messages (0x1945) and
  # EIP-712 typed data (0x1901)
  return bytes(Web3.solidity_keccak(
    ['bytes2', 'address', 'uint64', 'bytes32', 'bytes32'],
    [
      b'\x19\x00',
      Web3.to_checksum_address(target),
      expires,
      request_hash,
      result_hash,
    ],
  ))


def sign_hash(digest: bytes, private_key: str) -> bytes:
  """Sign a raw 32-byte digest (no EIP-191 prefix), returning r || s || v."""
  account = Account.from_key(private_key)
  signed = account.unsafe_sign_hash(digest)
  return bytes(signed.signature)


def sign_response(
  contract_address: str,
  request_data: bytes,
  result: bytes,
  ttl: int | None = None,
  now: int | None = None,
  signer_key: str | None = None,
) -> tuple[int, bytes]:
  """
  Sign a CCIP-Read response using the gateway signer key.

  Args:
    contract_address: The resolver contract address
    request_data: The original resolve() call data
    result: The resolution result
    ttl: Response validity in seconds (default GATEWAY_RESPONSE_TTL)
    now: Clock override, seconds since epoch
    signer_key: Private key override (default GATEWAY_SIGNER_KEY)

  Returns:
    (expires, signature) tuple
  """
  signer_key = signer_key or settings.GATEWAY_SIGNER_KEY
  if not signer_key:
    raise ValueError('GATEWAY_SIGNER_KEY not configured')

  if ttl is None:
    ttl = getattr(settings, 'GATEWAY_RESPONSE_TTL', DEFAULT_TTL)
  if now is None:
    now = int(time.time())
  expires = now + ttl

  message_hash = make_signature_hash(contract_address, expires, request_data, result)
  return expires, sign_hash(message_hash, signer_key)
