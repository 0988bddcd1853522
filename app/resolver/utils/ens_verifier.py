"""
Signed-response verification.

The resolver-side half of the signing scheme in ens_signer: recompute the
digest over (target, expires, request, result), check the expiry and
recover the signing address. Authorization against the signer set is left
to the caller (OffchainResolver.resolve_with_proof).
"""
import time

from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import BadSignature, ValidationError

from resolver.errors import MalformedSignature, SignatureExpired
from resolver.utils.ens_codec import SIGNATURE_LENGTH, SignedResponse
from resolver.utils.ens_signer import make_signature_hash

_HALF_N = SECPK1_N // 2


def recover_signer(digest: bytes, signature: bytes) -> str:
  """
  Recover the checksummed address that signed `digest`.

  Accepts only the 65-byte r || s || v layout with v in {27, 28} and a
  low-s value, the same subset the on-chain ECDSA library accepts.

  Raises:
    MalformedSignature: on any layout, range or recovery failure
  """
  if len(signature) != SIGNATURE_LENGTH:
    raise MalformedSignature(
      f'Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}'
    )

  r = int.from_bytes(signature[:32], 'big')
  s = int.from_bytes(signature[32:64], 'big')
  v = signature[64]

  if v not in (27, 28):
    raise MalformedSignature(f'Invalid recovery id v={v}')
  if not 0 < r < SECPK1_N:
    raise MalformedSignature('Signature r out of range')
  if not 0 < s <= _HALF_N:
    raise MalformedSignature('Signature s out of range (must be low-s)')

  try:
    sig = keys.Signature(vrs=(v - 27, r, s))
    public_key = sig.recover_public_key_from_msg_hash(digest)
  except (BadSignature, ValidationError, ValueError) as e:
    raise MalformedSignature(f'Signature recovery failed: {e}') from e

  return public_key.to_checksum_address()


def verify(
  target: str,
  request: bytes,
  response: bytes,
  now: int | None = None,
) -> tuple[str, bytes]:
  """
  Verify a gateway response for the resolver at `target`.

  Args:
    target: Resolver instance address the signature must be bound to
    request: The original resolve() call data (the callback's extraData)
    response: ABI-encoded (bytes result, uint64 expires, bytes signature)
    now: Verification-time clock, seconds since epoch

  Returns:
    (signer, result) tuple

  Raises:
    MalformedResponse, SignatureExpired, MalformedSignature
  """
  signed = SignedResponse.decode(response)

  if now is None:
    now = int(time.time())
  if signed.expires < now:
    raise SignatureExpired(f'Response expired at {signed.expires}, now {now}')

  digest = make_signature_hash(target, signed.expires, request, signed.result)
  signer = recover_signer(digest, signed.signature)
  return signer, signed.result
