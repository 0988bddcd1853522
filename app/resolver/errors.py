"""
Named failures of the offchain resolver.

Each error carries a stable `name` (the on-chain error name) and the HTTP
status the JSON views answer with, so clients can tell "try another
endpoint" apart from "stop trusting this gateway".
"""


class ResolverError(Exception):
  """Base class for all resolver failures."""
  name = 'ResolverError'
  status = 400

  def to_dict(self) -> dict:
    return {'error': self.name, 'detail': str(self)}


class MalformedSignature(ResolverError):
  """Signature bytes are not a valid (r, s, v) triple or recover no key."""
  name = 'MalformedSignature'
  status = 400


class MalformedResponse(ResolverError):
  """Gateway response is not abi.encode(bytes, uint64, bytes)."""
  name = 'MalformedResponse'
  status = 400


class SignatureExpired(ResolverError):
  """The response's expiry is before the verification-time clock."""
  name = 'SignatureExpired'
  status = 410


class UnauthorizedSigner(ResolverError):
  """The recovered signer is not in the resolver's signer set."""
  name = 'UnauthorizedSigner'
  status = 403

  def __init__(self, signer: str):
    super().__init__(f'{signer} is not an authorized signer')
    self.signer = signer


class IndexOutOfBounds(ResolverError):
  name = 'IndexOutOfBounds'
  status = 404


class Unauthorized(ResolverError):
  """Registry mutation attempted by someone other than the owner."""
  name = 'Unauthorized'
  status = 403


class ResolverNotFound(ResolverError):
  name = 'ResolverNotFound'
  status = 404


class OffchainLookupFailed(ResolverError):
  """Every gateway URL failed to produce an acceptable response."""
  name = 'OffchainLookupFailed'
  status = 502

  def __init__(self, failures: list[tuple[str, Exception]]):
    summary = '; '.join(f'{url}: {err}' for url, err in failures) or 'no urls'
    super().__init__(f'All gateway urls failed ({summary})')
    self.failures = failures
