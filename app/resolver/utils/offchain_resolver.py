"""
Offchain resolver: the ENSIP-10 dispatcher and its CCIP-Read callback.

resolve() never answers directly. It hands back an OffchainLookup telling
the caller where to fetch a signed answer; resolve_with_proof() accepts
that answer only if it verifies and was signed by a registered signer.
"""
import logging
from dataclasses import dataclass

from resolver.errors import UnauthorizedSigner
from resolver.models import Resolver
from resolver.utils import registry
from resolver.utils.ens_codec import (
  RESOLVE_SELECTOR,
  RESOLVE_WITH_PROOF_SELECTOR,
  OffchainLookup,
  encode_resolve_call,
)
from resolver.utils.ens_signer import make_signature_hash
from resolver.utils.ens_verifier import verify

logger = logging.getLogger('wide_event')

ERC165_INTERFACE_ID = bytes.fromhex('01ffc9a7')
EXTENDED_RESOLVER_INTERFACE_ID = RESOLVE_SELECTOR


@dataclass(frozen=True)
class Resolved:
  """An authenticated answer: the gateway's result and who signed it."""
  value: bytes
  signer: str


class OffchainResolver:
  """A resolver instance, bound to its address and its registry state."""

  def __init__(self, instance: Resolver):
    self.instance = instance

  @classmethod
  def at(cls, address: str) -> 'OffchainResolver':
    return cls(registry.get_resolver(address))

  @property
  def address(self) -> str:
    return self.instance.address

  def make_signature_hash(self, expires: int, request: bytes, result: bytes) -> bytes:
    """The digest a gateway must sign for this instance."""
    return make_signature_hash(self.address, expires, request, result)

  def supports_interface(self, interface_id: bytes) -> bool:
    return interface_id in (ERC165_INTERFACE_ID, EXTENDED_RESOLVER_INTERFACE_ID)

  def resolve(self, name: bytes, data: bytes) -> OffchainLookup:
    """Build the fetch instruction for resolve(name, data)."""
    call_data = encode_resolve_call(name, data)
    return OffchainLookup(
      sender=self.address,
      urls=tuple(registry.list_urls(self.instance)),
      call_data=call_data,
      callback_function=RESOLVE_WITH_PROOF_SELECTOR,
      extra_data=call_data,
    )

  def resolve_with_proof(
    self,
    response: bytes,
    extra_data: bytes,
    now: int | None = None,
  ) -> Resolved:
    """
    Authenticate a gateway response against the original call.

    Raises:
      MalformedResponse, MalformedSignature, SignatureExpired,
      UnauthorizedSigner
    """
    signer, result = verify(self.address, extra_data, response, now=now)
    if not registry.is_signer(self.instance, signer):
      logger.warning(f'resolveWithProof rejected signer={signer} resolver={self.address}')
      raise UnauthorizedSigner(signer)
    return Resolved(value=result, signer=signer)
