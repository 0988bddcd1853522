from resolver.models.records import OffchainRecord
from resolver.models.registry import GatewayUrl, RegistryEvent, Resolver, Signer

__all__ = [
  'GatewayUrl',
  'OffchainRecord',
  'RegistryEvent',
  'Resolver',
  'Signer',
]
