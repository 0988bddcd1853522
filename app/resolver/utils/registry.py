"""
Signer & gateway-url registry for offchain resolver instances.

Every mutation takes the caller explicitly, is owner-gated, runs in one
transaction holding a row lock on the resolver, and records a
RegistryEvent. Reads (is_signer, list_urls) are what the dispatcher and
the proof callback consume.
"""
import logging
from urllib.parse import urlsplit

from django.db import transaction
from web3 import Web3

from resolver.errors import IndexOutOfBounds, ResolverNotFound, Unauthorized
from resolver.models import GatewayUrl, RegistryEvent, Resolver, Signer

logger = logging.getLogger('wide_event')


def _checksum(identity: str) -> str:
  """Checksum an address; raises ValueError for anything that isn't one."""
  return Web3.to_checksum_address(identity)


def _record(resolver, event_type, caller, payload):
  RegistryEvent.objects.create(
    resolver=resolver,
    event_type=event_type,
    caller=caller,
    payload=payload,
  )
  logger.info(f'registry {event_type} resolver={resolver.address} '
              f'caller={caller} payload={payload}')


def _lock_as_owner(resolver: Resolver, caller: str) -> Resolver:
  """Re-read the resolver under a row lock and check `caller` owns it."""
  locked = Resolver.objects.select_for_update().get(pk=resolver.pk)
  if not caller or caller.lower() != locked.owner.lower():
    raise Unauthorized(f'{caller} is not the owner of {locked.address}')
  return locked


# ─────────────────────────────────────────────────────────────────────────────
# Instances
# ─────────────────────────────────────────────────────────────────────────────

def get_resolver(address: str) -> Resolver:
  try:
    return Resolver.objects.get(address=_checksum(address))
  except (ValueError, Resolver.DoesNotExist) as e:
    raise ResolverNotFound(f'No resolver registered at {address}') from e


def create_resolver(address: str, owner: str, urls=(), signers=()) -> Resolver:
  """Provision a resolver instance with its initial urls and signers."""
  with transaction.atomic():
    resolver = Resolver.objects.create(
      address=_checksum(address),
      owner=_checksum(owner),
    )
    logger.info(f'registry created resolver={resolver.address} owner={resolver.owner}')
    for url in urls:
      add_url(resolver, resolver.owner, url)
    if signers:
      add_signers(resolver, resolver.owner, signers)
  return resolver


def transfer_ownership(resolver: Resolver, caller: str, new_owner: str) -> None:
  new_owner = _checksum(new_owner)
  with transaction.atomic():
    locked = _lock_as_owner(resolver, caller)
    previous = locked.owner
    locked.owner = new_owner
    locked.save(update_fields=['owner', 'updated_at'])
    _record(locked, RegistryEvent.EventType.OWNERSHIP_TRANSFERRED, caller, {
      'previous_owner': previous,
      'new_owner': new_owner,
    })
  resolver.owner = new_owner


# ─────────────────────────────────────────────────────────────────────────────
# Signers
# ─────────────────────────────────────────────────────────────────────────────

def add_signers(resolver: Resolver, caller: str, identities) -> None:
  """Authorize each identity. Already-present signers are left as they are."""
  addresses = [_checksum(identity) for identity in identities]
  with transaction.atomic():
    locked = _lock_as_owner(resolver, caller)
    for address in addresses:
      Signer.objects.get_or_create(resolver=locked, address=address)
    _record(locked, RegistryEvent.EventType.NEW_SIGNERS, caller, {'signers': addresses})


def remove_signers(resolver: Resolver, caller: str, identities) -> None:
  """Revoke each identity. Absent signers are ignored."""
  addresses = [_checksum(identity) for identity in identities]
  with transaction.atomic():
    locked = _lock_as_owner(resolver, caller)
    Signer.objects.filter(resolver=locked, address__in=addresses).delete()
    _record(locked, RegistryEvent.EventType.SIGNERS_REMOVED, caller, {'signers': addresses})


def is_signer(resolver: Resolver, identity: str) -> bool:
  try:
    address = _checksum(identity)
  except ValueError:
    return False
  return Signer.objects.filter(resolver=resolver, address=address).exists()


# ─────────────────────────────────────────────────────────────────────────────
# Gateway urls
# ─────────────────────────────────────────────────────────────────────────────

def add_url(resolver: Resolver, caller: str, url: str) -> int:
  """Append a gateway url; returns its index."""
  if not url:
    raise ValueError('Gateway url must not be empty')
  parts = urlsplit(url)
  if parts.scheme not in ('http', 'https') or not parts.netloc:
    raise ValueError(f'Gateway url must be http(s): {url}')
  with transaction.atomic():
    locked = _lock_as_owner(resolver, caller)
    position = GatewayUrl.objects.filter(resolver=locked).count()
    GatewayUrl.objects.create(resolver=locked, position=position, url=url)
    _record(locked, RegistryEvent.EventType.NEW_URL, caller, {'url': url, 'index': position})
  return position


def remove_url(resolver: Resolver, caller: str, index: int) -> None:
  """
  Remove the url at `index` by moving the last url into its slot.
  Indexes of other urls are not stable across removals.
  """
  with transaction.atomic():
    locked = _lock_as_owner(resolver, caller)
    urls = GatewayUrl.objects.filter(resolver=locked)
    count = urls.count()
    if not 0 <= index < count:
      raise IndexOutOfBounds(f'Url index {index} out of range (have {count})')

    removed = urls.get(position=index)
    removed_url = removed.url
    removed.delete()

    last = count - 1
    if index != last:
      urls.filter(position=last).update(position=index)

    _record(locked, RegistryEvent.EventType.URL_REMOVED, caller, {
      'url': removed_url,
      'index': index,
    })


def list_urls(resolver: Resolver) -> list[str]:
  return list(
    GatewayUrl.objects.filter(resolver=resolver)
    .order_by('position')
    .values_list('url', flat=True)
  )
