import pytest
from django.conf import settings

from conftest import OTHER_KEY, OTHER_RESOLVER, address_of
from resolver.errors import IndexOutOfBounds, ResolverNotFound, Unauthorized
from resolver.models import RegistryEvent, Signer
from resolver.utils import registry

pytestmark = pytest.mark.django_db


def _event_types(resolver):
  return list(resolver.events.values_list('event_type', flat=True))


def test_create_resolver_provisions_urls_and_signers(resolver_instance, owner_address, signer_address):
  assert resolver_instance.owner == owner_address
  assert registry.list_urls(resolver_instance) == ['https://a/', 'https://b/']
  assert registry.is_signer(resolver_instance, signer_address)
  assert _event_types(resolver_instance) == [
    RegistryEvent.EventType.NEW_URL,
    RegistryEvent.EventType.NEW_URL,
    RegistryEvent.EventType.NEW_SIGNERS,
  ]


def test_get_resolver_accepts_any_case(resolver_instance):
  assert registry.get_resolver(settings.CONTRACT_RESOLVER.lower()) == resolver_instance


@pytest.mark.parametrize('address', [OTHER_RESOLVER, 'not-an-address'])
def test_get_resolver_unknown(db, address):
  with pytest.raises(ResolverNotFound):
    registry.get_resolver(address)


class TestUrls:

  def test_remove_first_of_two_leaves_second(self, resolver_instance, owner_address):
    registry.remove_url(resolver_instance, owner_address, 0)
    assert registry.list_urls(resolver_instance) == ['https://b/']

  def test_remove_swaps_last_into_gap(self, resolver_instance, owner_address):
    registry.add_url(resolver_instance, owner_address, 'https://c/')
    registry.remove_url(resolver_instance, owner_address, 0)
    assert registry.list_urls(resolver_instance) == ['https://c/', 'https://b/']

  def test_remove_last(self, resolver_instance, owner_address):
    registry.remove_url(resolver_instance, owner_address, 1)
    assert registry.list_urls(resolver_instance) == ['https://a/']

  def test_add_returns_index(self, resolver_instance, owner_address):
    assert registry.add_url(resolver_instance, owner_address, 'https://c/') == 2

  @pytest.mark.parametrize('index', [-1, 2, 10])
  def test_remove_out_of_range(self, resolver_instance, owner_address, index):
    with pytest.raises(IndexOutOfBounds):
      registry.remove_url(resolver_instance, owner_address, index)
    assert registry.list_urls(resolver_instance) == ['https://a/', 'https://b/']

  def test_remove_records_event(self, resolver_instance, owner_address):
    registry.remove_url(resolver_instance, owner_address, 0)
    event = resolver_instance.events.last()
    assert event.event_type == RegistryEvent.EventType.URL_REMOVED
    assert event.caller == owner_address
    assert event.payload == {'url': 'https://a/', 'index': 0}

  @pytest.mark.parametrize('url', ['', 'gateway.example/', 'file:///etc/passwd', 'ftp://gw/', 'https://'])
  def test_invalid_url_rejected(self, resolver_instance, owner_address, url):
    with pytest.raises(ValueError):
      registry.add_url(resolver_instance, owner_address, url)
    assert registry.list_urls(resolver_instance) == ['https://a/', 'https://b/']


class TestSigners:

  def test_add_is_idempotent(self, resolver_instance, owner_address, signer_address):
    registry.add_signers(resolver_instance, owner_address, [signer_address, signer_address.lower()])
    assert Signer.objects.filter(resolver=resolver_instance).count() == 1

  def test_add_and_remove(self, resolver_instance, owner_address):
    other = address_of(OTHER_KEY)
    registry.add_signers(resolver_instance, owner_address, [other])
    assert registry.is_signer(resolver_instance, other)

    registry.remove_signers(resolver_instance, owner_address, [other])
    assert not registry.is_signer(resolver_instance, other)

  def test_remove_absent_is_noop(self, resolver_instance, owner_address, signer_address):
    registry.remove_signers(resolver_instance, owner_address, [address_of(OTHER_KEY)])
    assert registry.is_signer(resolver_instance, signer_address)
    assert resolver_instance.events.last().event_type == RegistryEvent.EventType.SIGNERS_REMOVED

  def test_membership_is_per_resolver(self, resolver_instance, owner_address, signer_address):
    other = registry.create_resolver(OTHER_RESOLVER, owner_address)
    assert not registry.is_signer(other, signer_address)

  def test_invalid_address(self, resolver_instance, owner_address):
    with pytest.raises(ValueError):
      registry.add_signers(resolver_instance, owner_address, ['0x1234'])

  def test_is_signer_tolerates_garbage(self, resolver_instance):
    assert registry.is_signer(resolver_instance, 'garbage') is False


class TestOwnerGating:

  @pytest.mark.parametrize('mutate', [
    lambda r, caller: registry.add_signers(r, caller, [address_of(OTHER_KEY)]),
    lambda r, caller: registry.remove_signers(r, caller, [address_of(OTHER_KEY)]),
    lambda r, caller: registry.add_url(r, caller, 'https://evil/'),
    lambda r, caller: registry.remove_url(r, caller, 0),
    lambda r, caller: registry.transfer_ownership(r, caller, caller),
  ])
  def test_non_owner_is_rejected(self, resolver_instance, mutate):
    events_before = resolver_instance.events.count()
    with pytest.raises(Unauthorized):
      mutate(resolver_instance, address_of(OTHER_KEY))
    assert resolver_instance.events.count() == events_before
    assert registry.list_urls(resolver_instance) == ['https://a/', 'https://b/']

  def test_owner_match_is_case_insensitive(self, resolver_instance, owner_address):
    registry.add_url(resolver_instance, owner_address.lower(), 'https://c/')
    assert registry.list_urls(resolver_instance)[-1] == 'https://c/'

  def test_transfer_ownership(self, resolver_instance, owner_address):
    new_owner = address_of(OTHER_KEY)
    registry.transfer_ownership(resolver_instance, owner_address, new_owner)

    assert resolver_instance.owner == new_owner
    with pytest.raises(Unauthorized):
      registry.add_url(resolver_instance, owner_address, 'https://c/')
    registry.add_url(resolver_instance, new_owner, 'https://c/')

    event = resolver_instance.events.filter(
      event_type=RegistryEvent.EventType.OWNERSHIP_TRANSFERRED
    ).get()
    assert event.payload == {'previous_owner': owner_address, 'new_owner': new_owner}
