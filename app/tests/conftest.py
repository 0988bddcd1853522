import time

import pytest
from django.conf import settings
from eth_account import Account

from resolver.utils import registry
from resolver.utils.ens_codec import encode_gateway_response
from resolver.utils.ens_signer import make_signature_hash, sign_hash
from resolver.utils.offchain_resolver import OffchainResolver

# Well-known Hardhat development keys
SIGNER_KEY = '0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d'
OTHER_KEY = '0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cc08607b'
OWNER_KEY = '0x7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6'

OTHER_RESOLVER = '0x' + '42' * 20


def address_of(key: str) -> str:
  return Account.from_key(key).address


def signed_response(key, target, request, result, expires) -> bytes:
  """A gateway response signed with `key` for the resolver at `target`."""
  digest = make_signature_hash(target, expires, request, result)
  return encode_gateway_response(result, expires, sign_hash(digest, key))


@pytest.fixture
def now():
  return int(time.time())


@pytest.fixture
def signer_address():
  return address_of(SIGNER_KEY)


@pytest.fixture
def owner_address():
  return address_of(OWNER_KEY)


@pytest.fixture
def resolver_instance(db, owner_address, signer_address):
  return registry.create_resolver(
    settings.CONTRACT_RESOLVER,
    owner_address,
    urls=['https://a/', 'https://b/'],
    signers=[signer_address],
  )


@pytest.fixture
def offchain_resolver(resolver_instance):
  return OffchainResolver(resolver_instance)
