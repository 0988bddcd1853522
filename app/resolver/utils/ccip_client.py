"""
CCIP-Read client (EIP-3668).

Drives the full handshake for an OffchainResolver:
1. resolve(name, data) returns an OffchainLookup.
2. Each gateway url is tried in order. Templates containing {data} are
   fetched with GET, all others with a JSON POST of {data, sender}.
3. The gateway's {"data": "0x..."} reply goes to resolve_with_proof().

A url whose reply cannot be fetched, decoded, verified or is expired is
skipped in favour of the next one. An UnauthorizedSigner stops the
lookup: the gateway itself is not trusted.
"""
import http.client
import json
import logging
import urllib.error
import urllib.request

from django.conf import settings

from resolver.errors import (
  MalformedResponse,
  MalformedSignature,
  OffchainLookupFailed,
  SignatureExpired,
)
from resolver.utils.ens_codec import OffchainLookup, to_bytes, to_hex
from resolver.utils.offchain_resolver import OffchainResolver, Resolved

logger = logging.getLogger('wide_event')

# Default per-url timeout in seconds
DEFAULT_TIMEOUT = 10


class GatewayError(Exception):
  """Raised when a gateway url is unreachable or answers with an error."""
  pass


def _timeout() -> int:
  return getattr(settings, 'CCIP_READ_TIMEOUT', DEFAULT_TIMEOUT)


def build_request(url_template: str, sender: str, call_data: bytes) -> urllib.request.Request:
  """
  Expand a gateway url template into the HTTP request EIP-3668 prescribes.
  Both substitutions use lower-case 0x-prefixed hex.
  """
  sender_hex = sender.lower()
  data_hex = to_hex(call_data)
  url = url_template.replace('{sender}', sender_hex)

  if '{data}' in url_template:
    url = url.replace('{data}', data_hex)
    return urllib.request.Request(url, method='GET')

  body = json.dumps({'data': data_hex, 'sender': sender_hex}).encode('utf-8')
  return urllib.request.Request(
    url,
    data=body,
    headers={'Content-Type': 'application/json'},
    method='POST',
  )


def fetch_gateway(url_template: str, sender: str, call_data: bytes) -> bytes:
  """
  Query one gateway url and return the raw response bytes.

  Raises:
    GatewayError: transport failure, non-2xx status or unexpected body
  """
  try:
    req = build_request(url_template, sender, call_data)
  except ValueError as e:
    raise GatewayError(f'Invalid gateway url {url_template}: {e}') from e

  try:
    with urllib.request.urlopen(req, timeout=_timeout()) as resp:
      body = json.loads(resp.read().decode('utf-8'))
  except urllib.error.HTTPError as e:
    error_body = e.read().decode('utf-8', errors='replace')
    raise GatewayError(f'Gateway returned {e.code}: {error_body}') from e
  except urllib.error.URLError as e:
    raise GatewayError(f'Gateway unreachable: {e.reason}') from e
  except (OSError, http.client.HTTPException) as e:
    # Connection dropped or truncated while reading the body
    raise GatewayError(f'Gateway connection failed: {e!r}') from e
  except ValueError as e:
    raise GatewayError(f'Gateway response unusable: {e}') from e

  data = body.get('data') if isinstance(body, dict) else None
  if not isinstance(data, str):
    raise GatewayError('Gateway response has no "data" field')
  try:
    return to_bytes(data)
  except ValueError as e:
    raise GatewayError(f'Gateway "data" is not hex: {e}') from e


def complete_lookup(
  resolver: OffchainResolver,
  lookup: OffchainLookup,
  now: int | None = None,
) -> Resolved:
  """
  Try each url of `lookup` until one yields an authenticated answer.

  Raises:
    UnauthorizedSigner: a gateway answered with a validly signed response
      from an unregistered key
    OffchainLookupFailed: every url failed
  """
  if lookup.sender.lower() != resolver.address.lower():
    raise ValueError('OffchainLookup sender does not match the resolver')

  failures = []
  for url in lookup.urls:
    try:
      response = fetch_gateway(url, lookup.sender, lookup.call_data)
      resolved = resolver.resolve_with_proof(response, lookup.extra_data, now=now)
    except (GatewayError, MalformedResponse, MalformedSignature, SignatureExpired) as e:
      logger.warning(f'ccip-read url={url} failed: {e}')
      failures.append((url, e))
      continue
    logger.info(f'ccip-read resolved via url={url} signer={resolved.signer}')
    return resolved

  raise OffchainLookupFailed(failures)


def ccip_read(
  resolver: OffchainResolver,
  name: bytes,
  data: bytes,
  now: int | None = None,
) -> Resolved:
  """Resolve (name, data) end to end through the resolver's gateways."""
  lookup = resolver.resolve(name, data)
  return complete_lookup(resolver, lookup, now=now)
