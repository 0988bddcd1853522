"""
ENS CCIP-Read gateway view.

Implements the EIP-3668 gateway interface for the offchain resolver.
Answers come from OffchainRecord rows, matched on the exact (name, data)
pair, and are signed with GATEWAY_SIGNER_KEY for the configured resolver.

Endpoints:
  GET  /gateway/{sender}/{data}.json
  POST /gateway/   body: {"sender": "0x...", "data": "0x..."}
"""
import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from resolver.models import OffchainRecord
from resolver.utils.ens_codec import (
  decode_resolve_call,
  encode_gateway_response,
  to_bytes,
  to_hex,
)
from resolver.utils.ens_signer import sign_response

logger = logging.getLogger('wide_event')


def _error(message, status):
  return JsonResponse({'message': message}, status=status)


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def ccip_read(request, sender=None, data=None):
  """
  Handle CCIP-Read requests for the resolver contract.

  - sender: the resolver contract address
  - data: hex-encoded resolve(bytes name, bytes data) call

  Returns JSON: { data: "0x..." } with the ABI-encoded signed response.
  """
  if request.method == 'POST':
    try:
      body = json.loads(request.body)
      sender = body['sender']
      data = body['data']
    except (json.JSONDecodeError, KeyError, TypeError):
      return _error('Expected JSON body {sender, data}', 400)

  try:
    call_data = to_bytes(data)
    name_bytes, resolver_data = decode_resolve_call(call_data)
  except (ValueError, AttributeError) as e:
    return _error(f'Invalid call data: {e}', 400)

  contract_address = settings.CONTRACT_RESOLVER
  if not contract_address:
    return _error('Resolver contract not configured', 500)
  if str(sender).lower() != contract_address.lower():
    return _error(f'Unknown resolver {sender}', 404)

  request._wide_event['extra']['ccip_name'] = to_hex(name_bytes)
  request._wide_event['extra']['ccip_selector'] = resolver_data[:4].hex()

  record = OffchainRecord.objects.filter(
    name=to_hex(name_bytes),
    data=to_hex(resolver_data),
  ).first()
  if record is None:
    return _error('Record not found', 404)

  try:
    result = to_bytes(record.result)
    # The signed request is the full resolve() call, exactly as dispatched
    expires, signature = sign_response(contract_address, call_data, result)
  except Exception:
    logger.exception('CCIP-Read gateway error')
    return _error('Gateway signing failed', 500)

  response_data = encode_gateway_response(result, expires, signature)
  request._wide_event['extra']['ccip_expires'] = expires

  return JsonResponse({'data': to_hex(response_data)})
