"""
Resolver views: JSON surface over a registered offchain resolver.

Exposes the dispatcher, the proof callback, the registry reads and the
owner-gated registry mutations. Resolver errors are answered with
{"error": <name>, "detail": ...} and the status the error carries.
"""
import json

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from resolver.errors import ResolverError
from resolver.utils import registry
from resolver.utils.ens_codec import to_bytes, to_hex
from resolver.utils.offchain_resolver import OffchainResolver
from resolver.utils.web3_utils import authenticate_admin_message


def _error_response(request, error: ResolverError):
  request._wide_event['extra']['resolver_error'] = error.name
  return JsonResponse(error.to_dict(), status=error.status)


def _json_body(request) -> dict:
  body = json.loads(request.body)
  if not isinstance(body, dict):
    raise ValueError('Expected a JSON object')
  return body


@csrf_exempt
@require_POST
def resolve(request, address):
  """Dispatch resolve(name, data); always answers with the OffchainLookup."""
  try:
    body = _json_body(request)
    name = to_bytes(body['name'])
    data = to_bytes(body['data'])
  except (ValueError, KeyError, AttributeError):
    return JsonResponse({'error': 'Expected JSON body {name, data} as hex'}, status=400)

  try:
    resolver = OffchainResolver.at(address)
  except ResolverError as e:
    return _error_response(request, e)

  lookup = resolver.resolve(name, data)
  request._wide_event['extra']['resolver'] = resolver.address

  return JsonResponse({
    'status': 'offchain_lookup',
    **lookup.to_json(),
    'revertData': to_hex(lookup.encode()),
  })


@csrf_exempt
@require_POST
def resolve_with_proof(request, address):
  """Verify a gateway response and return the authenticated result."""
  try:
    body = _json_body(request)
    response = to_bytes(body['response'])
    extra_data = to_bytes(body['extraData'])
  except (ValueError, KeyError, AttributeError):
    return JsonResponse(
      {'error': 'Expected JSON body {response, extraData} as hex'},
      status=400,
    )

  try:
    resolver = OffchainResolver.at(address)
    resolved = resolver.resolve_with_proof(response, extra_data)
  except ResolverError as e:
    return _error_response(request, e)

  request._wide_event['extra']['resolver'] = resolver.address
  request._wide_event['extra']['signer'] = resolved.signer

  return JsonResponse({
    'status': 'resolved',
    'result': to_hex(resolved.value),
    'signer': resolved.signer,
  })


@require_GET
def signer_status(request, address, identity):
  try:
    instance = registry.get_resolver(address)
  except ResolverError as e:
    return _error_response(request, e)
  return JsonResponse({'isSigner': registry.is_signer(instance, identity)})


@require_GET
def url_list(request, address):
  try:
    instance = registry.get_resolver(address)
  except ResolverError as e:
    return _error_response(request, e)
  return JsonResponse({'urls': registry.list_urls(instance)})


@csrf_exempt
@require_POST
def admin(request, address):
  """
  Apply an owner-signed registry mutation.
  Expects JSON body: { message, signature } (see web3_utils).
  """
  try:
    body = _json_body(request)
    message = body['message']
    signature = body['signature']
  except (ValueError, KeyError):
    return JsonResponse({'error': 'Expected JSON body {message, signature}'}, status=400)

  try:
    instance = registry.get_resolver(address)
    caller, action, params = authenticate_admin_message(message, signature, instance.address)
    _apply_admin_action(instance, caller, action, params)
  except ResolverError as e:
    return _error_response(request, e)
  except (ValueError, KeyError, TypeError) as e:
    return JsonResponse({'error': f'Invalid admin request: {e}'}, status=400)

  request._wide_event['extra']['resolver'] = instance.address
  request._wide_event['extra']['admin_action'] = action

  return JsonResponse({
    'status': 'ok',
    'action': action,
    'owner': instance.owner,
    'urls': registry.list_urls(instance),
  })


def _apply_admin_action(instance, caller, action, params):
  if action == 'addSigners':
    registry.add_signers(instance, caller, params['signers'])
  elif action == 'removeSigners':
    registry.remove_signers(instance, caller, params['signers'])
  elif action == 'addUrl':
    registry.add_url(instance, caller, params['url'])
  elif action == 'removeUrl':
    index = params['index']
    if not isinstance(index, int) or isinstance(index, bool):
      raise TypeError('index must be an integer')
    registry.remove_url(instance, caller, index)
  elif action == 'transferOwnership':
    registry.transfer_ownership(instance, caller, params['newOwner'])
