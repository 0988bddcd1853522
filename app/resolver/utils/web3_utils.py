"""
Web3 utilities for registry administration.

Owner mutations arrive over HTTP as an EIP-191 personal_sign message. The
recovered address is the caller handed to the registry, which decides
whether it is the owner.

Message format (canonical JSON, sorted keys, no whitespace):
  {"action": "...", "expires": 1700000000, "params": {...}, "resolver": "0x..."}
"""
import json
import time

from django.conf import settings
from eth_account import Account
from eth_account.messages import encode_defunct

from resolver.errors import Unauthorized

# Default validity window accepted for an admin message
DEFAULT_ADMIN_MESSAGE_MAX_TTL = 600

ADMIN_ACTIONS = (
  'addSigners',
  'removeSigners',
  'addUrl',
  'removeUrl',
  'transferOwnership',
)


def recover_address(message: str, signature: str) -> str:
  """
  Recover the signer's address from a signed message.
  Uses EIP-191 personal_sign format.

  Args:
    message: The original message that was signed
    signature: The hex-encoded signature (0x-prefixed)

  Returns:
    Checksummed Ethereum address of the signer
  """
  msg = encode_defunct(text=message)
  return Account.recover_message(msg, signature=signature)


def build_admin_message(resolver: str, action: str, params: dict, expires: int) -> str:
  """Serialize an admin request the way authenticate_admin_message expects it."""
  return json.dumps(
    {'action': action, 'expires': expires, 'params': params, 'resolver': resolver},
    sort_keys=True,
    separators=(',', ':'),
  )


def sign_admin_message(message: str, private_key: str) -> str:
  signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
  return '0x' + bytes(signed.signature).hex()


def authenticate_admin_message(
  message: str,
  signature: str,
  resolver: str,
  now: int | None = None,
) -> tuple[str, str, dict]:
  """
  Check an admin message is well-formed, current and aimed at `resolver`.

  Returns:
    (caller, action, params) where caller is the recovered signer

  Raises:
    ValueError: message is not valid JSON or names an unknown action
    Unauthorized: signature unrecoverable, message expired, too far in the
      future, or addressed to another resolver
  """
  payload = json.loads(message)
  if not isinstance(payload, dict):
    raise ValueError('Admin message must be a JSON object')

  action = payload.get('action')
  if action not in ADMIN_ACTIONS:
    raise ValueError(f'Unknown admin action: {action}')

  params = payload.get('params') or {}
  if not isinstance(params, dict):
    raise ValueError('Admin params must be a JSON object')

  if str(payload.get('resolver', '')).lower() != resolver.lower():
    raise Unauthorized('Admin message is addressed to another resolver')

  if now is None:
    now = int(time.time())
  max_ttl = getattr(settings, 'ADMIN_MESSAGE_MAX_TTL', DEFAULT_ADMIN_MESSAGE_MAX_TTL)
  expires = payload.get('expires')
  if not isinstance(expires, int) or expires < now:
    raise Unauthorized('Admin message expired')
  if expires > now + max_ttl:
    raise Unauthorized(f'Admin message validity exceeds {max_ttl}s')

  try:
    caller = recover_address(message, signature)
  except Exception as e:
    raise Unauthorized(f'Cannot recover admin signer: {e}') from e

  return caller, action, params
