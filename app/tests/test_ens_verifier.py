import pytest
from eth_keys.constants import SECPK1_N

from conftest import OTHER_KEY, SIGNER_KEY, address_of, signed_response
from resolver.errors import MalformedResponse, MalformedSignature, SignatureExpired
from resolver.utils.ens_codec import encode_gateway_response
from resolver.utils.ens_signer import make_signature_hash, sign_hash
from resolver.utils.ens_verifier import recover_signer, verify

TARGET = '0x' + '11' * 20
REQUEST = bytes.fromhex('dead')
RESULT = bytes.fromhex('beef')


def test_round_trip_returns_signer_and_value(now):
  response = signed_response(SIGNER_KEY, TARGET, REQUEST, RESULT, now + 3600)

  signer, value = verify(TARGET, REQUEST, response, now=now)

  assert signer == address_of(SIGNER_KEY)
  assert value == RESULT


def test_expiry_equal_to_now_is_still_valid(now):
  response = signed_response(SIGNER_KEY, TARGET, REQUEST, RESULT, now)
  signer, _ = verify(TARGET, REQUEST, response, now=now)
  assert signer == address_of(SIGNER_KEY)


def test_expired_response_is_rejected(now):
  response = signed_response(SIGNER_KEY, TARGET, REQUEST, RESULT, now - 1)
  with pytest.raises(SignatureExpired):
    verify(TARGET, REQUEST, response, now=now)


def test_expired_response_is_rejected_whatever_the_signature(now):
  response = encode_gateway_response(RESULT, now - 1, b'\x00' * 7)
  with pytest.raises(SignatureExpired):
    verify(TARGET, REQUEST, response, now=now)


def test_signature_is_bound_to_the_resolver_instance(now):
  response = signed_response(SIGNER_KEY, TARGET, REQUEST, RESULT, now + 60)
  signer, _ = verify('0x' + '22' * 20, REQUEST, response, now=now)
  assert signer != address_of(SIGNER_KEY)


def test_tampered_value_recovers_someone_else(now):
  digest = make_signature_hash(TARGET, now + 60, REQUEST, RESULT)
  response = encode_gateway_response(b'\xba\xad', now + 60, sign_hash(digest, SIGNER_KEY))
  signer, value = verify(TARGET, REQUEST, response, now=now)
  assert value == b'\xba\xad'
  assert signer != address_of(SIGNER_KEY)


def test_undecodable_response(now):
  with pytest.raises(MalformedResponse):
    verify(TARGET, REQUEST, b'\x01\x02\x03', now=now)


class TestRecoverSigner:

  digest = make_signature_hash(TARGET, 1_700_000_000, REQUEST, RESULT)

  def _signature(self):
    return sign_hash(self.digest, OTHER_KEY)

  def test_valid_signature(self):
    assert recover_signer(self.digest, self._signature()) == address_of(OTHER_KEY)

  @pytest.mark.parametrize('length', [0, 64, 66])
  def test_wrong_length(self, length):
    with pytest.raises(MalformedSignature):
      recover_signer(self.digest, self._signature().ljust(66, b'\x00')[:length])

  @pytest.mark.parametrize('v', [0, 1, 29, 255])
  def test_invalid_recovery_id(self, v):
    sig = self._signature()[:64] + bytes([v])
    with pytest.raises(MalformedSignature):
      recover_signer(self.digest, sig)

  def test_high_s_is_rejected(self):
    sig = self._signature()
    s = int.from_bytes(sig[32:64], 'big')
    flipped_v = 55 - sig[64]  # 27 <-> 28
    malleated = sig[:32] + (SECPK1_N - s).to_bytes(32, 'big') + bytes([flipped_v])
    with pytest.raises(MalformedSignature):
      recover_signer(self.digest, malleated)

  def test_zero_r_is_rejected(self):
    sig = b'\x00' * 32 + self._signature()[32:]
    with pytest.raises(MalformedSignature):
      recover_signer(self.digest, sig)

  def test_r_not_on_curve(self):
    # x = 5 has no point on secp256k1 (5**3 + 7 is a non-residue mod p)
    sig = (5).to_bytes(32, 'big') + self._signature()[32:]
    with pytest.raises(MalformedSignature):
      recover_signer(self.digest, sig)
