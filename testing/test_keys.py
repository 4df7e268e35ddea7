#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Key derivation from challenge signatures, and signer failure modes.
#
import os, sys, time, threading, subprocess
import pytest

from sealtraits.constants import CHALLENGE_MSG, KEY_SIZE
from sealtraits.exceptions import UnauthorizedSigner, SignerTimeout, EncodingError
from sealtraits.keys import derive_key, key_from_credential, make_challenge, request_credential
from sealtraits.keys import verify_challenge_signature
from sealtraits.record import Credential
from sealtraits.signers import KeySigner, CallbackSigner


class Refuses:
    def sign(self, address, message):
        return None

class WrongKey:
    # signs happily, but with someone else's key
    def __init__(self, signer):
        self.signer = signer
    def sign(self, address, message):
        return self.signer.sign(self.signer.address, message)

class AsText:
    def __init__(self, signer):
        self.signer = signer
    def sign(self, address, message):
        return Credential(address, self.signer.sign(address, message)).sig_text


def test_deterministic(owner):
    k1 = derive_key(owner.address, CHALLENGE_MSG, owner)
    k2 = derive_key(owner.address, CHALLENGE_MSG, owner)
    assert len(k1) == KEY_SIZE
    assert k1 == k2

def test_depends_on_inputs(owner, other):
    k = derive_key(owner.address, CHALLENGE_MSG, owner)
    assert derive_key(other.address, CHALLENGE_MSG, other) != k
    assert derive_key(owner.address, CHALLENGE_MSG + '!', owner) != k

def test_address_case(owner):
    assert derive_key(owner.address.upper(), CHALLENGE_MSG, owner) \
                == derive_key(owner.address, CHALLENGE_MSG, owner)

def test_refusal(owner):
    with pytest.raises(UnauthorizedSigner):
        derive_key(owner.address, CHALLENGE_MSG, Refuses())

def test_signer_wrong_address(owner, other):
    # KeySigner only signs for its own address
    assert other.sign(owner.address, CHALLENGE_MSG) is None
    with pytest.raises(UnauthorizedSigner):
        derive_key(owner.address, CHALLENGE_MSG, other)

def test_signer_wrong_key(owner, other):
    with pytest.raises(UnauthorizedSigner):
        derive_key(owner.address, CHALLENGE_MSG, WrongKey(other))

def test_text_signature(owner):
    assert derive_key(owner.address, CHALLENGE_MSG, AsText(owner)) \
                == derive_key(owner.address, CHALLENGE_MSG, owner)

def test_junk_signature(owner):
    class Junk:
        def __init__(self, rv):
            self.rv = rv
        def sign(self, address, message):
            return self.rv

    for rv in [ b'', b'\x01' * 64, 'not base64!', b'\x00' * 65 ]:
        with pytest.raises(UnauthorizedSigner):
            derive_key(owner.address, CHALLENGE_MSG, Junk(rv))

def test_credential_path(owner, other, cred_for):
    cred = cred_for(owner, CHALLENGE_MSG)
    assert key_from_credential(cred, CHALLENGE_MSG) == derive_key(owner.address, CHALLENGE_MSG, owner)

    # signature over a different challenge
    with pytest.raises(UnauthorizedSigner):
        key_from_credential(cred, make_challenge(fresh=True))

    # someone claiming the owner's address with their own signature
    forged = Credential(owner.address, other.sign(other.address, CHALLENGE_MSG))
    with pytest.raises(UnauthorizedSigner):
        key_from_credential(forged, CHALLENGE_MSG)

def test_header_variants(owner, cred_for):
    # P2PKH-style header (31+) and P2WPKH-style (39+) are the same signature
    cred = cred_for(owner, CHALLENGE_MSG)
    sig = cred.signature
    alt = Credential(owner.address, bytes([sig[0] - 8]) + sig[1:])

    assert verify_challenge_signature(owner.address, CHALLENGE_MSG, alt.signature)
    assert key_from_credential(alt, CHALLENGE_MSG) == key_from_credential(cred, CHALLENGE_MSG)

def test_fresh_challenge():
    a = make_challenge(fresh=True)
    b = make_challenge(fresh=True)
    assert a != b
    assert a.startswith(CHALLENGE_MSG + '\nnonce: ')
    assert make_challenge() == CHALLENGE_MSG

def test_credential_shape(owner):
    with pytest.raises(EncodingError):
        Credential(owner.address, b'\x00' * 64)
    with pytest.raises(EncodingError):
        Credential('0xABC', b'\x00' * 65)
    with pytest.raises(EncodingError):
        Credential.from_text(owner.address, 'not base64!')

def test_request_credential(owner):
    cred = request_credential(owner.address.upper(), CHALLENGE_MSG, owner)
    assert cred.address == owner.address
    assert 'signature' not in repr(cred)

def test_callback_signer(owner):
    cb = CallbackSigner(owner.sign, timeout=5)
    assert derive_key(owner.address, CHALLENGE_MSG, cb) == derive_key(owner.address, CHALLENGE_MSG, owner)

def test_callback_timeout(owner):
    release = threading.Event()

    def slow_wallet(address, message):
        release.wait(5)
        return owner.sign(address, message)

    try:
        with pytest.raises(SignerTimeout) as exc:
            derive_key(owner.address, CHALLENGE_MSG, CallbackSigner(slow_wallet, timeout=0.05))
        assert isinstance(exc.value, UnauthorizedSigner)
        assert exc.value.code == 408
    finally:
        release.set()

def test_callback_unreachable(owner):
    def offline(address, message):
        raise ConnectionRefusedError("wallet not running")

    with pytest.raises(UnauthorizedSigner):
        derive_key(owner.address, CHALLENGE_MSG, CallbackSigner(offline))

def test_callback_wallet_errors(owner):
    def rpc_down(address, message):
        raise RuntimeError("JSON-RPC error -32603")

    with pytest.raises(UnauthorizedSigner) as exc:
        derive_key(owner.address, CHALLENGE_MSG, CallbackSigner(rpc_down))
    assert isinstance(exc.value.__cause__, RuntimeError)

    def says_no(address, message):
        raise UnauthorizedSigner("user rejected", code=4001)

    with pytest.raises(UnauthorizedSigner) as exc:
        derive_key(owner.address, CHALLENGE_MSG, CallbackSigner(says_no))
    assert exc.value.code == 4001

HUNG_WALLET = '''
import time
from sealtraits.signers import CallbackSigner
from sealtraits.exceptions import SignerTimeout
try:
    CallbackSigner(lambda a, m: time.sleep(60), timeout=0.1).sign("tb1q", "hi")
except SignerTimeout:
    print("timeout")
'''

def test_hung_wallet_exit():
    # a wallet call that never returns must not keep the process alive
    top = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    t0 = time.time()
    r = subprocess.run([ sys.executable, '-c', HUNG_WALLET ], cwd=top,
                            capture_output=True, text=True, timeout=30)
    assert r.stdout.strip() == 'timeout', r.stderr
    assert time.time() - t0 < 20

def test_keysigner_text(owner):
    again = KeySigner.from_text(owner.wif)
    assert again.address == owner.address
    assert again.testnet

    hexed = KeySigner.from_text((b'\x01' * 32).hex(), testnet=True)
    assert hexed.address == owner.address

# EOF
