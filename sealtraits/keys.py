#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Key derivation: turn the owner's signature over a challenge into a field key.
#
# The wallet never hands over its private key, only a signature. ECDSA with
# RFC 6979 nonces is deterministic, so the same owner signing the same
# challenge later produces the same signature and therefore the same key.
#
# - key = HKDF-SHA256(ikm = r||s, salt = owner address, info = label || challenge)
# - the BIP-137 header byte is left out, it only says how to recover the pubkey
#
import os, base64, binascii, logging
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from sealtraits.constants import CHALLENGE_MSG, CHALLENGE_NONCE_PREFIX, CHALLENGE_NONCE_SIZE
from sealtraits.constants import KDF_INFO, KEY_SIZE
from sealtraits.exceptions import UnauthorizedSigner, EncodingError
from sealtraits.record import Credential
from sealtraits.utils import verify_message, normalize_address, B2A

logger = logging.getLogger(__name__)

def make_challenge(fresh=False):
    # fixed message, or one with a random nonce so each record needs its own signature
    if not fresh:
        return CHALLENGE_MSG
    return CHALLENGE_MSG + CHALLENGE_NONCE_PREFIX + B2A(os.urandom(CHALLENGE_NONCE_SIZE))

def key_from_signature(address, challenge, sig):
    # no checking here: caller must have verified sig belongs to address
    assert len(sig) == 65
    hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_SIZE,
                salt=address.encode('ascii'),
                info=KDF_INFO + b'\x00' + challenge.encode('utf-8'))
    return hkdf.derive(sig[1:65])

def verify_challenge_signature(address, challenge, sig):
    return verify_message(address, challenge, sig)

def key_from_credential(credential, challenge):
    # read path: credential was signed elsewhere (wallet, browser extension)
    if not verify_challenge_signature(credential.address, challenge, credential.signature):
        raise UnauthorizedSigner(f"Signature is not from {credential.address}")

    logger.debug("field key derived for %s", credential.address)
    return key_from_signature(credential.address, challenge, credential.signature)

def request_signature(address, challenge, signer):
    # Ask the signer; anything other than a usable signature is UnauthorizedSigner
    sig = signer.sign(address, challenge)

    if sig is None:
        raise UnauthorizedSigner(f"Signer declined to sign for {address}")

    if isinstance(sig, str):
        # wallets like to print base64
        try:
            sig = base64.b64decode(sig.strip().encode('ascii'), validate=True)
        except (ValueError, binascii.Error):
            raise UnauthorizedSigner("Signer returned unreadable signature")

    if len(sig) != 65:
        raise UnauthorizedSigner(f"Signer returned {len(sig)}-byte signature, need 65")

    return bytes(sig)

def request_credential(address, challenge, signer):
    address = normalize_address(address)
    sig = request_signature(address, challenge, signer)
    try:
        return Credential(address=address, signature=sig)
    except EncodingError as exc:
        raise UnauthorizedSigner(str(exc))

def derive_key(owner_identity, challenge, signer):
    # write path: have the owner's signer sign, check it, derive
    cred = request_credential(owner_identity, challenge, signer)
    return key_from_credential(cred, challenge)

# EOF
