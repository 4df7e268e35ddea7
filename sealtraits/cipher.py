#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Field cipher: one attribute value in, one text blob out.
#
# Blob (before hex/base64):
#
#   version (1) || nonce (12) || AES-256-GCM ciphertext || tag (16)
#
# Nonce is fresh per call, so the same value sealed twice looks unrelated.
#
import os, json
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from sealtraits.constants import CIPHER_VERSION, KEY_SIZE, NONCE_SIZE, TAG_SIZE, DEFAULT_ENCODING
from sealtraits.exceptions import AuthenticationFailed, EncodingError
from sealtraits.utils import encode_blob, decode_blob

MIN_BLOB_SIZE = 1 + NONCE_SIZE + TAG_SIZE

def field_aad(owner, trait_type):
    # ties a blob to one trait of one owner's record; moving it elsewhere breaks the tag
    return json.dumps([owner, trait_type], separators=(',', ':')).encode('utf-8')

def encrypt_bytes(plaintext, key, aad=None):
    assert len(key) == KEY_SIZE
    nonce = os.urandom(NONCE_SIZE)
    ct = AESGCM(key).encrypt(nonce, plaintext, aad)
    return bytes([CIPHER_VERSION]) + nonce + ct

def decrypt_bytes(blob, key, aad=None):
    assert len(key) == KEY_SIZE

    if len(blob) < MIN_BLOB_SIZE:
        raise AuthenticationFailed("Ciphertext truncated")
    if blob[0] != CIPHER_VERSION:
        raise AuthenticationFailed(f"Unknown cipher version: {blob[0]}")

    nonce = blob[1:1+NONCE_SIZE]
    try:
        return AESGCM(key).decrypt(nonce, blob[1+NONCE_SIZE:], aad)
    except InvalidTag:
        raise AuthenticationFailed("Wrong key or tampered ciphertext")

def encrypt(plaintext, key, aad=None, encoding=DEFAULT_ENCODING):
    # text in, encoded blob out
    if not isinstance(plaintext, str):
        raise EncodingError("Only text values can be sealed")

    return encode_blob(encrypt_bytes(plaintext.encode('utf-8'), key, aad), encoding)

def decrypt(blob_text, key, aad=None):
    # raises EncodingError on malformed text, AuthenticationFailed on anything else
    pt = decrypt_bytes(decode_blob(blob_text), key, aad)

    # authenticated, so this was our own utf-8
    return pt.decode('utf-8')

# EOF
