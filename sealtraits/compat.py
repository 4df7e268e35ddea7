#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Wrappers for the crypto libraries. AKA API Cleanup
#
# My standards:
# - pubkeys: 33 bytes, always compressed
# - private key: 32 bytes
# - signature: 65 bytes, recoverable, BIP-137 header first
# - no DER, no PEM, no other serializations
# - message digests (for sig/verify) are already digested
# - ECDSA verify returns bool, doesn't raise exception
#
# nice docs: <https://ofek.dev/coincurve/api/>
#
from hashlib import sha256

from Crypto.Hash import RIPEMD160
from coincurve import PrivateKey, PublicKey

from sealtraits.constants import HEADER_P2PKH, HEADER_P2WPKH

__all__ = [ 'sha256s', 'hash160',
            'CT_sig_to_pubkey', 'CT_sign',
            'CT_pick_keypair', 'CT_priv_to_pubkey', 'CT_valid_privkey' ]

def sha256s(msg):
    # single-shot SHA256
    return sha256(msg).digest()

def hash160(x):
    # classic bitcoin nested hashes
    return RIPEMD160.new(sha256s(x)).digest()

def CT_sig_to_pubkey(msg_digest, sig):
    # returns a pubkey (33 bytes), or raises ValueError
    assert len(sig) == 65
    rec_id = sig[0]
    # from BIP-137
    if HEADER_P2PKH <= rec_id <= HEADER_P2PKH + 3:
        rec_id -= HEADER_P2PKH      # P2PKH compressed (most compatible)
    elif HEADER_P2WPKH <= rec_id <= HEADER_P2WPKH + 3:
        rec_id -= HEADER_P2WPKH     # P2WPKH (most correct for this project)
    else:
        raise ValueError(f'See BIP-137 for recid encoding, saw: {rec_id}')

    sig2 = sig[1:] + bytes([rec_id])
    nxt = PublicKey.from_signature_and_message(sig2, msg_digest, hasher=None)
    return nxt.format()

def CT_pick_keypair():
    # Choose pub/private pair, return private key (32 bytes) and compressed pubkey
    pk = PrivateKey()
    return pk.secret, pk.public_key.format()

def CT_sign(privkey, msg_digest):
    # 65-byte recoverable signature, BIP-137 header first.
    # RFC 6979 nonces inside libsecp256k1: same key + digest => same signature
    sig = PrivateKey(privkey).sign_recoverable(msg_digest, hasher=None)
    # rec_id is at the end, move it to front
    return bytes([HEADER_P2WPKH + sig[-1]]) + sig[0:64]

def CT_priv_to_pubkey(priv):
    return PrivateKey(priv).public_key.format()

def CT_valid_privkey(priv):
    # within curve order and non-zero
    if len(priv) != 32:
        return False
    try:
        PrivateKey(priv)
        return True
    except ValueError:
        return False

# EOF
