#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# System constants.
#

# Fixed message the owner signs to unlock gated attributes. Write and read
# paths must agree on it byte for byte, or the derived keys will differ.
CHALLENGE_MSG = 'Authorize decryption'

# appended to the challenge when a record asks for a fresh one
CHALLENGE_NONCE_PREFIX = '\nnonce: '
CHALLENGE_NONCE_SIZE = 16

# HKDF "info" label; bump with CIPHER_VERSION
KDF_INFO = b'sealtraits-field-key-v1'

# AES-256-GCM
KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

# first byte of each ciphertext blob
CIPHER_VERSION = 0x01

# tag on every published record
RECORD_VERSION = 'SEALTRAITS_v1'

# how blobs cross the store boundary: 'base64' or 'hex' (with 0x prefix)
DEFAULT_ENCODING = 'base64'
ENCODINGS = ( 'base64', 'hex' )

# wallet-style signed message framing
MSG_MAGIC = b'\x18Bitcoin Signed Message:\n'

# BIP-137 header byte: 31..34 = P2PKH compressed, 39..42 = P2WPKH
HEADER_P2PKH = 31
HEADER_P2WPKH = 39

# default BIP-32 path for mnemonic signers (first receive address, BIP-84)
DEFAULT_DERIVE_PATH = 'm/84h/0h/0h/0/0'
DEFAULT_TESTNET_PATH = 'm/84h/1h/0h/0/0'

# bound on how long an external wallet may take to answer (seconds)
DEFAULT_SIGNER_TIMEOUT = 60

# EOF
