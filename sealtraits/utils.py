# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import base64, binascii, struct
import base58, bech32
from binascii import b2a_hex
from .constants import *
from .compat import hash160, sha256s
from .compat import CT_sig_to_pubkey, CT_priv_to_pubkey, CT_sign, CT_valid_privkey
from .exceptions import EncodingError

# show bytes as hex in a string
B2A = lambda x: b2a_hex(x).decode('ascii')

def force_bytes(foo):
    # convert strings to bytes where needed
    return foo.encode('utf-8') if isinstance(foo, str) else foo

# Serialization/deserialization tools
# - need this for text msg signing
def ser_compact_size(l):
    if l < 253:
        return struct.pack("B", l)
    elif l < 0x10000:
        return struct.pack("<BH", 253, l)
    elif l < 0x100000000:
        return struct.pack("<BI", 254, l)
    else:
        return struct.pack("<BQ", 255, l)

def message_digest(message):
    # What a wallet really signs when asked to "sign a message"
    message = force_bytes(message)
    xmsg = MSG_MAGIC + ser_compact_size(len(message)) + message
    return sha256s(sha256s(xmsg))

def sign_message(privkey, message):
    # 65-byte recoverable signature over the framed message
    return CT_sign(privkey, message_digest(message))

#
# Addresses
#
def render_address(pubkey, testnet=False):
    # make the text string used as a payment address (P2WPKH)

    if len(pubkey) == 32:
        # actually a private key, convert
        pubkey = CT_priv_to_pubkey(pubkey)

    HRP = 'bc' if not testnet else 'tb'
    return bech32.encode(HRP, 0, hash160(pubkey))

def parse_address(addr):
    # returns (is_testnet, 20-byte witness program) or raises
    if not isinstance(addr, str):
        raise EncodingError("Address must be text")

    addr = addr.strip().lower()
    for hrp, testnet in [('bc', False), ('tb', True)]:
        if not addr.startswith(hrp + '1'):
            continue
        ver, prog = bech32.decode(hrp, addr)
        if ver == 0 and prog and len(prog) == 20:
            return testnet, bytes(prog)

    raise EncodingError(f"Not a P2WPKH address: {addr}")

def normalize_address(addr):
    # bech32 is case-insensitive, but mixed case is not allowed; we store lower
    parse_address(addr)
    return addr.strip().lower()

def recover_message_signer(message, sig):
    # compressed pubkey that made a recoverable signature over the message
    if len(sig) != 65:
        raise ValueError(f"Need 65-byte recoverable signature, got {len(sig)}")
    return CT_sig_to_pubkey(message_digest(message), sig)

def verify_message(address, message, sig):
    # True if the signature over message was made by key behind address
    try:
        testnet, _ = parse_address(address)
        pubkey = recover_message_signer(message, sig)
    except ValueError:
        return False

    return render_address(pubkey, testnet) == normalize_address(address)

#
# Private keys in text form
#
def render_wif(privkey, testnet=False):
    # Show the WIF in useful text format (base58), compressed pubkey flag set
    assert len(privkey) == 32

    prefix = bytes([0x80 if not testnet else 0xef])
    return base58.b58encode_check(prefix + privkey + b'\x01').decode('ascii')

def decode_privkey(text):
    # accept a WIF or 64 hex digits, return (privkey, testnet-or-None)
    text = text.strip()
    if len(text) == 64:
        try:
            pk = bytes.fromhex(text)
        except ValueError:
            raise EncodingError("Bad hex in private key")
        testnet = None
    else:
        try:
            raw = base58.b58decode_check(text)
        except ValueError:
            raise EncodingError("Bad WIF checksum")

        if len(raw) not in (33, 34) or raw[0] not in (0x80, 0xef):
            raise EncodingError("Unknown WIF format")
        pk = raw[1:33]
        testnet = (raw[0] == 0xef)

    if not CT_valid_privkey(pk):
        raise EncodingError("Private key out of range")

    return pk, testnet

#
# Ciphertext blobs at the store boundary
#
def encode_blob(raw, encoding=DEFAULT_ENCODING):
    if encoding == 'hex':
        return '0x' + B2A(raw)
    elif encoding == 'base64':
        return base64.b64encode(raw).decode('ascii')
    raise EncodingError(f"Unknown encoding: {encoding}")

def decode_blob(text):
    # hex blobs carry a 0x prefix, anything else must be strict base64.
    # Only the exact text encode_blob() would make is accepted, so one blob
    # has one spelling.
    if not isinstance(text, str):
        raise EncodingError("Blob must be text")
    enc = 'hex' if text[0:2] == '0x' else 'base64'
    try:
        if enc == 'hex':
            raw = bytes.fromhex(text[2:])
        else:
            raw = base64.b64decode(text.encode('ascii'), validate=True)
    except (ValueError, binascii.Error) as exc:
        raise EncodingError(f"Malformed blob: {exc}")

    if encode_blob(raw, enc) != text:
        raise EncodingError("Blob text is not in canonical form")

    return raw

#
# BIP-32 paths
#

# high bit set in LE32 indicating hardened BIP-32 path component
HARDENED = 0x8000_0000

def path_component_in_range(num: int) -> bool:
    # cannot be less than 0
    # cannot be more than (2 ** 31) - 1
    return 0 <= num < HARDENED

def path2str(path):
    # take numeric path (list of numbers) and convert to human form
    # - standardizing on "m/84h" style
    return '/'.join(['m'] + [str(i & ~HARDENED)+('h' if i&HARDENED else '') for i in path])

def str2path(path):
    # normalize notation and return numbers
    rv = []

    for i in path.split('/'):
        if i == 'm':
            continue
        if not i:
            # trailing or duplicated slashes
            continue

        if i[-1] in "'phHP":
            if len(i) < 2:
                raise ValueError(f"Malformed bip32 path component: {i}")
            num = int(i[:-1], 0)
            if not path_component_in_range(num):
                raise ValueError(f"Hardened path component out of range: {i}")
            here = num | HARDENED
        else:
            here = int(i, 0)
            if not path_component_in_range(here):
                raise ValueError(f"Non-hardened path component out of range: {i}")

        rv.append(here)

    return rv

# EOF
