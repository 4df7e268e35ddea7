#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Private-key side of BIP-32, enough to turn a BIP-39 seed into the
# signing key for one address.
#

import hmac
import hashlib
from typing import List

import base58

from sealtraits.compat import CT_priv_to_pubkey, hash160


HARDENED = 2 ** 31

# secp256k1 group order
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def big_endian_to_int(b: bytes) -> int:
    return int.from_bytes(b, "big")


def int_to_big_endian(n: int, length: int) -> bytes:
    return n.to_bytes(length, "big")


class InvalidKeyError(Exception):
    """Raised when derived key is invalid"""


class PrvKeyNode(object):

    mark: str = "m"
    testnet_version: int = 0x04358394
    mainnet_version: int = 0x0488ADE4

    __slots__ = (
        "parent",
        "key",
        "chain_code",
        "depth",
        "index",
        "testnet",
    )

    def __init__(self, key: bytes, chain_code: bytes, index: int = 0,
                 depth: int = 0, testnet: bool = False,
                 parent: "PrvKeyNode" = None):
        """
        Initializes PrvKeyNode.

        :param key: private key (32 bytes)
        :param chain_code: chain code
        :param index: current node derivation index (default=0)
        :param depth: current node depth (default=0)
        :param testnet: whether this node is testnet node (default=False)
        :param parent: parent node of the current node (default=None)
        """
        self.parent = parent
        self.key = key
        self.chain_code = chain_code
        self.depth = depth
        self.index = index
        self.testnet = testnet

    def __repr__(self) -> str:
        if self.parent is None:
            return self.mark
        idx = self.index
        if idx >= HARDENED:
            return "%r/%d'" % (self.parent, idx - HARDENED)
        return "%r/%d" % (self.parent, idx)

    def sec(self) -> bytes:
        # compressed pubkey
        return CT_priv_to_pubkey(self.key)

    def fingerprint(self) -> bytes:
        return hash160(self.sec())[:4]

    @property
    def parent_fingerprint(self) -> bytes:
        if self.parent:
            return self.parent.fingerprint()
        return b"\x00\x00\x00\x00"

    @classmethod
    def master_key(cls, bip39_seed: bytes, testnet=False) -> "PrvKeyNode":
        """
        Generates master private key node from bip39 seed.

        * Calculate I = HMAC-SHA512(Key = "Bitcoin seed", Data = S)
        * Split I into two 32-byte sequences, IL and IR.
        * Use parse256(IL) as master secret key, and IR as master chain code.

        :param bip39_seed: bip39_seed
        :param testnet: whether this node is testnet node (default=False)
        :return: master private key node
        """
        I = hmac.new(key=b"Bitcoin seed", msg=bip39_seed, digestmod=hashlib.sha512).digest()
        IL, IR = I[:32], I[32:]
        # In case IL is 0 or >= n, the master key is invalid
        int_left_key = big_endian_to_int(IL)
        if int_left_key == 0:
            raise InvalidKeyError("master key is zero")
        if int_left_key >= N:
            raise InvalidKeyError("master key is greater/equal to curve order")
        return cls(key=IL, chain_code=IR, testnet=testnet)

    def extended_private_key(self) -> str:
        """
        Base58 encodes serialized private key node (xprv/tprv).
        """
        version = self.testnet_version if self.testnet else self.mainnet_version
        raw = int_to_big_endian(version, 4) \
                + bytes([self.depth]) \
                + self.parent_fingerprint \
                + int_to_big_endian(self.index, 4) \
                + self.chain_code \
                + b"\x00" + self.key
        return base58.b58encode_check(raw).decode('ascii')

    def ckd(self, index: int) -> "PrvKeyNode":
        """
        CKDpriv((kpar, cpar), i) -> (ki, ci)

        * hardened child: I = HMAC-SHA512(Key=cpar, Data=0x00 || ser256(kpar) || ser32(i))
        * normal child:   I = HMAC-SHA512(Key=cpar, Data=serP(point(kpar)) || ser32(i))
        * ki = parse256(IL) + kpar (mod n), ci = IR

        :param index: derivation index
        :return: derived child
        """
        if index >= HARDENED:
            data = b"\x00" + self.key + int_to_big_endian(index, 4)
        else:
            data = self.sec() + int_to_big_endian(index, 4)
        I = hmac.new(key=self.chain_code, msg=data, digestmod=hashlib.sha512).digest()
        IL, IR = I[:32], I[32:]
        if big_endian_to_int(IL) >= N:
            raise InvalidKeyError("derived tweak is greater/equal to curve order")
        ki = (big_endian_to_int(IL) + big_endian_to_int(self.key)) % N
        if ki == 0:
            raise InvalidKeyError("private key is zero")
        return self.__class__(
            key=int_to_big_endian(ki, 32),
            chain_code=IR,
            index=index,
            depth=self.depth + 1,
            testnet=self.testnet,
            parent=self
        )

    def derive_path(self, index_list: List[int]) -> "PrvKeyNode":
        node = self
        for i in index_list:
            node = node.ckd(index=i)
        return node

# EOF
