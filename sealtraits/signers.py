#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Things that can sign a challenge for an address.
#
# Interface is one method:
#
#   sign(address, message) -> 65-byte recoverable signature, or None
#
# None means "not my address" or "user said no". Keys live only as long as
# the signer object does; nothing here reads the environment.
#
import logging
import threading
from mnemonic import Mnemonic

from sealtraits.bip32 import PrvKeyNode
from sealtraits.compat import CT_pick_keypair, CT_valid_privkey
from sealtraits.constants import DEFAULT_DERIVE_PATH, DEFAULT_TESTNET_PATH, DEFAULT_SIGNER_TIMEOUT
from sealtraits.exceptions import EncodingError, UnauthorizedSigner, SignerTimeout
from sealtraits.utils import render_address, normalize_address, sign_message, decode_privkey
from sealtraits.utils import render_wif, str2path

logger = logging.getLogger(__name__)


class Signer:
    def sign(self, address, message):
        raise NotImplementedError


class KeySigner(Signer):
    # A private key held in memory, acting like a wallet for one address.

    def __init__(self, privkey, testnet=False):
        if not CT_valid_privkey(privkey):
            raise EncodingError("Private key out of range")
        self._privkey = bytes(privkey)
        self.testnet = bool(testnet)
        self.address = render_address(self._privkey, self.testnet)

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.address)

    @classmethod
    def generate(cls, testnet=False):
        pk, _ = CT_pick_keypair()
        return cls(pk, testnet=testnet)

    @classmethod
    def from_text(cls, text, testnet=None):
        # WIF says which chain it's for; hex keys follow the testnet argument
        pk, wif_testnet = decode_privkey(text)
        if testnet is None:
            testnet = bool(wif_testnet)
        return cls(pk, testnet=testnet)

    @property
    def wif(self):
        return render_wif(self._privkey, testnet=self.testnet)

    def sign(self, address, message):
        if normalize_address(address) != self.address:
            logger.debug("%r asked to sign for %s, refusing", self, address)
            return None
        return sign_message(self._privkey, message)


class MnemonicSigner(KeySigner):
    # BIP-39 words + optional passphrase, then one BIP-32 path to a single key.

    def __init__(self, words, passphrase='', path=None, testnet=False):
        words = ' '.join(words.split())
        if not Mnemonic('english').check(words):
            raise EncodingError("Mnemonic is not valid BIP-39 (english)")

        if path is None:
            path = DEFAULT_TESTNET_PATH if testnet else DEFAULT_DERIVE_PATH
        try:
            subpath = str2path(path)
        except ValueError as exc:
            raise EncodingError(str(exc))

        seed = Mnemonic.to_seed(words, passphrase=passphrase)
        node = PrvKeyNode.master_key(seed, testnet=testnet).derive_path(subpath)

        self.path = path
        super().__init__(node.key, testnet=testnet)

    @staticmethod
    def new_words(strength=128):
        return Mnemonic('english').generate(strength=strength)


class CallbackSigner(Signer):
    # Wraps an external wallet call (browser extension, RPC, hardware) and
    # bounds how long we'll wait for the human on the other side.
    #
    # The call runs on a daemon thread: a wallet that never answers is
    # abandoned after the timeout and does not hold up interpreter exit.

    def __init__(self, fn, timeout=DEFAULT_SIGNER_TIMEOUT):
        self.fn = fn
        self.timeout = timeout

    def sign(self, address, message):
        result = {}

        def call():
            try:
                result['sig'] = self.fn(address, message)
            except Exception as exc:
                # handed back to the caller's thread below
                result['error'] = exc

        th = threading.Thread(target=call, name='wallet-signer', daemon=True)
        th.start()
        th.join(self.timeout)

        if th.is_alive():
            raise SignerTimeout(f"No signature from wallet after {self.timeout}s")

        exc = result.get('error')
        if isinstance(exc, UnauthorizedSigner):
            raise exc
        if exc is not None:
            # wallet unreachable, or its RPC layer failed
            raise UnauthorizedSigner(f"Wallet unavailable: {exc}") from exc

        return result.get('sig')

# EOF
