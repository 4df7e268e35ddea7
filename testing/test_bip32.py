#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# BIP-32 / BIP-39 vectors for the mnemonic signer's key derivation.
#
import pytest

from sealtraits.bip32 import PrvKeyNode, HARDENED
from sealtraits.exceptions import EncodingError
from sealtraits.signers import MnemonicSigner
from sealtraits.utils import str2path
from mnemonic import Mnemonic

ABANDON = ' '.join(['abandon'] * 11 + ['about'])


def test_vector_1():
    # Chain m
    seed = "000102030405060708090a0b0c0d0e0f"
    m = PrvKeyNode.master_key(bip39_seed=bytes.fromhex(seed))
    assert m.extended_private_key() == "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPGJxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"
    assert repr(m) == "m"

    # chain m/0'
    m0h = m.ckd(index=2**31)
    assert m0h.extended_private_key() == "xprv9uHRZZhk6KAJC1avXpDAp4MDc3sQKNxDiPvvkX8Br5ngLNv1TxvUxt4cV1rGL5hj6KCesnDYUhd7oWgT11eZG7XnxHrnYeSvkzY7d2bhkJ7"
    assert repr(m0h) == "m/0'"

    # chain m/0'/1
    m0h1 = m0h.ckd(index=1)
    assert m0h1.extended_private_key() == "xprv9wTYmMFdV23N2TdNG573QoEsfRrWKQgWeibmLntzniatZvR9BmLnvSxqu53Kw1UmYPxLgboyZQaXwTCg8MSY3H2EU4pWcQDnRnrVA1xe8fs"
    assert repr(m0h1) == "m/0'/1"

    # chain m/0'/1/2'
    m0h12h = m0h1.ckd(index=2**31+2)
    assert m0h12h.extended_private_key() == "xprv9z4pot5VBttmtdRTWfWQmoH1taj2axGVzFqSb8C9xaxKymcFzXBDptWmT7FwuEzG3ryjH4ktypQSAewRiNMjANTtpgP4mLTj34bhnZX7UiM"
    assert repr(m0h12h) == "m/0'/1/2'"

    # chain m/0'/1/2'/2/1000000000 via path helper
    deep = m.derive_path(str2path("m/0h/1/2h/2/1000000000"))
    assert deep.extended_private_key() == "xprvA41z7zogVVwxVSgdKUHDy1SKmdb533PjDz7J6N6mV6uS3ze1ai8FHa8kmHScGpWmj4WggLyQjgPie1rFSruoUihUZREPSL39UNdE3BBDu76"
    assert repr(deep) == "m/0'/1/2'/2/1000000000"

def test_vector_2():
    seed = "fffcf9f6f3f0edeae7e4e1dedbd8d5d2cfccc9c6c3c0bdbab7b4b1aeaba8a5a29f9c999693908d8a8784817e7b7875726f6c696663605d5a5754514e4b484542"
    m = PrvKeyNode.master_key(bip39_seed=bytes.fromhex(seed))
    assert m.extended_private_key() == "xprv9s21ZrQH143K31xYSDQpPDxsXRTUcvj2iNHm5NUtrGiGG5e2DtALGdso3pGz6ssrdK4PFmM8NSpSBHNqPqm55Qn3LqFtT2emdEXVYsCzC2U"

    # Chain m/0 (not hardened, uses the pubkey)
    m0 = m.ckd(index=0)
    assert m0.extended_private_key() == "xprv9vHkqa6EV4sPZHYqZznhT2NPtPCjKuDKGY38FBWLvgaDx45zo9WQRUT3dKYnjwih2yJD9mkrocEZXo1ex8G81dwSM1fwqWpWkeS3v86pgKt"

    # Chain m/0/2147483647'/1
    n = m0.ckd(index=2**31+2147483647).ckd(index=1)
    assert n.extended_private_key() == "xprv9zFnWC6h2cLgpmSA46vutJzBcfJ8yaJGg8cX1e5StJh45BBciYTRXSd25UEPVuesF9yog62tGAQtHjXajPPdbRCHuWS6T8XA2ECKADdw4Ef"

def test_vector_4():
    # https://blog.polychainlabs.com/bitcoin,/bip32,/bip39,/kdf/2021/05/17/inconsistent-bip32-derivations.html
    seed = "1cae71ac5ed584ff88a078a119512d12bb61e5398521785e123b6d08809d44b2"
    m = PrvKeyNode.master_key(bip39_seed=bytes.fromhex(seed))
    assert m.extended_private_key() == "xprv9s21ZrQH143K2HsXq3u7Q9ZHYT2KfJ4qQxLM1B4utM3miUwiY4NJZdEPzDpzbH7xxtMr3QfT2VH13rabABKkw1eLU83YC1QMeXsX3DBe2yP"

    m44h = m.ckd(index=44 + HARDENED)
    assert m44h.extended_private_key() == "xprv9v6FwbtSvWrJ8x4kaQVSQcKWYUEHU1Pn8peA5KZmvjrWe5BqFqeeNdsQuqDXN9JqeAxmAvs5v682JLDQZJsB8Up4guNVPSGidN19N2iH1Lr"

    m44h0h = m44h.ckd(index=HARDENED)
    assert m44h0h.extended_private_key() == "xprv9xfLHXpU7kFDoqiqV3g9WXN8Mt1PSR8ypLXaPcNvo68mEcreahJ4g1K4TWqn4qu6HCKByGeivW9neAEzSS7idYdpGaGXJgvb79fxvV4qhse"

def test_vector_5():
    # https://github.com/bitcoin/bips/pull/1030
    seed = "3ddd5602285899a946114506157c7997e5444528f3003f6134712147db19b678"
    m = PrvKeyNode.master_key(bip39_seed=bytes.fromhex(seed))
    assert m.extended_private_key() == "xprv9s21ZrQH143K48vGoLGRPxgo2JNkJ3J3fqkirQC2zVdk5Dgd5w14S7fRDyHH4dWNHUgkvsvNDCkvAwcSHNAQwhwgNMgZhLtQC63zxwhQmRv"

    m0h1h = m.derive_path([HARDENED, 1 + HARDENED])
    assert m0h1h.extended_private_key() == "xprv9xJocDuwtYCMNAo3Zw76WENQeAS6WGXQ55RCy7tDJ8oALr4FWkuVoHJeHVAcAqiZLE7Je3vZJHxspZdFHfnBEjHqU5hG1Jaj32dVoS6XLT1"

def test_testnet_version():
    m = PrvKeyNode.master_key(bytes(16), testnet=True)
    assert m.extended_private_key().startswith('tprv')

def test_bip39_seed():
    # BIP-39 reference vector (passphrase "TREZOR")
    seed = Mnemonic.to_seed(ABANDON, passphrase="TREZOR")
    assert seed.hex() == "c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e53495531f09a6987599d18264c1e1c92f2cf141630c7a3c4ab7c81b2f001698e7463b04"

def test_mnemonic_signer():
    # BIP-84 reference: first receive address
    s = MnemonicSigner(ABANDON)
    assert s.path == 'm/84h/0h/0h/0/0'
    assert s.address == 'bc1qcr8te4kr609gcawutmrza0j4xv80jy8z306fyu'

    # extra whitespace is not a different wallet
    assert MnemonicSigner('  ' + ABANDON.replace(' ', '   ') + '\n').address == s.address

    # passphrase is a different wallet
    assert MnemonicSigner(ABANDON, passphrase='x').address != s.address

    t = MnemonicSigner(ABANDON, testnet=True)
    assert t.path == 'm/84h/1h/0h/0/0'
    assert t.address.startswith('tb1q')

def test_mnemonic_errors():
    with pytest.raises(EncodingError):
        MnemonicSigner(' '.join(['abandon'] * 12))
    with pytest.raises(EncodingError):
        MnemonicSigner(ABANDON, path="m/84h/h")

def test_new_words():
    w = MnemonicSigner.new_words()
    assert len(w.split()) == 12
    assert MnemonicSigner(w).address.startswith('bc1q')

# EOF
