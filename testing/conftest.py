import pytest

from sealtraits.signers import KeySigner

@pytest.fixture(scope='session')
def owner():
    # fixed key so failures are reproducible
    return KeySigner(b'\x01' * 32, testnet=True)

@pytest.fixture(scope='session')
def other():
    # someone who does not own the record
    return KeySigner(b'\x02' * 32, testnet=True)

@pytest.fixture
def sample_attrs():
    return [ ('Nickname', 'Alice', True), ('Level', '5', False) ]

@pytest.fixture
def cred_for():
    # credential as a wallet would hand it over: address + sig over challenge
    from sealtraits.record import Credential

    def doit(signer, challenge):
        return Credential(signer.address, signer.sign(signer.address, challenge))

    return doit

# EOF
