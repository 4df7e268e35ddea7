#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Read path: given a published record and (maybe) a credential, decide
# what the caller gets to see.
#
# Per attribute, one of:
#   Revealed  - public, or gated and the credential's key opened it
#   Hidden    - gated, and no credential / not the owner / bad signature
#   Failed    - gated blob is malformed (only the trait name survives)
#
# Non-owners are an everyday case, not an error: they get Hidden, never an exception.
#
import logging

from sealtraits.exceptions import AuthenticationFailed, EncodingError, UnauthorizedSigner
from sealtraits.record import RevealedAttribute, RevealState
from sealtraits.keys import key_from_credential, request_credential
from sealtraits.cipher import decrypt, field_aad

logger = logging.getLogger(__name__)

def _hidden(attr, state=RevealState.HIDDEN, error=None):
    # ciphertext never leaves here as if it were a value
    return RevealedAttribute(trait_type=attr.trait_type, value=None, public=False,
                                state=state, error=error)

def reveal(record, credential=None, strict=False):
    '''
    Returns list of RevealedAttribute, same order as record.attributes.

    With strict=True a malformed blob raises EncodingError instead of
    becoming a Failed entry.
    '''
    key = None
    if credential is not None and record.gated:
        try:
            key = key_from_credential(credential, record.challenge)
        except UnauthorizedSigner as exc:
            logger.info("credential rejected, gated attributes stay hidden: %s", exc)

    rv = []
    for attr in record.attributes:
        if attr.public:
            rv.append(RevealedAttribute(trait_type=attr.trait_type, value=attr.value,
                                            public=True, state=RevealState.REVEALED))
            continue

        if key is None:
            rv.append(_hidden(attr))
            continue

        try:
            value = decrypt(attr.value, key, aad=field_aad(record.owner, attr.trait_type))
        except AuthenticationFailed:
            logger.debug("%s: not opened by %s", attr.trait_type, credential.address)
            rv.append(_hidden(attr))
            continue
        except EncodingError as exc:
            if strict:
                raise
            logger.warning("%s: malformed ciphertext in record: %s", attr.trait_type, exc)
            rv.append(_hidden(attr, RevealState.FAILED, exc))
            continue

        rv.append(RevealedAttribute(trait_type=attr.trait_type, value=value,
                                        public=False, state=RevealState.REVEALED))

    return rv

def reveal_with_signer(record, address, signer, strict=False):
    # Ask a wallet for the credential first. A wallet that says no, is
    # the wrong one, or never answers leaves the caller with the public view.
    cred = None
    if record.gated:
        try:
            cred = request_credential(address, record.challenge, signer)
        except UnauthorizedSigner as exc:
            logger.info("no credential from signer for %s: %s", address, exc)

    return reveal(record, cred, strict=strict)

# EOF
