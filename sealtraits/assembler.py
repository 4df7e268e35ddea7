#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Write path: build the record that gets published.
#
import logging

from sealtraits.constants import DEFAULT_ENCODING, ENCODINGS
from sealtraits.exceptions import EncodingError, UnauthorizedSigner
from sealtraits.record import Attribute, Record, check_unique
from sealtraits.keys import derive_key, make_challenge
from sealtraits.cipher import encrypt, field_aad
from sealtraits.utils import normalize_address

logger = logging.getLogger(__name__)

def _flag(v, name):
    # strings like 'false' are truthy; never guess which way a secret goes
    if not isinstance(v, bool):
        raise EncodingError(f"'{name}' must be true or false, got {v!r}")
    return v

def parse_attribute(item):
    # Accepts (trait_type, value, is_gated), (trait_type, value),
    # a dict with 'gated'/'is_gated' or 'public', or an Attribute.
    # Returns (trait_type, value, is_gated)
    if isinstance(item, Attribute):
        return item.trait_type, item.value, not item.public

    if isinstance(item, dict):
        try:
            tt, value = item['trait_type'], item['value']
        except KeyError:
            raise EncodingError(f"Attribute needs trait_type and value: {item!r}")
        if 'public' in item:
            gated = not _flag(item['public'], 'public')
        else:
            gated = _flag(item.get('gated', item.get('is_gated', False)), 'gated')
    elif isinstance(item, (tuple, list)) and len(item) in (2, 3):
        tt, value = item[0], item[1]
        gated = _flag(item[2], 'gated') if len(item) == 3 else False
    else:
        raise EncodingError(f"Cannot understand attribute: {item!r}")

    if not isinstance(tt, str) or not tt:
        raise EncodingError(f"trait_type must be non-empty text: {tt!r}")
    if not isinstance(value, str):
        raise EncodingError(f"Value for {tt!r} must be text, got {type(value).__name__}")

    return tt, value, gated

def assemble(owner_identity, attributes, signer=None, challenge=None,
                fresh_challenge=False, encoding=DEFAULT_ENCODING):
    '''
    Build a Record for owner_identity from ordered attributes.

    Gated values are encrypted under a key derived from the owner's signature
    over the challenge; the signer is asked once, and only if something is gated.
    Fails with DuplicateTrait before any signing if trait names repeat.
    '''
    owner = normalize_address(owner_identity)
    if encoding not in ENCODINGS:
        raise EncodingError(f"Unknown encoding: {encoding}")

    items = [parse_attribute(i) for i in attributes]
    check_unique(tt for tt, _, _ in items)

    if challenge is None:
        challenge = make_challenge(fresh=fresh_challenge)

    key = None
    out = []
    for tt, value, gated in items:
        if not gated:
            out.append(Attribute(trait_type=tt, value=value, public=True))
            continue

        if key is None:
            if signer is None:
                raise UnauthorizedSigner("Gated attributes need the owner's signer")
            key = derive_key(owner, challenge, signer)

        blob = encrypt(value, key, aad=field_aad(owner, tt), encoding=encoding)
        out.append(Attribute(trait_type=tt, value=blob, public=False))

    del key

    rv = Record(owner=owner, attributes=out, challenge=challenge)
    logger.info("assembled record for %s: %d attributes, %d gated",
                    owner, len(rv.attributes), len(rv.gated))

    return rv

# EOF
