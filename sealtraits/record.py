#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Records as published to the (external, immutable) store, and the
# short-lived values that travel with a read request.
#
# Published shape:
#
#   { "version": "SEALTRAITS_v1",
#     "owner": "bc1q...",
#     "challenge": "Authorize decryption",
#     "attributes": [ { "trait_type": "Nickname", "value": "<blob>", "public": false },
#                     { "trait_type": "Level", "value": "5", "public": true } ] }
#
import json, base64, binascii
import cbor2
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

from sealtraits.constants import CHALLENGE_MSG, RECORD_VERSION
from sealtraits.exceptions import DuplicateTrait, EncodingError
from sealtraits.utils import normalize_address


@dataclass(frozen=True)
class Attribute:
    trait_type: str
    value: str
    public: bool = True

    def __post_init__(self):
        if not isinstance(self.trait_type, str) or not self.trait_type:
            raise EncodingError("trait_type must be non-empty text")
        if not isinstance(self.value, str):
            raise EncodingError(f"Value for {self.trait_type!r} must be text")
        if not isinstance(self.public, bool):
            raise EncodingError(f"'public' flag for {self.trait_type!r} must be boolean")

    def as_dict(self):
        return dict(trait_type=self.trait_type, value=self.value, public=self.public)

    @classmethod
    def from_dict(cls, d):
        try:
            return cls(trait_type=d['trait_type'], value=d['value'], public=d['public'])
        except (KeyError, TypeError):
            raise EncodingError(f"Badly formed attribute: {d!r}")


def check_unique(trait_types):
    seen = set()
    for tt in trait_types:
        if tt in seen:
            raise DuplicateTrait(f"Trait appears twice: {tt!r}")
        seen.add(tt)


@dataclass(frozen=True)
class Record:
    owner: str
    attributes: Tuple[Attribute, ...]
    challenge: str = CHALLENGE_MSG
    version: str = RECORD_VERSION

    def __post_init__(self):
        # frozen, so sneak past our own setattr
        object.__setattr__(self, 'owner', normalize_address(self.owner))
        object.__setattr__(self, 'attributes', tuple(self.attributes))

        if not isinstance(self.challenge, str) or not self.challenge:
            raise EncodingError("Record needs a challenge message")
        if self.version != RECORD_VERSION:
            raise EncodingError(f"Unsupported record version: {self.version!r}")
        for a in self.attributes:
            if not isinstance(a, Attribute):
                raise EncodingError(f"Not an Attribute: {a!r}")
        check_unique(a.trait_type for a in self.attributes)

    def __getitem__(self, trait_type):
        for a in self.attributes:
            if a.trait_type == trait_type:
                return a
        raise KeyError(trait_type)

    @property
    def trait_types(self):
        return [a.trait_type for a in self.attributes]

    @property
    def gated(self):
        return [a for a in self.attributes if not a.public]

    def to_dict(self):
        return dict(version=self.version, owner=self.owner, challenge=self.challenge,
                    attributes=[a.as_dict() for a in self.attributes])

    def to_json(self, pretty=False):
        if pretty:
            return json.dumps(self.to_dict(), indent=2)
        return json.dumps(self.to_dict(), separators=(',', ':'))

    def to_cbor(self):
        return cbor2.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d):
        if not isinstance(d, dict):
            raise EncodingError("Record must be a mapping")
        try:
            attrs = [Attribute.from_dict(a) for a in d['attributes']]
            return cls(owner=d['owner'], attributes=attrs,
                        challenge=d.get('challenge', CHALLENGE_MSG),
                        version=d.get('version', RECORD_VERSION))
        except (KeyError, TypeError):
            raise EncodingError("Record missing owner or attributes")

    @classmethod
    def from_json(cls, text):
        try:
            d = json.loads(text)
        except ValueError as exc:
            raise EncodingError(f"Bad json: {exc}")
        return cls.from_dict(d)

    @classmethod
    def from_cbor(cls, raw):
        try:
            d = cbor2.loads(raw)
        except (cbor2.CBORDecodeError, ValueError) as exc:
            raise EncodingError(f"Bad CBOR: {exc}")
        return cls.from_dict(d)


@dataclass(frozen=True)
class Credential:
    # what a reader hands over: their address and a signature over the challenge
    address: str
    signature: bytes = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'address', normalize_address(self.address))
        if not isinstance(self.signature, (bytes, bytearray)) or len(self.signature) != 65:
            raise EncodingError("Credential needs a 65-byte recoverable signature")

    @classmethod
    def from_text(cls, address, sig_b64):
        # signature as wallets print it: base64, one line
        try:
            sig = base64.b64decode(sig_b64.strip().encode('ascii'), validate=True)
        except (ValueError, binascii.Error):
            raise EncodingError("Signature is not base64")
        return cls(address=address, signature=sig)

    @property
    def sig_text(self):
        return base64.b64encode(self.signature).decode('ascii')


class RevealState(str, Enum):
    REVEALED = 'Revealed'
    HIDDEN = 'Hidden'
    FAILED = 'Failed'


@dataclass(frozen=True)
class RevealedAttribute:
    trait_type: str
    value: Optional[str]
    public: bool
    state: RevealState
    error: Optional[Exception] = field(default=None, compare=False)

    @property
    def is_revealed(self):
        return self.state == RevealState.REVEALED

    def as_dict(self):
        return dict(trait_type=self.trait_type, value=self.value, public=self.public,
                    state=self.state.value)

# EOF
