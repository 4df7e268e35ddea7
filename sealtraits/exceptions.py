#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Exceptions
#

class SealError(RuntimeError):
    # numeric codes follow HTTP meanings, so callers can branch on exc.code
    code = 500

    def __init__(self, msg, code=None):
        if code is not None:
            self.code = code
        super().__init__(msg)

class UnauthorizedSigner(SealError):
    # signer unavailable, refused, or signed with the wrong key
    code = 401

class SignerTimeout(UnauthorizedSigner):
    code = 408

class AuthenticationFailed(SealError):
    # AEAD tag check failed: wrong key or tampered blob
    code = 403

class DuplicateTrait(SealError):
    code = 409

class EncodingError(SealError, ValueError):
    # malformed hex/base64 or record shape at a boundary
    code = 400

class RecordExists(SealError):
    # published records are never overwritten
    code = 409

# EOF
