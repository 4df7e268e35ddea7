#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Nothing imported here: setup.py reads __version__ before dependencies exist.
#
#   write path: sealtraits.assembler.assemble()
#   read path:  sealtraits.gate.reveal() / reveal_with_signer()
#

__version__ = '0.9.0'

__all__ = [ 'keys', 'cipher', 'assembler', 'gate', 'record', 'signers', 'bip32',
            'exceptions', 'constants', 'compat', 'utils', 'store' ]
