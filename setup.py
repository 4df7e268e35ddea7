#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
#
# Owner-gated NFT attributes: field-level encryption keyed by wallet signatures
#

from sealtraits import __version__

# To use this command to install and yet be able to edit the code (here). Great for dev:
#
#   pip install --editable .
#
# with cli dependencies
#
#   pip install --editable '.[cli]'
#
# with test dependencies
#
#   pip install --editable '.[test]'
#
#
from setuptools import setup

# these minimum versions are tested, some earlier values would probably work too.
requirements = [
    'cbor2>=5.4.1',
    'coincurve>=15.0.1',
    'cryptography>=41.0.0',
    'pycryptodome>=3.15.0',
    'bech32>=1.2.0',
    'base58>=2.1.0',
    'mnemonic>=0.20',
    'requests>=2.26.0',
]

cli_requirements = [
    'click>=8.0.3',
]

test_requirements = [
    'pytest',
] + cli_requirements

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name='sealed-traits',
    version=__version__,
    packages=[ 'sealtraits' ],
    python_requires='>=3.8',
    install_requires=requirements,
    extras_require={
        'cli': cli_requirements,
        'test': test_requirements,
    },
    author='Coinkite Inc.',
    author_email='support@coinkite.com',
    description="Encrypt NFT attributes so only the owner's wallet can reveal them",
    long_description=long_description,
    long_description_content_type="text/markdown",
    entry_points='''
        [console_scripts]
        sealtraits=sealtraits.cli:main
    ''',
    classifiers=[
        'Operating System :: POSIX :: Linux',
        'Operating System :: Microsoft :: Windows',
        'Operating System :: MacOS :: MacOS X',
    ],
)
