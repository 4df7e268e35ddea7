#!/usr/bin/env python
#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# To use this, install with:
#
#   pip install --editable .
#
# That will create the command "sealtraits" in your path.
#
#
import click, sys, json, logging
from getpass import getpass

from sealtraits import __version__
from sealtraits.constants import *
from sealtraits.exceptions import SealError, EncodingError
from sealtraits.assembler import assemble, parse_attribute
from sealtraits.gate import reveal, reveal_with_signer
from sealtraits.keys import request_signature, verify_challenge_signature
from sealtraits.record import Record, Credential, RevealState
from sealtraits.signers import KeySigner, MnemonicSigner
from sealtraits.store import DirectoryStore, RecordFetcher

# dict of options that apply to all commands
global global_opts
global_opts = dict()

# Cleanup display (supress traceback) for user-feedback exceptions
_sys_excepthook = sys.excepthook
def my_hook(ty, val, tb):
    if issubclass(ty, SealError):
        print("FATAL: %s" % val, file=sys.stderr)
    else:
        return _sys_excepthook(ty, val, tb)
sys.excepthook=my_hook

def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)

def get_signer(key=None, words=False, passphrase=None, path=None):
    # Build a signer from what the user gave us, prompting for secrets
    testnet = global_opts.get('testnet', False)

    if key and words:
        fail("Provide a private key or a mnemonic, not both")

    if key:
        if key == '-':
            key = getpass("Private key (WIF or hex): ")
        return KeySigner.from_text(key, testnet=(testnet or None))

    if words:
        w = getpass("Enter BIP-39 words: ")
        if passphrase == '-':
            passphrase = getpass("Enter BIP-39 passphrase: ")
        return MnemonicSigner(w, passphrase=passphrase or '', path=path, testnet=testnet)

    return None

def read_record(fname):
    # JSON from a file or stdin, or CBOR if the filename says so
    if fname == '-':
        return Record.from_json(sys.stdin.read())

    with open(fname, 'rb') as fd:
        raw = fd.read()

    if fname.endswith('.cbor'):
        return Record.from_cbor(raw)
    return Record.from_json(raw.decode('utf-8'))

def write_record(record, outfile, as_cbor=False):
    if as_cbor:
        if not outfile:
            fail("CBOR output needs --outfile")
        with open(outfile, 'wb') as fd:
            fd.write(record.to_cbor())
        click.echo(f"Wrote: {outfile}", err=True)
    elif outfile:
        with open(outfile, 'wt') as fd:
            fd.write(record.to_json(pretty=True))
        click.echo(f"Wrote: {outfile}", err=True)
    else:
        click.echo(record.to_json(pretty=True))

def key_options(f):
    # options shared by every command that may need to sign
    f = click.option('--path', '-p', default=None, metavar="m/84h/0h/0h/0/0",
                        help="BIP-32 path used with --words")(f)
    f = click.option('--passphrase', default=None, metavar="TEXT",
                        help="BIP-39 passphrase for --words ('-' to prompt)")(f)
    f = click.option('--words', '-m', is_flag=True,
                        help="Prompt for BIP-39 mnemonic words")(f)
    f = click.option('--key', '-k', default=None, metavar="WIF",
                        help="Private key as WIF or hex ('-' to prompt)")(f)
    return f

# Accept any prefix of a command name.
#
# from <https://click.palletsprojects.com/en/8.0.x/advanced/?#command-aliases>
class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Abiguous command. Pick one of: {' | '.join(sorted(matches))}")

    def resolve_command(self, ctx, args):
        # always return the full command name
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args


#
# Options we want for all commands
#
@click.group(cls=AliasedGroup)
@click.option('--testnet', '-t', is_flag=True,
                    help="Keys and addresses are for testnet (tb1...)")
@click.option('--verbose', '-v', is_flag=True,
                    help="Show debug logging.")
@click.option('--pdb', is_flag=True,
                    help="Prepare patient for surgery to remove bugs.")
@click.version_option(version=__version__)
def main(**kws):
    '''
    Seal NFT attributes so only the owner's wallet can reveal them.

    Gated values are encrypted under a key derived from the owner's signature
    over a challenge message. Anyone can read the public values.

    You can use "rev", or "r" for "reveal": any distinct prefix for all commands.
    '''
    # implement PDB option here
    if kws.pop('pdb', False):
        import pdb
        def doit(ex_cls, ex, tb):
            pdb.pm()
        sys.excepthook = doit

    logging.basicConfig(level=logging.DEBUG if kws.get('verbose') else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s', stream=sys.stderr)

    # global options, mostly not considered here
    global global_opts
    global_opts.update(kws)


@main.command('keygen')
@click.option('--mnemonic', '-m', 'use_words', is_flag=True, help="Make new BIP-39 words instead of a bare key")
def keygen(use_words):
    "Make a fresh key (or mnemonic) and show its address."
    testnet = global_opts.get('testnet', False)

    if use_words:
        words = MnemonicSigner.new_words()
        s = MnemonicSigner(words, testnet=testnet)
        click.echo(f"{words}\n\n{s.path} => {s.address}")
    else:
        s = KeySigner.generate(testnet=testnet)
        click.echo(f"{s.address}\n\n{s.wif}")

@main.command('address')
@key_options
def show_address(**kws):
    "Show the address for a key or mnemonic."
    s = get_signer(**kws)
    if not s:
        fail("Need --key or --words")
    click.echo(s.address)

@main.command('sign')
@click.option('--challenge', '-c', default=None, metavar="TEXT", help="Message to sign, default: the fixed challenge")
@click.option('--record', '-r', 'record_file', default=None, type=click.Path(exists=True, dir_okay=False),
                    help="Sign the challenge of this record")
@click.option('--just-sig', '-j', is_flag=True, help='Just the signature itself, nothing more')
@key_options
def sign_challenge(challenge, record_file, just_sig, **kws):
    """Sign the challenge: the result is the credential for reveal --sig"""
    if challenge and record_file:
        fail("Give --challenge or --record, not both")
    if record_file:
        challenge = read_record(record_file).challenge

    challenge = challenge or CHALLENGE_MSG

    s = get_signer(**kws)
    if not s:
        fail("Need --key or --words")

    sig = Credential(s.address, request_signature(s.address, challenge, s)).sig_text

    if just_sig:
        click.echo(sig)
    else:
        click.echo('-----BEGIN SIGNED MESSAGE-----\n{msg}\n-----BEGIN '
                   'SIGNATURE-----\n{addr}\n{sig}\n-----END SIGNED MESSAGE-----'.format(
                        msg=challenge, addr=s.address, sig=sig))

@main.command('verify')
@click.argument('address')
@click.argument('sig')
@click.option('--challenge', '-c', default=CHALLENGE_MSG, metavar="TEXT", help="Message that was signed")
def verify_sig(address, sig, challenge):
    "Check a base64 signature over the challenge came from address."
    cred = Credential.from_text(address, sig)
    if not verify_challenge_signature(cred.address, challenge, cred.signature):
        fail("Signature does not match address")
    click.echo("Signature is good.")

@main.command('seal')
@click.argument('owner')
@click.argument('attrs', nargs=-1, metavar="TRAIT=VALUE ...")
@click.option('--gated', '-g', multiple=True, metavar="TRAIT", help="Encrypt this trait (repeat as needed)")
@click.option('--attrs-file', '-f', type=click.File('rt'), default=None,
                    help="JSON list of {trait_type, value, gated}")
@click.option('--fresh', is_flag=True, help="Per-record challenge with random nonce")
@click.option('--hex', 'use_hex', is_flag=True, help="Encode ciphertext as 0x-hex, not base64")
@click.option('--outfile', '-o', default=None, metavar="record.json")
@click.option('--cbor', 'as_cbor', is_flag=True, help="Write CBOR instead of JSON")
@key_options
def seal_record(owner, attrs, gated, attrs_file, fresh, use_hex, outfile, as_cbor, **kws):
    "Build a record for OWNER, encrypting the --gated traits."
    items = []
    if attrs_file:
        try:
            items.extend(json.load(attrs_file))
        except ValueError as exc:
            fail(f"Bad JSON in attributes file: {exc}")

    for a in attrs:
        if '=' not in a:
            fail(f"Expected TRAIT=VALUE, got: {a}")
        tt, value = a.split('=', 1)
        items.append((tt, value, tt in gated))

    try:
        items = [parse_attribute(i) for i in items]
    except EncodingError as exc:
        fail(str(exc))

    known = set(tt for tt, _, _ in items)
    missing = set(gated) - known
    if missing:
        fail(f"Gated trait(s) not given a value: {', '.join(sorted(missing))}")

    signer = get_signer(**kws)

    rec = assemble(owner, items, signer=signer, fresh_challenge=fresh,
                        encoding=('hex' if use_hex else 'base64'))

    write_record(rec, outfile, as_cbor)

@main.command('reveal')
@click.argument('record_file', metavar="RECORD")
@click.option('--address', '-a', default=None, help="Reader address for --sig")
@click.option('--sig', '-s', default=None, help="Base64 signature over the record's challenge")
@click.option('--json', 'as_json', is_flag=True, help="JSON output")
@key_options
def reveal_record(record_file, address, sig, as_json, **kws):
    "Show a record, decrypting what the given credential can open."
    if record_file.startswith('http://') or record_file.startswith('https://'):
        rec = RecordFetcher().fetch(record_file)
    else:
        rec = read_record(record_file)

    signer = get_signer(**kws)

    if signer and (address or sig):
        fail("Use a key/mnemonic or --address/--sig, not both")

    if signer:
        got = reveal_with_signer(rec, signer.address, signer)
    elif sig:
        if not address:
            fail("--sig needs --address")
        got = reveal(rec, Credential.from_text(address, sig))
    else:
        got = reveal(rec)

    if as_json:
        click.echo(json.dumps([r.as_dict() for r in got], indent=2))
        return

    click.echo(f"owner: {rec.owner}")
    for r in got:
        if r.state == RevealState.REVEALED:
            v = r.value
        elif r.state == RevealState.FAILED:
            v = f'<failed: {r.error}>'
        else:
            v = '<hidden>'
        click.echo('%s%s: %s' % ('' if r.public else '*', r.trait_type, v))

@main.command('publish')
@click.argument('record_file', metavar="RECORD")
@click.argument('name')
@click.option('--store', '-d', 'store_dir', default='records', type=click.Path(file_okay=False),
                    help="Directory holding published records")
@click.option('--cbor', 'as_cbor', is_flag=True, help="Store as CBOR")
def publish_record(record_file, name, store_dir, as_cbor):
    "Publish a record into a write-once directory store."
    rec = read_record(record_file)
    fname = DirectoryStore(store_dir).publish(name, rec, fmt=('cbor' if as_cbor else 'json'))
    click.echo(fname)

@main.command('fetch')
@click.argument('url')
@click.option('--outfile', '-o', default=None, metavar="record.json")
def fetch_record(url, outfile):
    "Download a published record (token metadata URL) and check its shape."
    rec = RecordFetcher().fetch(url)
    write_record(rec, outfile)

# EOF
