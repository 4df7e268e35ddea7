#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Where records live once published. Both are deliberately dumb:
#
# - DirectoryStore: one file per record, written once, never replaced
# - RecordFetcher: read-only, pulls a record from a metadata URL (token URI)
#
# - Requires 'requests' module for fetching
#
import os, re, logging

from sealtraits.exceptions import RecordExists, EncodingError
from sealtraits.record import Record

logger = logging.getLogger(__name__)

# names become filenames
SAFE_NAME = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$')

FORMATS = { 'json': '.json', 'cbor': '.cbor' }

class DirectoryStore:

    def __init__(self, path):
        self.path = path
        os.makedirs(path, exist_ok=True)

    def _fname(self, name, fmt):
        if not SAFE_NAME.match(name) or name.endswith(tuple(FORMATS.values())):
            raise EncodingError(f"Unusable record name: {name!r}")
        return os.path.join(self.path, name + FORMATS[fmt])

    def publish(self, name, record, fmt='json'):
        # never overwrite: a revision is a new record under a new name
        if fmt not in FORMATS:
            raise EncodingError(f"Unknown format: {fmt}")

        if any(os.path.exists(self._fname(name, f)) for f in FORMATS):
            raise RecordExists(f"Record already published: {name}")

        fname = self._fname(name, fmt)
        body = record.to_cbor() if fmt == 'cbor' else record.to_json(pretty=True).encode('utf-8')

        try:
            with open(fname, 'xb') as fd:
                fd.write(body)
        except FileExistsError:
            raise RecordExists(f"Record already published: {name}")

        logger.info("published %s (%d bytes)", fname, len(body))
        return fname

    def load(self, name):
        for fmt in FORMATS:
            fname = self._fname(name, fmt)
            if not os.path.exists(fname):
                continue
            with open(fname, 'rb') as fd:
                raw = fd.read()
            logger.debug("loaded %s", fname)
            return Record.from_cbor(raw) if fmt == 'cbor' else Record.from_json(raw.decode('utf-8'))

        raise FileNotFoundError(f"No record called {name} in {self.path}")

    def names(self):
        rv = []
        for fn in sorted(os.listdir(self.path)):
            base, ext = os.path.splitext(fn)
            if ext in FORMATS.values():
                rv.append(base)
        return rv


class RecordFetcher:

    def __init__(self, server=None, timeout=30):
        import requests
        self.ses = requests.Session()
        self.server = server
        self.timeout = timeout
        assert not (server or '').endswith('/')

    def url_for(self, path):
        if path.startswith('/'):
            assert self.server, 'need server for relative path'
            return self.server + path
        return path

    def fetch(self, path, **kws):
        # fetch one record; CBOR if the server says so, else JSON
        url = self.url_for(path)
        kws.setdefault('timeout', self.timeout)
        r = self.ses.get(url, **kws)
        r.raise_for_status()

        logger.debug("fetched %s: %d bytes", url, len(r.content))

        if 'cbor' in r.headers.get('content-type', ''):
            return Record.from_cbor(r.content)
        return Record.from_json(r.text)

# EOF
