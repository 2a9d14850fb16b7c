# -*- coding: utf-8 -*-

import base64
import hashlib
import json
import os
from urllib.parse import quote, urlencode

from requests.structures import CaseInsensitiveDict
from urllib3 import encode_multipart_formdata

from . import storage_exceptions
from . import util


METHODS = ('GET', 'PUT', 'POST', 'DELETE', 'HEAD', 'MERGE')

# parameter locations understood by Request.add_param
QUERY = 'query'
HEADER = 'header'
BODY = 'body'
MULTIPART = 'multipart'
FILE = 'file'
FORM = 'form'

PREFIX_X_MS_META = 'x-ms-meta-'


def only_non_empty_values(pairs):
    """ Drop (key, value) pairs whose value is None or ''. """
    return [(k, v) for k, v in pairs if v is not None and v != '']


class Multipart(object):
    """ A multipart/form-data body built from independently typed parts. """

    def __init__(self):
        self.parts = []

    def add_field(self, name, value, content_type=None):
        self.parts.append((name, None, value, content_type))
        return self

    def add_file(self, path, name=None):
        with open(path, 'rb') as f:
            data = f.read()
        filename = os.path.basename(path)
        self.parts.append((name or filename, filename, data, 'application/octet-stream'))
        return self

    def encode(self):
        """
        :return: (body bytes, content type with boundary)
        """
        fields = []
        for name, filename, data, content_type in self.parts:
            if filename is None and content_type is None:
                fields.append((name, data))
            else:
                fields.append((name, (filename, data, content_type)))
        return encode_multipart_formdata(fields)


class Request(object):
    """
    A storage request being assembled. Every mutator returns the request so that
    calls can be chained:

        new_azure_storage_request() \\
            .set_method('PUT') \\
            .set_url('/myqueue') \\
            .add_ms_context(context, util.utc_now(), 'storage')
    """

    def __init__(self, codec=json):
        self.codec = codec
        self.method = None
        self.url = None
        self.query = None
        self.headers = CaseInsensitiveDict()
        self.body = None
        self.storage_context = None
        self.uri = None
        self.extras = {}

    # method and url are set-once, composed pipelines must not overwrite them.
    def set_method(self, m):
        if self.method is None:
            m = str(m).upper()
            if m not in METHODS:
                raise ValueError('Unsupported HTTP method: {0}'.format(m))
            self.method = m
        return self

    def set_url(self, u):
        """ Store the path percent-encoded, as it goes on the wire and into the signature. """
        if self.url is None:
            self.url = quote(u)
        return self

    def set_body(self, data):
        if data is None:
            self.body = None
            self.headers.pop('Content-Length', None)
            return self
        if isinstance(data, str):
            data = data.encode('utf-8')
        self.body = data
        return self.add_header('Content-Length', str(len(data)))

    def add_header(self, k, v):
        self.headers[k] = v
        return self

    def add_header_if(self, predicate, k, v):
        if predicate:
            self.add_header(k, v)
        return self

    def add_header_x_ms_meta(self, kvp):
        for k, v in kvp.items():
            self.add_header(PREFIX_X_MS_META + k, v)
        return self

    def add_header_content_md5(self):
        if not isinstance(self.body, bytes):
            raise storage_exceptions.InvalidState('Cannot compute Content-MD5 without a raw body')
        md5 = base64.b64encode(hashlib.md5(self.body).digest()).decode('utf-8')
        return self.add_header('Content-MD5', md5)

    def remove_empty_headers(self):
        for k in [k for k, v in self.headers.items() if v is None or v == '']:
            del self.headers[k]
        return self

    def add_param(self, location, key, value):
        if location == QUERY:
            self.add_missing('query', [])
            self.query.append((key, value))
        elif location == HEADER:
            self.add_header(key, value)
        elif location == BODY and key == BODY:
            self.set_body(value)
        elif location in (BODY, MULTIPART):
            self._multipart().add_field(
                key, self.codec.dumps(value), content_type='application/json')
        elif location == FILE:
            self._multipart().add_file(value, name=key)
        elif location == FORM:
            if not isinstance(self.body, dict):
                self.body = {}
            self.body[key] = value
        else:
            self.extras.setdefault(location, []).append((key, value))
        return self

    def add_param_if(self, predicate, location, key, value):
        if predicate:
            self.add_param(location, key, value)
        return self

    def add_query_params(self, pairs):
        self.add_missing('query', [])
        self.query.extend(only_non_empty_values(pairs))
        return self

    def add_optional_params(self, definitions, pairs):
        """
        Route optional parameters to their location.
        :param definitions: dict of parameter name -> location.
        :param pairs: list of (name, value), names missing from definitions are dropped.
        """
        for key, value in pairs:
            location = definitions.get(key)
            if location is not None:
                self.add_param(location, key, value)
        return self

    def add_storage_context(self, storage_context):
        if self.storage_context is None:
            self.storage_context = storage_context
        return self

    def add_ms_context(self, storage_context, date, service):
        return self.add_storage_context(storage_context) \
            .add_header('x-ms-date', date) \
            .add_header('x-ms-version', util.get_api_version(service))

    def add_missing(self, key, value):
        if getattr(self, key) is None:
            setattr(self, key, value)
        return self

    def prepare_body(self):
        """ Encode multipart and form bodies so their length is known before signing. """
        if isinstance(self.body, Multipart):
            data, content_type = self.body.encode()
            self.add_header('Content-Type', content_type)
            self.set_body(data)
        elif isinstance(self.body, dict):
            self.add_header('Content-Type', 'application/x-www-form-urlencoded')
            self.set_body(urlencode(self.body))
        return self

    def _multipart(self):
        if not isinstance(self.body, Multipart):
            self.body = Multipart()
        return self.body

    def __repr__(self):
        return '<Request {0} {1}>'.format(self.method, self.url)


def new_azure_storage_request(codec=json):
    return Request(codec=codec)
