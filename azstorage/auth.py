# -*- coding: utf-8 -*-

import base64
import binascii
import hashlib
import hmac
import logging
from urllib.parse import urlsplit

from . import storage_exceptions


DEVELOPMENT_RESOURCE_PREFIX = '/devstoreaccount1'
SECONDARY_SUFFIX = '-secondary'

# Standard headers that take part in the string to sign, in signing order.
SIGNED_HEADERS = (
    'Content-Encoding',
    'Content-Language',
    'Content-Length',
    'Content-MD5',
    'Content-Type',
    'Date',
    'If-Modified-Since',
    'If-Match',
    'If-None-Match',
    'If-Unmodified-Since',
    'Range',
)


def primary(account_name):
    """ Strip the '-secondary' suffix of a read-access geo-redundant account name. """
    if account_name.endswith(SECONDARY_SUFFIX):
        return account_name[:-len(SECONDARY_SUFFIX)]
    return account_name


def canonicalized_headers(headers):
    """
    :param headers: mapping of request headers.
    :return: the x-ms-* headers, lower-cased and sorted, as 'key:value' lines.
    :rtype: String
    """
    canonical_headers = []
    for k, v in headers.items():
        lower_key = k.lower()
        if lower_key.startswith('x-ms-'):
            canonical_headers.append((lower_key, v))
    canonical_headers.sort(key=lambda x: x[0])
    return '\n'.join('{0}:{1}'.format(k, v) for k, v in canonical_headers)


def canonicalized_resource(account_name, url, query=None, is_development_factory=False):
    """
    Build the canonicalized resource of a request.
    https://docs.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key
    :param account_name: storage account name, '-secondary' is stripped.
    :param url: path of the request, without query.
    :param query: list of (key, value) query pairs.
    :param is_development_factory: whether the request targets the storage emulator.
    :return: the canonicalized resource string.
    """
    if is_development_factory:
        url = DEVELOPMENT_RESOURCE_PREFIX + url

    resource = '/{0}{1}'.format(primary(account_name), url)
    if not query:
        return resource

    params = sorted((str(k), str(v)) for k, v in query)
    return resource + '\n' + '\n'.join('{0}:{1}'.format(k, v) for k, v in params)


class SharedKeyAuth(object):
    def __init__(self, account_name, account_key, is_development_factory=False):
        self.account_name = account_name.strip()
        self.account_key = account_key.strip()
        self.is_development_factory = is_development_factory

    def string_to_sign(self, method, headers, url, query=None):
        slots = [method.upper()]
        for name in SIGNED_HEADERS:
            value = headers.get(name)
            slots.append('' if value is None else str(value))
        slots.append(canonicalized_headers(headers))
        slots.append(canonicalized_resource(
            self.account_name, url, query, self.is_development_factory))
        return '\n'.join(slots)

    def sign_request(self, method, headers, url, query=None):
        """
        Sign the request with the account key.
        :param method: method of the http request.
        :param headers: headers of the http request.
        :param url: path of the http request, without the query.
        :param query: list of (key, value) query pairs.
        :return: the Authorization header value.
        """
        try:
            key = base64.b64decode(self.account_key, validate=True)
        except (binascii.Error, ValueError) as e:
            raise storage_exceptions.AuthenticationConfigError(
                'Account key of {0} is not valid base64: {1}'.format(self.account_name, e))

        string_to_sign = self.string_to_sign(method, headers, url, query)
        h = hmac.new(key, string_to_sign.encode('utf-8'), hashlib.sha256)
        signature = base64.b64encode(h.digest()).decode('utf-8')
        return 'SharedKey ' + primary(self.account_name) + ':' + signature


class TokenAuth(object):
    def __init__(self, token_provider):
        if not callable(token_provider):
            raise storage_exceptions.AuthenticationConfigError('Token provider must be callable')
        self.token_provider = token_provider

    @staticmethod
    def audience(uri):
        """ Reduce a target uri to 'scheme://host', the audience a token is issued for. """
        parts = urlsplit(uri)
        return '{0}://{1}'.format(parts.scheme, parts.hostname)

    def sign_request(self, uri):
        audience = TokenAuth.audience(uri)
        try:
            token = self.token_provider(audience)
        except Exception as e:
            raise storage_exceptions.TokenProviderError(
                'Token provider failed for {0}: {1}'.format(audience, e)) from e

        if not isinstance(token, str) or not token:
            raise storage_exceptions.TokenProviderError(
                'Token provider returned an invalid token for {0}'.format(audience))
        return 'Bearer ' + token


def sign_request(request):
    """
    Set the Authorization header of a fully assembled request.
    :param request: :class:`azstorage.request.Request` with a storage context and uri.
    :return: the same request.
    """
    context = request.storage_context
    if context is None:
        raise storage_exceptions.AuthenticationConfigError('Request has no storage context')

    credential = context.auth
    if isinstance(credential, SharedKeyAuth):
        authorization = credential.sign_request(
            request.method, request.headers, request.url, request.query)
    elif isinstance(credential, TokenAuth):
        authorization = credential.sign_request(request.uri + request.url)
    else:
        raise storage_exceptions.AuthenticationConfigError(
            'Unsupported credential: {0}'.format(type(credential).__name__))

    logging.debug('Signed request. Method: {0}. URL: {1}. Scheme: {2}'.format(
        request.method, request.url, authorization.split(' ', 1)[0]))
    request.headers['Authorization'] = authorization
    return request
