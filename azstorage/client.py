# -*- coding: utf-8 -*-

from requests.packages.urllib3.util.retry import Retry
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict
import json
import logging
import xml.etree.ElementTree as ET

import requests

from . import auth
from . import storage_exceptions
from . import util
from .request import PREFIX_X_MS_META, only_non_empty_values


backoff_factor = 1
status_forcelist = (500, 502, 503, 504)


class Response(object):
    """ Transport independent view of an HTTP response. """

    def __init__(self, status, headers, body, url):
        self.status = status
        self.headers = CaseInsensitiveDict(headers or {})
        self.body = body
        self.url = url

    def __repr__(self):
        return '<Response [{0}] {1}>'.format(self.status, self.url)


class RestClient(object):
    def __init__(self, base_url, timeout=60, retries=0):
        if not base_url:
            raise ValueError('A valid base_url must be specified to construct the RestClient object.')
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retries = retries

    def _session(self):
        session = requests.Session()
        retry = Retry(
            total=self.retries,
            read=self.retries,
            connect=self.retries,
            backoff_factor=backoff_factor,
            status_forcelist=status_forcelist,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session

    def request(self, method, path, headers=None, query=None, body=None):
        url = '{0}{1}'.format(self.base_url, path)
        logging.debug('Perform http request. Method: {0}. URL: {1}. Params: {2}. Headers: {3}'.format(
            method, url, query, headers))
        try:
            with self._session() as session:
                r = session.request(method=method, url=url, headers=dict(headers or {}),
                                    params=query, data=body, timeout=self.timeout)
        except requests.RequestException as e:
            logging.error('Transport error. Method: {0}. URL: {1}. Error: {2}'.format(method, url, e))
            raise storage_exceptions.TransportError(str(e)) from e

        logging.debug('Http status code: {0}. Method: {1}. URL: {2}. Headers: {3}'.format(
            r.status_code, method, r.url, r.headers))
        return Response(r.status_code, r.headers, r.content, r.url)


def sign_and_call(request, service, transport=None):
    """
    Finalize, sign and send a request.
    :param request: :class:`azstorage.request.Request` carrying a storage context.
    :param service: 'blob_service', 'queue_service' or 'table_service'.
    :param transport: (optional) object with a RestClient compatible ``request`` method.
    :return: :class:`Response`
    """
    context = request.storage_context
    if context is None:
        raise storage_exceptions.AuthenticationConfigError('Request has no storage context')

    uri = context.endpoint_url(service)
    if transport is None:
        transport = RestClient(uri)

    request.remove_empty_headers() \
        .add_missing('query', []) \
        .prepare_body()
    # the signed resource and the sent url are built from the same query list
    request.query = only_non_empty_values(request.query)
    request.uri = uri
    auth.sign_request(request)

    return transport.request(request.method, request.url, headers=request.headers,
                             query=request.query, body=request.body)


def _is_success(status):
    return 200 <= status < 300


def _is_json(response):
    content_type = response.headers.get('Content-Type', '')
    media_type = content_type.split(';', 1)[0].strip().lower()
    return media_type == 'application/json' or media_type.endswith('+json')


def decode(response, target=None, codec=json):
    """
    Decode a response according to its declared content type.
    :param response: :class:`Response`
    :param target: False to get the response back untouched, or a callable
        receiving the decoded JSON object as keyword arguments.
    :param codec: module or object providing ``loads``.
    :return: the decoded object for JSON replies, the raw body otherwise.
    """
    if not _is_success(response.status):
        raise create_error_response(response)
    if target is False:
        return response
    if not _is_json(response):
        return response.body

    data = codec.loads(response.body)
    if target is None:
        return data
    return target(**data)


def _text(root, tag):
    if root is None:
        return ''
    node = root.find(tag)
    if node is None or node.text is None:
        return ''
    return node.text


def create_error_response(response):
    """
    Turn a 4xx/5xx response carrying the service's XML error envelope into a ServiceError.
    :param response: :class:`Response`
    :return: :class:`azstorage.storage_exceptions.ServiceError` (not raised)
    """
    root = None
    if response.body:
        try:
            root = ET.fromstring(response.body)
        except ET.ParseError:
            logging.debug('Error response of {0} is not XML'.format(response.url))
    if root is not None and root.tag != 'Error':
        root = root.find('Error')

    request_id = response.headers.get('x-ms-request-id', '')
    err = storage_exceptions.get_service_error(
        _text(root, 'Message').split('\n'),
        response.status,
        _text(root, 'Code'),
        request_id,
        url=response.url,
        authentication_error_detail=_text(root, 'AuthenticationErrorDetail'),
        query_parameter_name=_text(root, 'QueryParameterName'),
        query_parameter_value=_text(root, 'QueryParameterValue'),
        body=response.body)
    logging.error('Service error: {0}. Code: {1}. URL: {2}. Request id: {3}'.format(
        response.status, err.code, response.url, request_id))
    return err


def _add_if_header_exists(result, response, header, key, transformer=None):
    value = response.headers.get(header)
    if value is None:
        return result
    result[key] = transformer(value) if transformer else value
    return result


def create_success_response(response, extra=None):
    """
    :param response: :class:`Response`
    :param extra: (optional, dict) operation specific fields.
    :return: dict with status, headers, request_url and body, plus request_id, etag,
        last_modified, date and expires when the response carries them.
    """
    result = dict(extra or {})
    result['status'] = response.status
    result['headers'] = response.headers
    result['request_url'] = response.url
    _add_if_header_exists(result, response, 'last-modified', 'last_modified', util.parse_rfc1123)
    _add_if_header_exists(result, response, 'date', 'date', util.parse_rfc1123)
    _add_if_header_exists(result, response, 'x-ms-request-id', 'request_id')
    _add_if_header_exists(result, response, 'expires', 'expires', util.parse_rfc1123)
    _add_if_header_exists(result, response, 'etag', 'etag')
    result['body'] = response.body
    return result


def extract_x_ms_meta_headers(response):
    """ User metadata of a response, without the x-ms-meta- prefix. """
    return dict((k[len(PREFIX_X_MS_META):], v) for k, v in response.headers.items()
                if k.lower().startswith(PREFIX_X_MS_META))
