# -*- coding: utf-8 -*-

import base64
import hashlib
import json
import os
import tempfile
import unittest

from azstorage import storage_exceptions
from azstorage.request import Multipart, new_azure_storage_request, only_non_empty_values
from azstorage.storage import StorageContext


class TestRequest(unittest.TestCase):
    def test_method_and_url_are_set_once(self):
        request = new_azure_storage_request() \
            .set_method('put') \
            .set_url('/queue1') \
            .set_method('DELETE') \
            .set_url('/queue2')
        self.assertEqual(request.method, 'PUT')
        self.assertEqual(request.url, '/queue1')

    def test_unsupported_method(self):
        with self.assertRaises(ValueError):
            new_azure_storage_request().set_method('PATCH')

    def test_add_header_overwrites(self):
        request = new_azure_storage_request() \
            .add_header('x-ms-version', '1') \
            .add_header('X-MS-Version', '2')
        self.assertEqual(len(request.headers), 1)
        self.assertEqual(request.headers['x-ms-version'], '2')
        self.assertEqual(list(request.headers.keys()), ['X-MS-Version'])

    def test_add_header_if(self):
        request = new_azure_storage_request() \
            .add_header_if(False, 'If-Match', '*') \
            .add_header_if(True, 'x-ms-lease-id', 'abc')
        self.assertEqual(dict(request.headers), {'x-ms-lease-id': 'abc'})

    def test_metadata_headers(self):
        request = new_azure_storage_request().add_header_x_ms_meta({'foo': 'bar'})
        self.assertEqual(dict(request.headers), {'x-ms-meta-foo': 'bar'})

    def test_body_sets_content_length(self):
        request = new_azure_storage_request().set_body(u'héllo')
        self.assertEqual(request.body, u'héllo'.encode('utf-8'))
        self.assertEqual(request.headers['Content-Length'], '6')

    def test_url_is_percent_encoded_once(self):
        request = new_azure_storage_request().set_url(u'/c/my blob é.txt')
        self.assertEqual(request.url, '/c/my%20blob%20%C3%A9.txt')
        self.assertEqual(new_azure_storage_request().set_url('/c/a~b/c').url, '/c/a~b/c')

    def test_body_none_means_no_body(self):
        request = new_azure_storage_request().set_body(b'abc').set_body(None)
        self.assertIsNone(request.body)
        self.assertNotIn('Content-Length', request.headers)
        with self.assertRaises(storage_exceptions.InvalidState):
            request.add_header_content_md5()

    def test_content_md5(self):
        request = new_azure_storage_request().set_body(b'hello').add_header_content_md5()
        self.assertEqual(
            request.headers['Content-MD5'],
            base64.b64encode(hashlib.md5(b'hello').digest()).decode('utf-8'))

    def test_content_md5_without_body(self):
        with self.assertRaises(storage_exceptions.InvalidState):
            new_azure_storage_request().add_header_content_md5()

    def test_remove_empty_headers(self):
        request = new_azure_storage_request() \
            .add_header('If-Match', '') \
            .add_header('If-None-Match', None) \
            .add_header('ETag', 'abc') \
            .remove_empty_headers()
        self.assertEqual(dict(request.headers), {'ETag': 'abc'})

    def test_add_param_if(self):
        request = new_azure_storage_request().add_param_if(False, 'query', 'visibilitytimeout', 0)
        self.assertIsNone(request.query)
        self.assertEqual(len(request.headers), 0)
        self.assertIsNone(request.body)
        self.assertEqual(request.extras, {})

        request.add_param_if(True, 'query', 'timeout', 30)
        self.assertEqual(request.query, [('timeout', 30)])

    def test_query_keeps_order_and_duplicates(self):
        request = new_azure_storage_request() \
            .add_param('query', 'comp', 'list') \
            .add_param('query', 'include', 'metadata') \
            .add_param('query', 'include', 'snapshots')
        self.assertEqual(request.query, [('comp', 'list'), ('include', 'metadata'), ('include', 'snapshots')])

    def test_add_query_params_drops_empty_values(self):
        self.assertEqual(only_non_empty_values([('a', '1'), ('b', ''), ('c', None), ('d', 0)]),
                         [('a', '1'), ('d', 0)])
        request = new_azure_storage_request() \
            .add_param('query', 'restype', 'container') \
            .add_query_params([('prefix', ''), ('marker', None), ('maxresults', 10)])
        self.assertEqual(request.query, [('restype', 'container'), ('maxresults', 10)])

    def test_add_param_header(self):
        request = new_azure_storage_request().add_param('header', 'x-ms-lease-action', 'acquire')
        self.assertEqual(request.headers['x-ms-lease-action'], 'acquire')

    def test_add_param_raw_body(self):
        request = new_azure_storage_request().add_param('body', 'body', 'abc')
        self.assertEqual(request.body, b'abc')
        self.assertEqual(request.headers['Content-Length'], '3')

    def test_add_param_multipart_fields(self):
        request = new_azure_storage_request() \
            .add_param('body', 'settings', {'a': 1}) \
            .add_param('multipart', 'tags', ['x'])
        self.assertIsInstance(request.body, Multipart)
        self.assertEqual(request.body.parts, [
            ('settings', None, json.dumps({'a': 1}), 'application/json'),
            ('tags', None, json.dumps(['x']), 'application/json'),
        ])

    def test_add_param_file(self):
        with tempfile.NamedTemporaryFile(suffix='.txt', delete=False) as f:
            f.write(b'file content')
        try:
            request = new_azure_storage_request().add_param('file', 'upload', f.name)
            name, filename, data, _ = request.body.parts[0]
            self.assertEqual(name, 'upload')
            self.assertEqual(filename, os.path.basename(f.name))
            self.assertEqual(data, b'file content')

            request.prepare_body()
            self.assertTrue(request.headers['Content-Type'].startswith('multipart/form-data; boundary='))
            self.assertEqual(request.headers['Content-Length'], str(len(request.body)))
            self.assertIn(b'file content', request.body)
        finally:
            os.remove(f.name)

    def test_add_param_form(self):
        request = new_azure_storage_request() \
            .add_param('form', 'a', '1') \
            .add_param('form', 'b', 'two words')
        self.assertEqual(request.body, {'a': '1', 'b': 'two words'})

        request.prepare_body()
        self.assertEqual(request.body, b'a=1&b=two+words')
        self.assertEqual(request.headers['Content-Type'], 'application/x-www-form-urlencoded')
        self.assertEqual(request.headers['Content-Length'], '15')

    def test_add_param_other_location(self):
        request = new_azure_storage_request() \
            .add_param('path', 'container', 'c1') \
            .add_param('path', 'blob', 'b1')
        self.assertEqual(request.extras, {'path': [('container', 'c1'), ('blob', 'b1')]})

    def test_add_optional_params(self):
        definitions = {'timeout': 'query', 'x-ms-lease-id': 'header'}
        request = new_azure_storage_request().add_optional_params(
            definitions, [('timeout', 5), ('unknown', 'x'), ('x-ms-lease-id', 'L')])
        self.assertEqual(request.query, [('timeout', 5)])
        self.assertEqual(dict(request.headers), {'x-ms-lease-id': 'L'})

    def test_add_ms_context(self):
        context = StorageContext(account_name='acc', account_key='key1')
        other = StorageContext(account_name='other', account_key='key1')
        request = new_azure_storage_request() \
            .add_ms_context(context, 'Fri, 16 Oct 2026 10:00:00 GMT', 'storage') \
            .add_storage_context(other)
        self.assertIs(request.storage_context, context)
        self.assertEqual(request.headers['x-ms-date'], 'Fri, 16 Oct 2026 10:00:00 GMT')
        self.assertEqual(request.headers['x-ms-version'], '2018-03-28')

    def test_add_missing(self):
        request = new_azure_storage_request().add_missing('query', [])
        self.assertEqual(request.query, [])
        request.add_param('query', 'a', 'b').add_missing('query', [])
        self.assertEqual(request.query, [('a', 'b')])


if __name__ == '__main__':
    unittest.main()
