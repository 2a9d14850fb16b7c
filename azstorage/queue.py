# -*- coding: utf-8 -*-

import base64
import xml.etree.ElementTree as ET

from . import client
from . import util
from .request import QUERY, new_azure_storage_request


SECONDS_7_DAYS = 7 * 24 * 60 * 60

SERVICE = 'queue_service'


def _date(node, tag):
    value = node.findtext(tag)
    return util.parse_rfc1123(value) if value else None


def _message_fields(node):
    """ Fields of a <QueueMessage> element, dates parsed, text decoded when present. """
    msg = {
        'message_id': node.findtext('MessageId', ''),
        'pop_receipt': node.findtext('PopReceipt', ''),
        'insertion_time': _date(node, 'InsertionTime'),
        'expiration_time': _date(node, 'ExpirationTime'),
        'time_next_visible': _date(node, 'TimeNextVisible'),
    }
    dequeue_count = node.findtext('DequeueCount')
    if dequeue_count is not None:
        msg['dequeue_count'] = int(dequeue_count)
    message_text = node.findtext('MessageText')
    if message_text is not None:
        msg['message_text'] = base64.b64decode(message_text).decode('utf-8')
    return msg


def _parse_messages(body):
    root = ET.fromstring(body)
    return [_message_fields(node) for node in root.findall('QueueMessage')]


class QueueService(object):
    def __init__(self, storage_context, transport=None):
        """
        :param storage_context: :class:`azstorage.storage.StorageContext`
        :param transport: (optional) RestClient compatible transport, resolved from
            the context when omitted.
        """
        self.storage_context = storage_context
        self.transport = transport

    def _new_request(self, method, path):
        return new_azure_storage_request() \
            .set_method(method) \
            .set_url(path) \
            .add_ms_context(self.storage_context, util.utc_now(), 'storage')

    def _call(self, request, expected_status):
        response = client.sign_and_call(request, SERVICE, self.transport)
        if response.status != expected_status:
            raise client.create_error_response(response)
        return response

    def create_queue(self, queue_name):
        """
        Create a queue.
        https://docs.microsoft.com/en-us/rest/api/storageservices/create-queue4
        :param queue_name: name of the queue.
        :return: dict with status, headers, request_url, request_id, etag, last_modified.
        """
        request = self._new_request('PUT', '/{0}'.format(queue_name))
        response = self._call(request, 201)
        return client.create_success_response(response)

    def put_message(self, queue_name, message, visibilitytimeout=0, messagettl=0):
        """
        Add a message to the back of the queue.
        https://docs.microsoft.com/en-us/rest/api/storageservices/put-message
        :param queue_name: name of the queue.
        :param message: (string) message text, sent base64 encoded.
        :param visibilitytimeout: (optional, integer) seconds before the message becomes visible, 0 to 7 days.
        :param messagettl: (optional, integer) time to live in seconds, -1 for never expiring, 0 for the
            service default.
        :return: dict with message_id, pop_receipt, insertion_time, expiration_time, time_next_visible.
        """
        if not 0 <= visibilitytimeout <= SECONDS_7_DAYS:
            raise ValueError('visibilitytimeout must be between 0 and {0}'.format(SECONDS_7_DAYS))
        if not (messagettl in (-1, 0) or 1 <= messagettl <= SECONDS_7_DAYS):
            raise ValueError('messagettl must be -1, 0 or between 1 and {0}'.format(SECONDS_7_DAYS))

        text = base64.b64encode(message.encode('utf-8')).decode('utf-8')
        body = '<QueueMessage><MessageText>{0}</MessageText></QueueMessage>'.format(text)

        request = self._new_request('POST', '/{0}/messages'.format(queue_name)) \
            .add_param_if(visibilitytimeout > 0, QUERY, 'visibilitytimeout', visibilitytimeout) \
            .add_param_if(messagettl != 0, QUERY, 'messagettl', messagettl) \
            .set_body(body)
        response = self._call(request, 201)

        messages = _parse_messages(response.body)
        return client.create_success_response(response, messages[0] if messages else {})

    def get_messages(self, queue_name, numofmessages=1, visibilitytimeout=30, timeout=30):
        """
        Retrieve messages from the front of the queue.
        https://docs.microsoft.com/en-us/rest/api/storageservices/get-messages
        :param numofmessages: (optional, integer) 1 to 32.
        :param visibilitytimeout: (optional, integer) 1 second to 7 days.
        :param timeout: (optional, integer) server side timeout in seconds.
        :return: dict with 'messages', a list of message dicts.
        """
        if not 1 <= numofmessages <= 32:
            raise ValueError('numofmessages must be between 1 and 32')
        if not 1 <= visibilitytimeout <= SECONDS_7_DAYS:
            raise ValueError('visibilitytimeout must be between 1 and {0}'.format(SECONDS_7_DAYS))

        request = self._new_request('GET', '/{0}/messages'.format(queue_name)) \
            .add_param(QUERY, 'numofmessages', numofmessages) \
            .add_param(QUERY, 'visibilitytimeout', visibilitytimeout) \
            .add_param(QUERY, 'timeout', timeout)
        response = self._call(request, 200)
        return client.create_success_response(response, {'messages': _parse_messages(response.body)})

    def delete_message(self, queue_name, message_id, pop_receipt, timeout=30):
        """
        https://docs.microsoft.com/en-us/rest/api/storageservices/delete-message2
        """
        request = self._new_request('DELETE', '/{0}/messages/{1}'.format(queue_name, message_id)) \
            .add_param(QUERY, 'popreceipt', pop_receipt) \
            .add_param(QUERY, 'timeout', timeout)
        response = self._call(request, 204)
        return client.create_success_response(response)

    def clear_messages(self, queue_name, timeout=30):
        request = self._new_request('DELETE', '/{0}/messages'.format(queue_name)) \
            .add_param(QUERY, 'timeout', timeout)
        response = self._call(request, 204)
        return client.create_success_response(response)
