# -*- coding: utf-8 -*-

import email.utils


# x-ms-version sent for each group of services.
API_VERSIONS = {
    'storage': '2018-03-28',
    'table': '2017-04-17',
}


def get_api_version(service):
    try:
        return API_VERSIONS[service]
    except KeyError:
        raise ValueError('Unknown API version group: {0}'.format(service))


def utc_now():
    """ Current UTC time in RFC1123 form, e.g. 'Fri, 16 Oct 2026 10:00:00 GMT'. """
    return email.utils.formatdate(usegmt=True)


def parse_rfc1123(value):
    """
    Parse an RFC1123 date as found in Date, Last-Modified or Expires headers.
    :param value: the header value.
    :return: timezone aware datetime.
    """
    return email.utils.parsedate_to_datetime(value)


def to_bool(value):
    return value == 'true'
