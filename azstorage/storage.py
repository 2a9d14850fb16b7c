# -*- coding: utf-8 -*-

import os

from . import auth
from . import storage_exceptions


DEVELOPMENT_ACCOUNT_NAME = 'devstoreaccount1'
DEVELOPMENT_ACCOUNT_KEY = \
    'Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFEGEgHjM0BgK8xXqzv+MPPw=='

# service -> (host label, emulator port)
_SERVICES = {
    'blob_service': ('blob', 10000),
    'queue_service': ('queue', 10001),
    'table_service': ('table', 10002),
}


class StorageContext(object):
    def __init__(self, **kwargs):
        account_name = kwargs.get('account_name', None)
        if not account_name:
            raise ValueError(
                'A valid account_name parameter must be specified to construct the StorageContext object.')
        self.account_name = account_name.strip()
        self.account_key = kwargs.get('account_key', None)
        self.aad_token_provider = kwargs.get('aad_token_provider', None)
        self.cloud_environment_suffix = kwargs.get('cloud_environment_suffix', 'core.windows.net')
        self.is_development_factory = bool(kwargs.get('is_development_factory', False))
        self.development_host = kwargs.get('development_host', '127.0.0.1')

    @staticmethod
    def development_factory(host='127.0.0.1'):
        """ Context for the local storage emulator and its well-known account. """
        return StorageContext(
            account_name=DEVELOPMENT_ACCOUNT_NAME,
            account_key=DEVELOPMENT_ACCOUNT_KEY,
            is_development_factory=True,
            development_host=host)

    @staticmethod
    def from_environment(environ=None):
        """
        Build a context from environment variables.
        AZURE_STORAGE_ACCOUNT_NAME, AZURE_STORAGE_ACCOUNT_KEY,
        AZURE_STORAGE_CLOUD_SUFFIX (optional) and AZURE_STORAGE_USE_EMULATOR (optional).
        """
        environ = os.environ if environ is None else environ
        if environ.get('AZURE_STORAGE_USE_EMULATOR', '').lower() in ('1', 'true', 'yes'):
            return StorageContext.development_factory()
        return StorageContext(
            account_name=environ.get('AZURE_STORAGE_ACCOUNT_NAME'),
            account_key=environ.get('AZURE_STORAGE_ACCOUNT_KEY'),
            cloud_environment_suffix=environ.get('AZURE_STORAGE_CLOUD_SUFFIX', 'core.windows.net'))

    @property
    def auth(self):
        """
        The credential used to sign requests made with this context.
        An account key takes precedence over a token provider.
        """
        if self.account_key:
            return auth.SharedKeyAuth(
                self.account_name, self.account_key, self.is_development_factory)
        if self.aad_token_provider is not None:
            return auth.TokenAuth(self.aad_token_provider)
        raise storage_exceptions.AuthenticationConfigError(
            'Storage context for account {0} has neither an account key nor a token provider'.format(
                self.account_name))

    def endpoint_url(self, service):
        try:
            label, port = _SERVICES[service]
        except KeyError:
            raise ValueError('Unknown storage service: {0}'.format(service))

        if self.is_development_factory:
            return 'http://{0}:{1}/{2}'.format(self.development_host, port, DEVELOPMENT_ACCOUNT_NAME)

        return 'https://{0}.{1}.{2}'.format(self.account_name, label, self.cloud_environment_suffix)
