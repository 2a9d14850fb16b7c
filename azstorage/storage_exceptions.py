# -*- coding: utf-8 -*-


class StorageError(Exception):
    def __init__(self, message=''):
        super(StorageError, self).__init__(message)
        self.message = message


class InvalidState(StorageError):
    """ A local precondition was violated, e.g. MD5 requested without a body. """


class AuthenticationConfigError(StorageError):
    """ The storage context carries neither an account key nor a token provider. """


class TokenProviderError(StorageError):
    """ The bearer token provider failed or returned an unusable token. """


class TransportError(StorageError):
    """ Network level failure raised by the HTTP transport. """


class ServiceError(StorageError):
    def __init__(self, message, status, code='', request_id='', url='',
                 authentication_error_detail='', query_parameter_name='',
                 query_parameter_value='', body=''):
        super(ServiceError, self).__init__('\n'.join(message))
        # the service may answer with a multi-line message
        self.message = message
        self.status = status
        self.code = code
        self.request_id = request_id
        self.url = url
        self.authentication_error_detail = authentication_error_detail
        self.query_parameter_name = query_parameter_name
        self.query_parameter_value = query_parameter_value
        self.body = body

    def __str__(self):
        return '{0} {1}: {2}'.format(self.status, self.code, ' '.join(self.message))


STORAGE_ERR_CODE_LST = (
    'AccountIsDisabled',
    'AuthenticationFailed',
    'AuthorizationFailure',
    'ConditionNotMet',
    'InsufficientAccountPermissions',
    'InternalError',
    'InvalidAuthenticationInfo',
    'InvalidHeaderValue',
    'InvalidMd5',
    'InvalidQueryParameterValue',
    'InvalidResourceName',
    'InvalidXmlDocument',
    'Md5Mismatch',
    'MissingRequiredHeader',
    'OperationTimedOut',
    'RequestBodyTooLarge',
    'ResourceNotFound',
    'ServerBusy',
    'ContainerAlreadyExists',
    'ContainerNotFound',
    'ContainerBeingDeleted',
    'BlobNotFound',
    'LeaseAlreadyPresent',
    'LeaseIdMismatchWithContainerOperation',
    'LeaseNotPresentWithContainerOperation',
    'QueueAlreadyExists',
    'QueueNotFound',
    'QueueBeingDeleted',
    'MessageNotFound',
    'PopReceiptMismatch',
    'MessageTooLarge',
)

_STORAGE_ERROR_TO_EXCEPTION = {}


def _walk_storage_exceptions_class():
    for err_code in STORAGE_ERR_CODE_LST:
        ErrorClass = type(err_code, (ServiceError, ), {})
        _STORAGE_ERROR_TO_EXCEPTION[err_code] = ErrorClass

_walk_storage_exceptions_class()


def get_service_error(message, status, code='', request_id='', **kwargs):
    ErrorClass = _STORAGE_ERROR_TO_EXCEPTION.get(str(code), ServiceError)
    return ErrorClass(message, status, code, request_id, **kwargs)
