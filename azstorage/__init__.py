# -*- coding: utf-8 -*-

"""
Azure Storage REST SDK.
https://docs.microsoft.com/en-us/rest/api/storageservices/
"""

__author__ = 'azstorage developers'
__version__ = '0.1.0'

from .storage import StorageContext
from .request import new_azure_storage_request
from .client import sign_and_call, decode, create_error_response, create_success_response
from .queue import QueueService
from .storage_exceptions import StorageError, ServiceError

# Set default logging handler to avoid "No handler found" warnings.
import logging
from logging import NullHandler

logging.getLogger(__name__).addHandler(NullHandler())
