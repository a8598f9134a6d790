"""batchhttp - run batches of HTTP requests with bounded concurrency."""

from .application.dispatcher import HttpClient, SyncHttpClient
from .domain.errors import BatchHttpError, InvalidConfigError, InvalidInputError
from .domain.models import Outcome, Request
from .domain.options import BatchOptions, CompletionCallback
from .infrastructure.http.factory import create_http_client, create_sync_http_client

__version__ = "0.1.0"
