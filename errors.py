#!/usr/bin/env python3
"""
Exception types shared by the crawler, the statement builder and the storage clients
"""


class ScraperError(Exception):
    """Base class for all tracker errors"""


class RecordNotFound(ScraperError):
    """No case exists at the probed number/year"""


class FetchError(ScraperError):
    """The case page could not be loaded or read"""


class InvalidRecordError(ScraperError):
    """A fetched record lacks a field required to persist it"""


class PersistenceError(ScraperError):
    """A single record could not be written"""


class BulkLoadError(PersistenceError):
    """The batched write path failed as a whole"""


class FatalConfigurationError(ScraperError):
    """Required configuration or credentials are missing"""
