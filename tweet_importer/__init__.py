"""
Top-level package for the media importer.

This package searches a third-party media API, previews results and imports
matching videos and images as site posts and media library entries.
Modules are split by concern:

* :mod:`tweet_importer.clients` – GET requests against the media API
* :mod:`tweet_importer.extractors` – payload normalization and content rendering
* :mod:`tweet_importer.storage` – the site storage interface and its backends
* :mod:`tweet_importer.utils` – errors and JSON Lines reporting

The intention of this separation is to make the importer composable and
testable.  Each layer receives its configuration explicitly; orchestration
is handled in :mod:`tweet_importer.import_tool`.
"""

__version__ = "1.0.0"
