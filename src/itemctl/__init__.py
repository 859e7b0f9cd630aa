"""itemctl — item record service with an asynchronous batch processor."""

__version__ = "0.1.0"
