"""In-memory key/value table with query actions, configuration parsing, a worker pool and result printing."""

__version__ = "0.1.0"