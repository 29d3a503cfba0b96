"""CloudCore VM Manager API: authentication, audit trail and monitoring backend."""

__version__ = "0.1.0"
