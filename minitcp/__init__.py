"""Non-blocking, poll-driven TCP server and client with event callbacks."""

__version__ = "0.1.0"
__all__ = ["server", "client"]