"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables in one dataclass, built once at startup and then handed to
every component that needs it by parameter. Nothing reads process-wide
state after that:

    CLI / environment
          │
          ▼
    ServerConfig ──► SocketServer   (host, port, backlog)
          │
          ├────────► Connection     (buffer_size)
          │
          └────────► create_router  (directory)

=============================================================================
"""

import os
from dataclasses import dataclass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    Frozen: workers share one instance across threads, so it must not
    change once the server is running. Use dataclasses.replace() to derive
    a variant.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 4221
    """Port to listen on. 0 lets the OS pick one (handy in tests)."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 1024
    """
    Size of the single read performed per connection. Anything the client
    sends beyond this is never seen.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = ""
    """Root for /files/ reads and writes. "" is the working directory."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            TINYHTTPD_HOST       (default: 0.0.0.0)
            TINYHTTPD_PORT       (default: 4221)
            TINYHTTPD_DIRECTORY  (default: "")
            TINYHTTPD_LOG_LEVEL  (default: INFO)
        """
        return cls(
            host=os.getenv("TINYHTTPD_HOST", "0.0.0.0"),
            port=int(os.getenv("TINYHTTPD_PORT", "4221")),
            directory=os.getenv("TINYHTTPD_DIRECTORY", ""),
            log_level=os.getenv("TINYHTTPD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Fail fast on values the server cannot run with.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {', '.join(LOG_LEVELS)}."
            )
