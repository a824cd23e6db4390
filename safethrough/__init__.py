"""Client toolkit for a secure file-sharing service: packets, file client, command parsing and codes."""

__version__ = "1.0.0"