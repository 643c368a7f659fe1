"""sysbar - CPU, memory and swap usage indicator."""

__version__ = "0.1.0"
