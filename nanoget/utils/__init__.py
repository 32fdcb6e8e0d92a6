"""Logging and TLS helpers shared by the nanoget clients and CLI."""
