"""
Transport and client implementations for nanoget.

This package contains the byte stream interface the protocol engine reads
from and writes to, the socket/TLS transport provider, and the HTTP/1.1
client that wires a transport to the request builder and response parser.
"""
