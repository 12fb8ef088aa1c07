"""
Client certificate gate for WSGI applications behind a TLS-terminating proxy.
"""
__version__ = "1.0.0"
