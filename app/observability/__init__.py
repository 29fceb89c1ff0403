"""Request timing, Prometheus instruments, and structured logging.

Everything here is process-local: the registry lives as long as the app that
owns it and is rendered on demand by the exposition endpoint.
"""
