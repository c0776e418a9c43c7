"""Infrastructure layer — git checkouts, external formatter, file output.

This layer wraps subprocesses and the filesystem. It may import domain
types and errors, but never services, commands, or output.
"""
