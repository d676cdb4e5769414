"""Core computation for the VaultSignal dashboard.

This package contains pure business logic with no I/O dependencies
(no network, files, or clock). It is shared between the HTTP service
(app/) and the command line scripts.
"""
