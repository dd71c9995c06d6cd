"""Adapters around the cloud API, the clipboard and external processes."""
