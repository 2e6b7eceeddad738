"""Identity resolution and session issuance for the chat backend."""

__version__ = "1.0.0"
