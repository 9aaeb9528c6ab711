"""Release download, update installation with rollback, and colour themes for a Cataclysm: Dark Days Ahead launcher."""

__version__ = "0.7.2"