"""hitome: unified inbox for LINE conversations and Google reviews."""

__version__ = "0.3.0"
