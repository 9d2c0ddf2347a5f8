"""gtd-sync: keeps #TODO markers in a markdown vault in sync with GTD task notes."""

__version__ = "0.1.0"
