"""kernrepo - keep a local pacman repository of kernel packages in sync."""

__version__ = "0.3.0"
