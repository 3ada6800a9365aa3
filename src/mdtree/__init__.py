"""mdtree - browse and search a directory of Markdown documents."""

__version__ = "0.1.0"
