"""Design Token Sync: merge Figma design token CSS into a repository stylesheet."""

__version__ = "1.0.0"
