"""wikifs - Markdown notes exposed as an extension-less virtual filesystem."""

__version__ = "0.1.0"
