"""Extract ``[msg:KEY]`` text from templates into key files and translate them."""

__version__ = "1.2.0"
