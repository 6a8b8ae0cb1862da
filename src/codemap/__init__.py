"""codemap: language-detecting symbol mapper for C and C++ sources."""

__version__ = "0.1.0"
