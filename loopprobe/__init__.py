"""Loop iteration instrumentation for C and C++ sources, and pre-compilation of compilation databases."""

__version__ = "0.1.0"