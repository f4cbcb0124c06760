"""climb: a small expression language with an interpreter and an assembly backend."""

__version__ = "0.1.0"
