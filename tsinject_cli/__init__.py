"""tsinject: add constructor dependency injections to TypeScript classes in place."""

__version__ = "0.1.0"
