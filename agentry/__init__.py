"""agentry - agent runtime for developer-tooling hosts."""

__version__ = "0.1.0"
