"""nodekit - command-line bootstrap for blockchain node processes.

Assembles a runnable node from a dependency graph of providers and a typer
command tree whose root callback loads and validates persisted configuration.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
