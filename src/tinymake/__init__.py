__version__ = "0.1.0"

__all__ = [
    "__version__",
    "cli",
    "core",
    "errors",
    "exit_codes",
    "rules",
    "session",
]
