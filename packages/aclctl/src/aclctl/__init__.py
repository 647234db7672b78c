__version__ = "0.1.0"

__all__ = [
    "__version__",
    "acl",
    "cli",
    "commands",
    "contracts",
    "core",
    "errors",
    "exit_codes",
    "registry",
]
