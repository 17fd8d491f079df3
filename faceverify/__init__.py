"""
Core package init for faceverify.

Makes the `faceverify` modules importable without requiring an editable install.
"""

__all__ = [
    "config",
    "detectors",
    "recognition",
    "verify",
    "viz",
    "io_utils",
    "types",
    "video",
]
