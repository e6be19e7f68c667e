"""File Upload Manager Package."""

__version__ = "1.0.0"
__description__ = (
    "File upload manager core: validation, image compression and pluggable storage backends"
)

__all__ = ["handlers", "core"]
