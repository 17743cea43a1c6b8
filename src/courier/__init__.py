"""courier: a small synchronous HTTP client."""

__version__ = "0.1.0"
