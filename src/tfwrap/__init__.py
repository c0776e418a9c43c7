"""tfwrap — generate JSON-configured wrapper modules around Terraform modules."""

__version__ = "0.1.0"
