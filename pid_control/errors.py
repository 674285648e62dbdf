class ConfigurationError(ValueError):
    """Raised while building a Controller when an option cannot be applied."""
