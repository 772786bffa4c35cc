"""Exception hierarchy for cmakebase."""


class CMakeBaseError(Exception):
    """Base class for expected configuration failures.

    Commands catch this hierarchy, report the message and exit non-zero
    instead of printing a traceback.
    """
    pass


class ConfigurationError(CMakeBaseError):
    """Invalid configuration value or project configuration file."""
    pass


class LayerNotFoundError(ConfigurationError):
    """A mandatory environment layer file does not exist."""
    pass


class ToolchainError(ConfigurationError):
    """A toolchain descriptor could not be resolved or is incomplete."""
    pass


class CMakeParseError(CMakeBaseError):
    """A .cmake script could not be parsed.

    Raised with the line and column of the first syntax error.
    """
    pass


class TemplateError(CMakeBaseError):
    """Project template could not be rendered or installed."""
    pass
