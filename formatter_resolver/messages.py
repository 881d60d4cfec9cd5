"""Log messages shared by the resolver."""

FAILED_TO_LOAD_MODULE_MESSAGE = (
    "Failed to load module. If you have a formatter installed, make sure it is declared and installed "
    "(run `npm install`)."
)
INVALID_FORMATTER_PATH_MESSAGE = (
    "`prettierPath` setting does not reference a valid formatter module. Check the path in your settings."
)
OUTDATED_FORMATTER_VERSION_MESSAGE = (
    "Your project is configured to use an outdated version of the formatter that cannot be used. "
    "Update the local installation, or remove it to fall back to the bundled version."
)
INVALID_FORMATTER_CONFIG = (
    "Invalid formatter configuration file detected. See log for details."
)
USING_BUNDLED_FORMATTER = "Using bundled version of the formatter."
