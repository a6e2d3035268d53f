"""Custom exceptions for the minimizer."""

class ConfigError(Exception):
    """Raised when there is a configuration error."""
    pass


class PortError(Exception):
    """Base exception for hyprctl-related errors.

    This exception is raised when a window manager query or dispatch
    could not be completed.
    """
    def __init__(self, message: str, command: str = None, stderr: str = None):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class PortExecError(PortError):
    """Exception raised when hyprctl itself could not be run.

    This includes a missing binary, permission problems and timeouts.
    """
    pass


class PortDecodeError(PortError):
    """Exception raised for malformed hyprctl output.

    This includes invalid JSON and JSON that does not have the expected shape.
    """
    pass


class PortCommandFailure(PortError):
    """Exception raised when hyprctl ran but reported a failure."""
    def __init__(self, message: str, command: str = None, stderr: str = None, returncode: int = None):
        super().__init__(message, command=command, stderr=stderr)
        self.returncode = returncode


class NoTargetWindow(Exception):
    """Raised when no window could be resolved at startup."""
    pass


class RegistrationFailure(Exception):
    """Raised when the tray icon could not be published or registered with the tray host."""
    pass
