"""Error types for liveserve."""

SERVER_IS_ALREADY_RUNNING = "serverIsAlreadyRunning"
SERVER_IS_NOT_RUNNING = "serverIsNotRunning"
PORT_ALREADY_IN_USE = "portAlreadyInUse"
CWD_UNDEFINED = "cwdUndefined"


class LiveServerError(Exception):
    """Server failure carrying a stable error code."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
