# packages/circuits_builder/errors.py


class BuildError(RuntimeError):
    """Base class for every fatal condition that aborts a build."""


class ConfigError(BuildError):
    pass


class UnknownCircuit(ConfigError):
    def __init__(self, key: str):
        super().__init__(f"Unknown circuit: {key}")
        self.key = key


class PlatformError(BuildError):
    pass


class MissingPrerequisite(BuildError):
    pass


class ToolFailure(BuildError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, cmd: list[str], returncode: int | None = None, detail: str | None = None):
        self.cmd = list(cmd)
        self.returncode = returncode
        msg = f"Command failed: {' '.join(self.cmd)}"
        if returncode is not None:
            msg += f" (exit code {returncode})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
