from pathlib import Path


class AssetsAppError(Exception):
    """Base user-facing application error."""


class AssetsConfigError(AssetsAppError):
    """Invalid plugin configuration. Aborts startup."""


class DynamicDestinationError(AssetsConfigError):
    def __init__(self, dest: str) -> None:
        self.dest = dest
        super().__init__(
            f"Dynamic patterns are not supported in target.dest: {dest}"
        )


class AssetsFileError(AssetsAppError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class MissingConfigFileError(AssetsFileError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Missing required config file")


class InvalidYamlFormatError(AssetsFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid YAML format ({detail})")


class InvalidConfigSchemaError(AssetsFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid config schema ({detail})")


class ManifestError(AssetsFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Unreadable build manifest ({detail})")
