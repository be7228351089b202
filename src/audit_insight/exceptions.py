"""Exception classes for audit-insight."""


class InsightError(Exception):
    """Base exception for audit-insight."""


class ArtifactError(InsightError):
    """An artifact could not be fetched."""

    def __init__(self, artifact: str, message: str):
        self.artifact = artifact
        self.message = message
        super().__init__(f"{artifact}: {message}")


class MalformedArtifactError(ArtifactError):
    """An artifact was fetched but is not valid JSON of a usable shape."""


class InvalidPageSizeError(InsightError, ValueError):
    """Requested page size is not one of the allowed sizes."""

    def __init__(self, page_size: int, allowed: tuple[int, ...]):
        self.page_size = page_size
        self.allowed = allowed
        choices = ", ".join(str(s) for s in allowed)
        super().__init__(f"Page size {page_size} not allowed (choose from {choices})")


class UnknownCategoryError(InsightError, KeyError):
    """A user-supplied category name does not match any audit category."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown category: {self.name}"
