"""Domain-specific exception types for the extractor."""


class ExtractError(Exception):
    """Raised when a single file cannot be processed.

    Always caught at the per-file boundary and turned into a report; never
    fatal to the run.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ClassificationAmbiguous(ExtractError):
    """No known signature matched the leading bytes."""


class ContainerError(ExtractError):
    """A ZIP container could not be opened, enumerated or read."""


class ContainerSkipped(ContainerError):
    """A readable ZIP that holds no recognised document entry."""


class ExtractionError(ExtractError):
    """An extractor failed to decode the payload (malformed PDF, XML, …)."""


class PatternEngineFault(Exception):
    """The e-mail pattern failed to compile or execute.

    This points at a build or configuration defect rather than bad input, so it
    aborts the whole run.
    """
