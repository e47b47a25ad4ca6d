"""Run level failures. Per-container problems never raise; they are logged."""


class PipelineError(Exception):
    """A condition that ends the whole run."""


class NoContainersFoundError(PipelineError):
    """Inventory returned no containers."""


class NothingToTestError(PipelineError):
    """Probing found no container able to run the audit script."""


class UserCancelledError(PipelineError):
    """The operator declined at the confirmation prompt."""
