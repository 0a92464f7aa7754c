class OpenGAError(Exception):
    """Base for all OpenGA exceptions."""

    pass


# High-level families
class ConfigurationError(OpenGAError):
    """Invalid or conflicting engine configuration."""

    pass


class InvalidCandidateError(OpenGAError):
    """A chromosome violates a structural precondition."""

    pass


class EvolutionError(OpenGAError):
    """Evolution process failures."""

    pass


# Configuration subtypes
class OperatorSelectionPolicyConflictError(ConfigurationError):
    """Custom operator weights registered with a policy that ignores them."""

    pass


class MissingInitialPopulationError(ConfigurationError):
    """Raised when the engine is created without an initial population."""

    pass


class MissingOperatorError(ConfigurationError):
    """Raised when an operator family has nothing to select from."""

    pass


# Evolution subtypes
class EpochCancelledError(EvolutionError):
    """An epoch was abandoned because a stop or deadline was reached."""

    pass
