"""Input validation errors raised when calculator inputs are constructed."""


class InvalidInputError(ValueError):
    """Base class for rejected calculator inputs.

    Attributes:
        errors: Field-level messages, e.g. ``["deductible: Input should be greater than or equal to 0"]``
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidPlanParameters(InvalidInputError):
    """Plan premium, deductible, coinsurance or out-of-pocket values are out of range."""


class InvalidHealthProfile(InvalidInputError):
    """Health profile fields are missing or use unknown usage buckets."""


class InvalidSimulationInput(InvalidInputError):
    """Monte Carlo parameters cannot produce a cost distribution."""


class InvalidCOBRAInput(InvalidInputError):
    """COBRA premiums, elapsed months or dates are out of range."""


class InvalidHousehold(InvalidInputError):
    """Household ages or add-on preferences are missing or out of range."""
