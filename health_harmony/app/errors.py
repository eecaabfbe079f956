"""Error taxonomy shared by the flow layer, the profile store and the API."""


class HealthHarmonyError(Exception):
    """Base class for every error raised by this package."""


class InputValidationError(HealthHarmonyError):
    """Input rejected before any network call (empty name, bad photo URI, ...)."""


class ModelContractError(HealthHarmonyError):
    """The model answered, but its output did not match the declared schema."""

    def __init__(self, flow: str, reason: str):
        super().__init__(f"{flow}: model output violated contract: {reason}")
        self.flow = flow
        self.reason = reason


class ProviderError(HealthHarmonyError):
    """The model provider could not be reached or returned an error."""

    def __init__(self, flow: str, reason: str):
        super().__init__(f"{flow}: provider call failed: {reason}")
        self.flow = flow
        self.reason = reason


class PersistenceError(HealthHarmonyError):
    """Remote profile document could not be read or written."""


class AuthError(HealthHarmonyError):
    """Login or registration refused by the identity provider."""


class AuthUnavailableError(HealthHarmonyError):
    """No auth backend is configured; profiles stay session-only."""
