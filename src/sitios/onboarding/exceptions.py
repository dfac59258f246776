"""Exceptions raised by the onboarding wizard."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitios.exceptions import SitiosError

if TYPE_CHECKING:
    from sitios.onboarding.wizard import WizardStep


class OnboardingError(SitiosError):
    """Base exception for onboarding errors."""


class WizardError(OnboardingError):
    """Raised when a wizard step fails. The wizard is left in ``FAILED``."""

    def __init__(self, step: WizardStep, reason: str) -> None:
        self.step = step
        self.reason = reason
        super().__init__(f"Onboarding failed at step '{step.value}': {reason}")


class WizardStepError(OnboardingError):
    """Raised when a step is called while the wizard is at another step."""

    def __init__(self, expected: WizardStep, actual: WizardStep) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Wizard is at step '{actual.value}', not '{expected.value}'")
