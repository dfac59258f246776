"""Trello onboarding wizard."""

from sitios.onboarding.exceptions import OnboardingError, WizardError, WizardStepError
from sitios.onboarding.wizard import OnboardingWizard, WizardStep, build_instant_site_request

__all__ = [
    "OnboardingError",
    "OnboardingWizard",
    "WizardError",
    "WizardStep",
    "WizardStepError",
    "build_instant_site_request",
]
