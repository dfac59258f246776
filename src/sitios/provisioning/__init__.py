"""Provisioning: publishing stored sites and the HTTP endpoint that creates them."""

from sitios.provisioning.api import create_app
from sitios.provisioning.publish import Publisher, site_globals

__all__ = ["Publisher", "create_app", "site_globals"]
