"""Outbound HTTP gateways."""

from explorer.clients.auth import AuthGateway
from explorer.clients.countries import CountriesGateway

__all__ = ["AuthGateway", "CountriesGateway"]
