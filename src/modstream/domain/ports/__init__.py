from .domain_provider import DomainProviderPort
from .intermediate_host import IntermediateHostPort
from .link_validator import LinkValidatorPort
from .resolution import (
    ContentPagePort,
    GatedHostPort,
    LandingPagePort,
    LinkUnwrapperPort,
    OptionResolverPort,
    SearchEnginePort,
)

__all__ = [
    "ContentPagePort",
    "DomainProviderPort",
    "GatedHostPort",
    "IntermediateHostPort",
    "LandingPagePort",
    "LinkUnwrapperPort",
    "LinkValidatorPort",
    "OptionResolverPort",
    "SearchEnginePort",
]
