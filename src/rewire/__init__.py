from rewire.exceptions import (
    RewireAmbiguousParameterTypeError,
    RewireCircularDependencyError,
    RewireError,
    RewireInjectionTargetError,
    RewireInvalidRegistrationError,
    RewireNotFoundError,
    RewireNotInstantiableError,
    RewireReflectionError,
    RewireResolutionDepthError,
    RewireResolutionError,
    RewireScalarMissingError,
)
from rewire.injection import CallableInjection, MethodInjection
from rewire.lock_mode import LockMode
from rewire.resolver import Arguments, Resolver
from rewire.signatures import InspectSignatureProvider, Parameter, SignatureProvider

__all__ = [
    "Arguments",
    "CallableInjection",
    "InspectSignatureProvider",
    "LockMode",
    "MethodInjection",
    "Parameter",
    "Resolver",
    "RewireAmbiguousParameterTypeError",
    "RewireCircularDependencyError",
    "RewireError",
    "RewireInjectionTargetError",
    "RewireInvalidRegistrationError",
    "RewireNotFoundError",
    "RewireNotInstantiableError",
    "RewireReflectionError",
    "RewireResolutionDepthError",
    "RewireResolutionError",
    "RewireScalarMissingError",
    "SignatureProvider",
]
