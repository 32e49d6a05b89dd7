"""
PressBridge Faults - Structured error handling.

Errors raised by the bridge are typed fault signals with a stable code,
a domain and a severity, rather than bare exceptions.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
- Domain faults for templates, descriptors, dispatch and cache
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    DescriptorFault,
    MalformedTemplateFault,
    FlowFault,
    ParameterValidationFault,
    ActionInvocationFault,
    CacheBackendFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Domain faults
    "ConfigFault",
    "ConfigInvalidFault",
    "DescriptorFault",
    "MalformedTemplateFault",
    "FlowFault",
    "ParameterValidationFault",
    "ActionInvocationFault",
    "CacheBackendFault",
]
