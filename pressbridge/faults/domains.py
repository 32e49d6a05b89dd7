"""
PressBridge Faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- REGISTRY faults (descriptors, action references)
- ROUTING faults (template compilation)
- FLOW faults (parameter validation, action invocation)
- CACHE faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# REGISTRY Faults
# ============================================================================

class DescriptorFault(Fault):
    """
    Action descriptor is unusable.

    Raised for conflicting annotations, unresolvable action references
    and unknown filters. Aborts route table construction.
    """

    def __init__(
        self,
        reason: str,
        *,
        controller: Optional[str] = None,
        action: Optional[str] = None,
        code: str = "DESCRIPTOR_INVALID",
        **kwargs,
    ):
        super().__init__(
            code=code,
            message=reason,
            domain=FaultDomain.REGISTRY,
            severity=Severity.FATAL,
            retryable=False,
            public=False,
            metadata={
                "controller": controller,
                "action": action,
                **kwargs.get("metadata", {}),
            },
        )


# ============================================================================
# ROUTING Faults
# ============================================================================

class MalformedTemplateFault(Fault):
    """URL template has bad placeholder syntax."""

    def __init__(self, template: str, reason: str, **kwargs):
        super().__init__(
            code="TEMPLATE_MALFORMED",
            message=f"Malformed URL template '{template}': {reason}",
            domain=FaultDomain.ROUTING,
            severity=Severity.FATAL,
            retryable=False,
            public=False,
            metadata={"template": template, "reason": reason, **kwargs.get("metadata", {})},
        )
        self.template = template
        self.reason = reason


# ============================================================================
# FLOW Faults
# ============================================================================

class FlowFault(Fault):
    """Base class for action execution faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.FLOW,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class ParameterValidationFault(FlowFault):
    """
    A parameter fetcher rejected the incoming value.

    Carries the fetcher name so callers can build a localized message.
    The original error (if any) is available as ``cause``.
    """

    def __init__(
        self,
        fetcher: str,
        reason: str,
        *,
        cause: Optional[BaseException] = None,
        **kwargs,
    ):
        super().__init__(
            code="PARAMETER_INVALID",
            message=f"Error while validating parameter '{fetcher}': {reason}",
            severity=Severity.WARN,
            public=True,
            metadata={"fetcher": fetcher, "reason": reason, **kwargs.get("metadata", {})},
        )
        self.fetcher = fetcher
        self.reason = reason
        self.cause = cause


class ActionInvocationFault(FlowFault):
    """The invoked controller action (or one of its filters) failed."""

    def __init__(
        self,
        action: str,
        reason: str,
        *,
        cause: Optional[BaseException] = None,
        stage: str = "action",
        **kwargs,
    ):
        super().__init__(
            code="ACTION_FAILED",
            message=f"Action '{action}' failed during {stage}: {reason}",
            metadata={"action": action, "stage": stage, "reason": reason, **kwargs.get("metadata", {})},
        )
        self.action = action
        self.stage = stage
        self.cause = cause


# ============================================================================
# CACHE Faults
# ============================================================================

class CacheBackendFault(Fault):
    """
    Cache store/retrieve failure.

    Treated as a cache miss by the route cache: logged, never surfaced.
    """

    def __init__(self, backend: str, operation: str, reason: str, **kwargs):
        super().__init__(
            code="CACHE_BACKEND_ERROR",
            message=f"Cache backend '{backend}' error during {operation}: {reason}",
            domain=FaultDomain.CACHE,
            severity=Severity.WARN,
            retryable=False,
            public=False,
            metadata={"backend": backend, "operation": operation, "reason": reason, **kwargs.get("metadata", {})},
        )
