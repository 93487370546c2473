from __future__ import annotations


class DigestError(Exception):
    """Base class for pipeline failures surfaced to callers."""


class ConfigurationError(DigestError):
    """Missing credentials or unusable configuration."""


class ValidationError(DigestError):
    """Rejected request input (e.g. empty topic)."""


class UpstreamError(DigestError):
    """Non-success response from a remote provider."""


class ParseError(UpstreamError):
    """Upstream payload is malformed or lacks expected fields."""
