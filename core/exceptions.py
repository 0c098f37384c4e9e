"""Exception types raised by the DepDiff core."""


class DepdiffError(Exception):
    """Base class for all DepDiff errors."""


class SemverError(DepdiffError):
    """A version or version requirement string could not be parsed."""


class ResolveError(DepdiffError):
    """A requirement has no single minimum version we know how to compute."""


class ManifestError(DepdiffError):
    """A manifest could not be decoded or parsed as TOML."""


class GitError(DepdiffError):
    """A git command failed."""


class ClassificationError(DepdiffError):
    """A dependency declaration carries no usable version requirement."""
