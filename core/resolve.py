"""Minimum satisfying version of a version requirement."""

from semantic_version import Version

from .exceptions import ResolveError
from .semver import Op, VersionReq


def minimum_version_for_req(req: VersionReq) -> Version:
    """Return the lowest version accepted by a single caret or exact requirement.

    Absent minor and patch components default to 0, so ``^1`` resolves to
    ``1.0.0`` and ``=1.2`` to ``1.2.0``. The pre-release tag is carried
    forward; build metadata never is.

    Raises:
        ResolveError: If the requirement does not have exactly one comparator,
            or its operator is neither caret nor exact.
    """
    if len(req.comparators) != 1:
        raise ResolveError(f"unexpected number of comparators: {len(req.comparators)}")

    (comparator,) = req.comparators
    if comparator.op not in (Op.CARET, Op.EXACT):
        raise ResolveError(f"unexpected operator: {comparator.op.label}")

    return Version(
        major=comparator.major,
        minor=comparator.minor or 0,
        patch=comparator.patch or 0,
        prerelease=comparator.pre,
    )
