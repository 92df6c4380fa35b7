"""Exception types raised by construction graphs."""

from collections.abc import Iterable


def _format_names(names: Iterable[str]) -> str:
    return ", ".join(sorted(names))


class ConstructionsError(Exception):
    """Base class for all construction-graph errors."""


class DuplicateNameError(ConstructionsError, ValueError):
    """Raised when a name is already used in the construction."""

    def __init__(self, name: str) -> None:
        self.name = name
        msg = f"Name '{name}' is already used in the construction"
        super().__init__(msg)


class UnknownDependencyError(ConstructionsError, ValueError):
    """Raised when a constructed element requires names that do not exist."""

    def __init__(self, name: str, missing: Iterable[str]) -> None:
        self.name = name
        self.missing = frozenset(missing)
        msg = f"Unknown dependencies of '{name}': {_format_names(self.missing)}"
        super().__init__(msg)


class ElementNotFoundError(ConstructionsError, KeyError):
    """Raised when looking up or mutating a name that is not in the construction."""

    def __init__(self, name: str) -> None:
        self.name = name
        msg = f"Element '{name}' not found"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would otherwise render the repr of the message
        return str(self.args[0])


class NotAPlacedElementError(ConstructionsError, TypeError):
    """Raised when a placed-only operation targets a constructed element."""

    def __init__(self, name: str) -> None:
        self.name = name
        msg = f"Element '{name}' is a constructed element"
        super().__init__(msg)


class ConstructionRuleFailedError(ConstructionsError):
    """Raised when a rule fails while an element is being created."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        msg = f"Construction rule of '{name}' failed: {cause!r}"
        super().__init__(msg)


class RecomputeFailedError(ConstructionsError):
    """Raised when a rule fails while dependents of a change are recomputed.

    Elements recomputed before the failing one keep their new values.
    """

    def __init__(self, name: str, origin: str, cause: BaseException) -> None:
        self.name = name
        self.origin = origin
        self.cause = cause
        msg = f"Recomputing '{name}' after a change of '{origin}' failed: {cause!r}"
        super().__init__(msg)


class CycleDetectedError(ConstructionsError):
    """Raised when the elements cannot be put in dependency order."""

    def __init__(self, stuck: Iterable[str]) -> None:
        self.stuck = tuple(sorted(stuck))
        msg = f"Dependency cycle detected among: {_format_names(self.stuck)}"
        super().__init__(msg)


class UpdateStalledError(ConstructionsError):
    """Raised when recomputation after a change cannot make progress."""

    def __init__(self, origin: str, stuck: Iterable[str]) -> None:
        self.origin = origin
        self.stuck = tuple(sorted(stuck))
        msg = f"Dependency update stalled (cycle) while updating '{origin}': {_format_names(self.stuck)}"
        super().__init__(msg)
