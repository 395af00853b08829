"""Input-validation errors raised before any simulation work begins.

All three error kinds are fatal to a run: the simulator never returns a
table for a subset of the requested trials.
"""

from typing import List, Union


class MiningOutlookError(Exception):
    """Base class for validation errors.

    Attributes:
        issues: List of specific problems found.

    Examples:
        Catching and inspecting issues::

            try:
                sample(10, 5, 7, n=100)
            except InvalidParameters as e:
                for issue in e.issues:
                    print(f"  - {issue}")
    """

    def __init__(self, issues: Union[str, List[str]]) -> None:
        if isinstance(issues, str):
            issues = [issues]
        self.issues = list(issues)
        if len(self.issues) == 1:
            message = self.issues[0]
        else:
            bullet_list = "\n".join(f"  - {issue}" for issue in self.issues)
            message = f"{len(self.issues)} issues:\n{bullet_list}"
        super().__init__(message)


class InvalidParameters(MiningOutlookError):
    """Malformed PERT triple or generator arguments."""


class InvalidEnvironment(MiningOutlookError):
    """Misaligned trial/year counts or a missing required variable."""


class InvalidDecision(MiningOutlookError):
    """Undefined action, or an out-of-range year or funding level."""
