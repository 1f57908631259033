"""
Reconciliation of label sets.

Labels are matched by name; ids and message counts are ignored.
"""

from dataclasses import dataclass, field

from filterctl.core.errors import DiffValidationError
from filterctl.core.reporting import unified_diff
from filterctl.filters.models import Filter
from filterctl.labels.models import Label


@dataclass(frozen=True)
class ModifiedLabel:
    """A label in two versions, the old and the new."""

    old: Label
    new: Label


@dataclass
class LabelsDiff:
    """Labels to add, remove and modify to go from observed to desired."""

    added: list[Label] = field(default_factory=list)
    removed: list[Label] = field(default_factory=list)
    modified: list[ModifiedLabel] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.added and not self.removed and not self.modified

    def __str__(self) -> str:
        old: list[str] = []
        new: list[str] = []

        for ml in self.modified:
            old.append(_cleanup(ml.old).render() + "\n")
            new.append(ml.new.render() + "\n")
        for label in self.removed:
            old.append(_cleanup(label).render() + "\n")
        for label in self.added:
            new.append(label.render() + "\n")

        return unified_diff(old, new)


def diff_labels(observed: list[Label], desired: list[Label]) -> LabelsDiff:
    """
    Compute the changes needed to go from the observed labels to the desired.

    Both lists are sorted by name and merge-joined.
    """
    upstream = sorted(observed, key=lambda lbl: lbl.name)
    local = sorted(desired, key=lambda lbl: lbl.name)

    res = LabelsDiff()
    i, j = 0, 0
    while i < len(upstream) and j < len(local):
        ups, loc = upstream[i], local[j]
        if ups.name < loc.name:
            res.removed.append(ups)
            i += 1
        elif ups.name > loc.name:
            res.added.append(loc)
            j += 1
        else:
            if not ups.is_equivalent(loc):
                res.modified.append(ModifiedLabel(old=ups, new=loc))
            i += 1
            j += 1

    res.removed.extend(upstream[i:])
    res.added.extend(local[j:])
    return res


def validate_labels_diff(diff: LabelsDiff, filters: list[Filter]) -> None:
    """
    Make sure a diff is safe to apply.

    Raises:
        DiffValidationError: If a removed label is still used by a filter
    """
    for label in diff.removed:
        if any(f.has_label(label.name) for f in filters):
            raise DiffValidationError(
                f"cannot remove label '{label.name}', used in filter",
                details={"label": label.name},
            )


def merge_labels(local: list[Label], remote: list[Label]) -> list[Label]:
    """
    Merge two label sets, keeping the remote version on name clashes.

    Remote labels come first, followed by the local-only ones in their
    original order.
    """
    remote_names = {label.name for label in remote}
    return [*remote, *(label for label in local if label.name not in remote_names)]


def _cleanup(label: Label) -> Label:
    # Get rid of distracting information in the diff.
    return Label(name=label.name, color=label.color)
