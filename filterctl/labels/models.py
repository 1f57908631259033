"""
Gmail labels and their validation.
"""

from pydantic import BaseModel, ConfigDict

from filterctl.core.errors import ConfigError, combine_errors
from filterctl.schemas.config import LabelConfig


class Color(BaseModel):
    """
    Color of a label.

    See https://developers.google.com/gmail/api/v1/reference/users/labels
    for the list of possible colors.
    """

    model_config = ConfigDict(frozen=True)

    background: str
    text: str


class Label(BaseModel):
    """Information about a Gmail label."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str
    color: Color | None = None
    num_messages: int = 0

    def render(self) -> str:
        if self.color is None:
            return self.name
        return f"{self.name}; color: {self.color.background}, {self.color.text}"

    def is_equivalent(self, other: "Label") -> bool:
        """
        Return True if the local label ``other`` needs no change to match
        this one. A label without a color is equivalent to any color.
        """
        if self.name != other.name:
            return False
        if other.color is None:
            return True
        return self.color == other.color


def labels_from_config(labels: list[LabelConfig]) -> list[Label]:
    """Convert the labels declared in the configuration."""
    res = []
    for label in labels:
        color = None
        if label.color is not None:
            color = Color(background=label.color.background, text=label.color.text)
        res.append(Label(name=label.name, color=color))
    return res


def validate_labels(labels: list[Label]) -> None:
    """
    Check that a set of labels is well formed.

    Sub-labels don't need their parents to be declared.

    Raises:
        ConfigError: On an invalid name or a duplicate
        MultiError: If several labels are invalid
    """
    errors: list[Exception] = []
    seen: set[str] = set()

    for i, label in enumerate(labels):
        if not label.name:
            errors.append(ConfigError(f"label #{i} has an empty name", details={"index": i}))
            continue
        if label.name.startswith("/") or label.name.endswith("/"):
            errors.append(
                ConfigError(
                    f"label '{label.name}' shouldn't start or end with '/'",
                    details={"index": i, "name": label.name},
                )
            )
        if label.name in seen:
            errors.append(
                ConfigError(
                    f"label '{label.name}' is specified multiple times",
                    details={"index": i, "name": label.name},
                )
            )
        seen.add(label.name)

    err = combine_errors(*errors)
    if err is not None:
        raise err
