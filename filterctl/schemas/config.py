"""
Pydantic models for the declarative configuration.

The configuration is obtained by the caller (e.g. by evaluating a Jsonnet or
YAML file) and handed over as a plain mapping; ``Config.model_validate``
turns it into these models. Field aliases follow the configuration language
(``markRead``, ``isEscaped``, ``replyto``...).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from filterctl.domain.enums import Category

# Configuration keys naming a function in a filter node, in priority order.
FUNCTION_KEYS = ("from", "to", "cc", "bcc", "replyto", "subject", "list", "has", "query")
OPERATION_KEYS = ("and", "or", "not")


class FilterNode(BaseModel):
    """
    A piece of a filter.

    The definition is recursive, as filters can be composed together with the
    logical operators. For every filter node only one operator, function or
    named filter reference can be specified.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    and_: list[FilterNode] | None = Field(default=None, alias="and")
    or_: list[FilterNode] | None = Field(default=None, alias="or")
    not_: FilterNode | None = Field(default=None, alias="not")

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    cc: str | None = None
    bcc: str | None = None
    replyto: str | None = None
    subject: str | None = None
    list_: str | None = Field(default=None, alias="list")
    has: str | None = None
    query: str | None = None

    # Reference to a named filter
    name: str | None = None

    # The given parameters don't need any further escaping.
    # Only allowed in combination with 'from', 'to' or 'subject'.
    is_escaped: bool = Field(default=False, alias="isEscaped")

    def non_empty_fields(self) -> list[str]:
        """Return the configuration names of the fields with a value."""
        res = []
        for key in (*OPERATION_KEYS, *FUNCTION_KEYS, "name"):
            value = self.value_of(key)
            if value is None or value == "" or value == []:
                continue
            res.append(key)
        return res

    def value_of(self, key: str) -> list[FilterNode] | FilterNode | str | None:
        """Return the value of a field given its configuration name."""
        field_name = key + "_" if key in ("and", "or", "not", "from", "list") else key
        return getattr(self, field_name)


class Actions(BaseModel):
    """Actions to be applied to the messages matching a rule."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    archive: bool = False
    delete: bool = False
    mark_read: bool = Field(default=False, alias="markRead")
    star: bool = False

    # Gmail does not allow setting markSpam to true: it can only be used to
    # prevent messages from going to spam.
    mark_spam: bool | None = Field(default=None, alias="markSpam")
    mark_important: bool | None = Field(default=None, alias="markImportant")

    category: Category | None = None
    labels: list[str] = Field(default_factory=list)

    forward: str = ""

    def is_empty(self) -> bool:
        return self == Actions()


class Rule(BaseModel):
    """A filter with the actions applied to the messages it matches."""

    model_config = ConfigDict(extra="forbid")

    filter: FilterNode
    actions: Actions


class NamedFilter(BaseModel):
    """A reusable filter, referenced from rules by name."""

    model_config = ConfigDict(extra="forbid")

    name: str
    filter: FilterNode


class LabelColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    background: str
    text: str


class LabelConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    color: LabelColor | None = None


class Message(BaseModel):
    """Contents and metadata of a sample email."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    from_: str = Field(default="", alias="from")
    to: list[str] = Field(default_factory=list)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    replyto: list[str] = Field(default_factory=list)
    lists: list[str] = Field(default_factory=list)
    subject: str = ""
    body: str = ""


class Test(BaseModel):
    """The intended actions applied to a set of sample messages."""

    model_config = ConfigDict(extra="forbid")

    # Optional, used for error reporting.
    name: str = ""
    messages: list[Message]
    actions: Actions


class Author(BaseModel):
    name: str = ""
    email: str = ""


class Config(BaseModel):
    """Full declarative configuration."""

    model_config = ConfigDict(extra="forbid")

    version: str = "v1alpha3"
    author: Author = Field(default_factory=Author)
    labels: list[LabelConfig] = Field(default_factory=list)
    filters: list[NamedFilter] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)
    tests: list[Test] = Field(default_factory=list)
