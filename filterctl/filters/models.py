"""
Native filters: criteria and actions mapping 1:1 to a Gmail filter.

Filters are immutable pydantic models. The identifier is optional and never
takes part in comparisons made by the diff engine, which only looks at the
content hash.
"""

import hashlib
import json
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field

from filterctl.domain.enums import Category
from filterctl.filters.render import indent

SEARCH_URL_PREFIX = "https://mail.google.com/mail/u/0/#search/"


class Criteria(BaseModel):
    """Filtering criteria associated with a Gmail filter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(default="", alias="from")
    to: str = ""
    subject: str = ""
    query: str = ""

    def is_empty(self) -> bool:
        return self == Criteria()

    def to_gmail_search(self) -> str:
        """Return the equivalent query in Gmail search syntax."""
        res = []
        if self.from_:
            res.append(f"from:{self.from_}")
        if self.to:
            res.append(f"to:{self.to}")
        if self.subject:
            res.append(f"subject:{self.subject}")
        if self.query:
            res.append(self.query)
        return " ".join(res)

    def to_gmail_search_url(self) -> str:
        """Return an URL to the Gmail search of the equivalent query."""
        return SEARCH_URL_PREFIX + quote_plus(self.to_gmail_search(), safe="")


class Actions(BaseModel):
    """
    Actions associated with a Gmail filter.

    A native filter can apply at most one label.
    """

    model_config = ConfigDict(frozen=True)

    add_label: str = ""
    category: Category | None = None
    archive: bool = False
    delete: bool = False
    mark_important: bool = False
    mark_not_important: bool = False
    mark_read: bool = False
    mark_not_spam: bool = False
    star: bool = False
    forward: str = ""

    def is_empty(self) -> bool:
        return self == Actions()


class Filter(BaseModel):
    """A filter as stored in Gmail."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    criteria: Criteria = Field(default_factory=Criteria)
    action: Actions = Field(default_factory=Actions)

    def has_label(self, name: str) -> bool:
        return self.action.add_label == name

    def content_hash(self) -> str:
        """SHA-256 of the canonical contents of the filter, ignoring the id."""
        content = {
            "criteria": self.criteria.model_dump(by_alias=True),
            "action": self.action.model_dump(mode="json"),
        }
        return _sha256(content)

    def criteria_hash(self) -> str:
        """SHA-256 of the canonical criteria only."""
        content = self.criteria.model_dump(by_alias=True)
        return _sha256(content)

    def render(self) -> str:
        """
        Render the filter as text, one parameter per line.

        Example:
            * Criteria:
                from: foo@bar.com
              Actions:
                archive
                apply label: news
        """
        lines = ["* Criteria:\n"]
        _write_param(lines, "from", self.criteria.from_)
        _write_param(lines, "to", self.criteria.to)
        _write_param(lines, "subject", self.criteria.subject)
        _write_param(lines, "query", indent(self.criteria.query, 2))

        lines.append("  Actions:\n")
        _write_bool(lines, "archive", self.action.archive)
        _write_bool(lines, "delete", self.action.delete)
        _write_bool(lines, "mark as important", self.action.mark_important)
        _write_bool(lines, "never mark as important", self.action.mark_not_important)
        _write_bool(lines, "never mark as spam", self.action.mark_not_spam)
        _write_bool(lines, "mark as read", self.action.mark_read)
        _write_bool(lines, "star", self.action.star)
        _write_param(
            lines, "categorize as", self.action.category.value if self.action.category else ""
        )
        _write_param(lines, "apply label", self.action.add_label)
        _write_param(lines, "forward to", self.action.forward)

        return "".join(lines)

    def render_debug(self) -> str:
        """Render the filter with its Gmail search query and URL."""
        return (
            f"# Search: {self.criteria.to_gmail_search()}\n"
            f"# URL: {self.criteria.to_gmail_search_url()}\n"
            f"{self.render()}"
        )


def render_filters(filters: list[Filter], debug: bool = False) -> str:
    """Render a list of filters, separated by an empty line."""
    return "\n".join(f.render_debug() if debug else f.render() for f in filters)


def _write_param(lines: list[str], name: str, value: str) -> None:
    if value:
        lines.append(f"    {name}: {value}\n")


def _write_bool(lines: list[str], name: str, value: bool) -> None:
    if value:
        lines.append(f"    {name}\n")


def _sha256(content: dict) -> str:
    data = json.dumps(content, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
