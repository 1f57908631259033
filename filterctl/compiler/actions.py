"""
Translation of rule actions into native filter actions.
"""

from filterctl.core.errors import CompilationError
from filterctl.filters.models import Actions as FilterActions
from filterctl.schemas.config import Actions


def generate_actions(actions: Actions) -> list[FilterActions]:
    """
    Translate the actions of a rule into native filter actions.

    Since a native filter applies a single label, N labels produce N action
    objects: the first one carries every other effect and the first label,
    the others carry only their label.

    Raises:
        CompilationError: If the rule asks to send messages to spam
    """
    if actions.mark_spam is True:
        raise CompilationError(
            "gmail filters don't allow one to send messages to spam directly",
            details={"action": "markSpam"},
        )

    first = FilterActions(
        archive=actions.archive,
        delete=actions.delete,
        mark_important=actions.mark_important is True,
        mark_not_important=actions.mark_important is False,
        mark_read=actions.mark_read,
        category=actions.category,
        mark_not_spam=actions.mark_spam is False,
        star=actions.star,
        forward=actions.forward,
        add_label=actions.labels[0] if actions.labels else "",
    )
    return [first, *(FilterActions(add_label=label) for label in actions.labels[1:])]
