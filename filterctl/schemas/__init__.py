"""
Pydantic schemas for the declarative configuration.
"""

# Re-export schemas for convenient imports.
from .config import Actions as Actions
from .config import Config as Config
from .config import FilterNode as FilterNode
from .config import LabelConfig as LabelConfig
from .config import Message as Message
from .config import NamedFilter as NamedFilter
from .config import Rule as Rule
from .config import Test as Test
