"""
Gmail labels: validation and reconciliation.
"""

# Re-export for convenient imports.
from .diff import LabelsDiff as LabelsDiff
from .diff import ModifiedLabel as ModifiedLabel
from .diff import diff_labels as diff_labels
from .diff import merge_labels as merge_labels
from .diff import validate_labels_diff as validate_labels_diff
from .models import Color as Color
from .models import Label as Label
from .models import labels_from_config as labels_from_config
from .models import validate_labels as validate_labels
