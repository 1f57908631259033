"""
Native Gmail filters and the diff engine reconciling two sets of them.
"""

# Re-export for convenient imports.
from .assignment import hungarian as hungarian
from .diff import FiltersDiff as FiltersDiff
from .diff import diff_filters as diff_filters
from .merge import FilterConflict as FilterConflict
from .merge import MergeCategories as MergeCategories
from .merge import categorize_merge as categorize_merge
from .models import Actions as Actions
from .models import Criteria as Criteria
from .models import Filter as Filter
