"""
Daybook - tasks, meals and activity tracker backend.

Components:
- Brain dump: free text -> structured task drafts
- Meal plan: weekly breakfast/lunch/dinner slots
- Grocery list: per-week aggregation of planned recipe ingredients
"""

__version__ = "1.0.0"
