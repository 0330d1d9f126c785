"""
Exception hierarchy for the afforestation planner.
"""


class PlannerError(Exception):
    """Base class for all planner errors."""
    pass


class CatalogError(PlannerError):
    """Raised when tree catalog files are missing or malformed."""
    pass


class SearchConfigurationError(PlannerError):
    """Raised when budgets, search settings or catalog items make the search meaningless."""
    pass


class NoFeasibleSolutionError(PlannerError):
    """Raised when no chromosome satisfying both budgets was ever found."""
    pass
