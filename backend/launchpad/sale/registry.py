"""
Project registry.

Projects are appended once and never updated or removed; a project's index
in the registry is its permanent id.
"""

from typing import List

from launchpad.core.constants import DISCOUNT_BASIS
from launchpad.core.errors import InvalidProjectParameters, ProjectNotFound
from launchpad.sale.base import Journaled
from launchpad.sale.types import Project, is_zero_address


class ProjectRegistry(Journaled):
    """
    Ordered, append-only catalog of sale projects.

    Usage:
        project_id = registry.add_project(project, now=clock())
        project = registry.require_valid_project_id(project_id)
    """

    def __init__(self):
        super().__init__()
        self._projects: List[Project] = []

    def __len__(self) -> int:
        return len(self._projects)

    @staticmethod
    def validate(project: Project, now: int) -> None:
        """Raise InvalidProjectParameters for the first violated rule."""
        if is_zero_address(project.payout_address):
            raise InvalidProjectParameters("Funds address must not be 0")
        if project.start_time <= now:
            raise InvalidProjectParameters("Start time should be after the current time")
        if project.end_time <= project.start_time:
            raise InvalidProjectParameters("End time should come after the start time")
        if project.max_allocate_amount <= 0:
            raise InvalidProjectParameters(
                "Maximum of allocated amount should be greater than 0"
            )
        if project.usd_price_per_token_e6 <= 0:
            raise InvalidProjectParameters("USD price per token should be greater than 0")
        if not 0 < project.native_discount_multiplier_e4 < DISCOUNT_BASIS:
            raise InvalidProjectParameters(
                "Native price discount multiplier should be between 0.01% and 99.99%"
            )
        if project.token_decimals < 0:
            raise InvalidProjectParameters("Token decimals must not be negative")

    def add_project(self, project: Project, now: int) -> int:
        self.validate(project, now)
        self._projects.append(project)
        self._record(self._projects.pop)
        return len(self._projects) - 1

    def get_projects(self) -> List[Project]:
        return list(self._projects)

    def require_valid_project_id(self, project_id: int) -> Project:
        if not 0 <= project_id < len(self._projects):
            raise ProjectNotFound()
        return self._projects[project_id]
