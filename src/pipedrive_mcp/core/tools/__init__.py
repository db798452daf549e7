"""
Tool namespace for pipedrive-mcp.

Every public coroutine whose first parameter is ``session`` is exposed as a
tool by core.registry; modules starting with an underscore are helpers.
"""

from .activities import get_activities
from .deals import create_deal, get_deal, get_deals, update_deal
from .notes import get_notes
from .organizations import get_organizations
from .persons import get_persons
from .pipelines import get_pipelines
from .users import get_users

__all__ = [
    "get_deals",
    "get_deal",
    "create_deal",
    "update_deal",
    "get_persons",
    "get_organizations",
    "get_activities",
    "get_pipelines",
    "get_notes",
    "get_users",
]
