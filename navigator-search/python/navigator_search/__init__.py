"""
Search and multi-select engine for technique matrix views

Filters techniques, groups, software, mitigations, campaigns and data
components of one domain version by a free-text query, decides which result
panels are expanded, and propagates selections onto techniques.
"""

from .config import SearchSettings
from .database import DatabaseManager, get_db_manager, get_db_session, db_session
from .models import *
from .repositories import *
from .schemas import *
from .services import *
from .loaders import StixBundleLoader
from .scheduling import Scheduler, AsyncioScheduler, Debouncer
from .signals import Signal
from .view_model import ViewModel, TechniqueViewModel
from .search import SearchAndMultiselect
from .exceptions import *

__version__ = "1.0.0"
