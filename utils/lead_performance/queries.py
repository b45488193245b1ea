# utils/lead_performance/queries.py
"""
Record Store for Lead Performance

Handles all database interactions:
- Projects (tenants) and their weekly goal
- Leads of one project
- Weekly meta-lead volume of one project
- Meta-lead weekly entries (week normalized to its Monday)

Every lead / meta-lead query is scoped to a single project_id.
Row-level authorization is enforced by the database, not here.
Uses @st.cache_data for read caching.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional, Union

import pandas as pd
import streamlit as st
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from utils.config import config
from utils.db import get_db_engine
from .constants import CACHE_TTL_SECONDS, DEFAULT_WEEKLY_GOAL, LEAD_COLUMNS
from .data_processor import build_meta_lead_record

logger = logging.getLogger(__name__)

# pd.read_sql re-raises driver errors as pandas.errors.DatabaseError
READ_ERRORS = (SQLAlchemyError, pd.errors.DatabaseError)


class RecordStoreError(Exception):
    """Lead data could not be read from or written to the database."""


class LeadQueries:
    """
    Data loading class for one project's lead records.

    Usage:
        queries = LeadQueries(project_id)

        leads_df = queries.get_leads()
        meta_df = queries.get_meta_leads()
        weekly_goal = queries.get_weekly_goal()
    """

    def __init__(self, project_id: str):
        """
        Initialize for a project.

        Args:
            project_id: Tenant whose records are loaded
        """
        if not project_id:
            raise ValueError("project_id is required")
        self.project_id = project_id
        self._engine = None

    @property
    def engine(self):
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    # =========================================================================
    # LEADS
    # =========================================================================

    def get_leads(self) -> pd.DataFrame:
        """
        Load all leads of the project, newest entry first.

        Returns:
            DataFrame with raw lead rows (normalize before computing)
        """
        query = f"""
            SELECT {', '.join(LEAD_COLUMNS)}
            FROM leads
            WHERE project_id = :project_id
            ORDER BY entry_date DESC
        """
        return self._execute_query(query, {'project_id': self.project_id}, "leads")

    # =========================================================================
    # META LEADS
    # =========================================================================

    def get_meta_leads(self) -> pd.DataFrame:
        """Load weekly meta-lead volume of the project, newest week first."""
        query = """
            SELECT
                id,
                project_id,
                user_id,
                week_start_date,
                week_number,
                year,
                leads_count
            FROM meta_leads
            WHERE project_id = :project_id
            ORDER BY week_start_date DESC
        """
        return self._execute_query(query, {'project_id': self.project_id}, "meta_leads")

    def save_meta_lead(
        self,
        user_id: Optional[str],
        week_date: Union[date, str],
        leads_count: int
    ) -> Dict[str, Any]:
        """
        Insert a weekly meta-lead count.

        Args:
            user_id: User recording the entry (None when the app runs without login)
            week_date: Any day of the week (stored as its Monday)
            leads_count: Non-negative lead count

        Returns:
            The stored record
        """
        record = build_meta_lead_record(self.project_id, user_id, week_date, leads_count)

        query = """
            INSERT INTO meta_leads
                (project_id, user_id, week_start_date, week_number, year, leads_count)
            VALUES
                (:project_id, :user_id, :week_start_date, :week_number, :year, :leads_count)
        """
        try:
            with self.engine.begin() as conn:
                conn.execute(text(query), record)
        except SQLAlchemyError as e:
            logger.error(f"Error saving meta lead for project {self.project_id}: {e}")
            raise RecordStoreError("Could not save the Meta leads entry") from e

        logger.info(
            f"Saved {record['leads_count']} meta leads for week {record['week_start_date']} "
            f"(project {self.project_id})"
        )
        return record

    def delete_meta_lead(self, meta_lead_id: int) -> bool:
        """Delete one weekly entry of this project. Returns False if not found."""
        query = """
            DELETE FROM meta_leads
            WHERE id = :id AND project_id = :project_id
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    text(query), {'id': meta_lead_id, 'project_id': self.project_id}
                )
        except SQLAlchemyError as e:
            logger.error(f"Error deleting meta lead {meta_lead_id}: {e}")
            raise RecordStoreError("Could not delete the Meta leads entry") from e

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted meta lead {meta_lead_id} (project {self.project_id})")
        return deleted

    # =========================================================================
    # PROJECT SETTINGS
    # =========================================================================

    def get_weekly_goal(self) -> int:
        """Project weekly goal; the configured DEFAULT_WEEKLY_GOAL when unset or zero."""
        default_goal = int(config.get_app_setting("DEFAULT_WEEKLY_GOAL", DEFAULT_WEEKLY_GOAL))
        query = """
            SELECT weekly_goal
            FROM projects
            WHERE id = :project_id
        """
        df = self._execute_query(query, {'project_id': self.project_id}, "weekly_goal")

        if df.empty or pd.isna(df['weekly_goal'].iloc[0]):
            return default_goal
        return int(df['weekly_goal'].iloc[0]) or default_goal

    # =========================================================================
    # CACHED ACCESS
    # =========================================================================

    def get_leads_cached(self) -> pd.DataFrame:
        return _get_leads_cached(self.project_id)

    def get_meta_leads_cached(self) -> pd.DataFrame:
        return _get_meta_leads_cached(self.project_id)

    @staticmethod
    def clear_cache():
        """Drop cached reads (call after writes)."""
        st.cache_data.clear()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _execute_query(
        self,
        query: str,
        params: dict,
        query_name: str = "query"
    ) -> pd.DataFrame:
        """
        Execute SQL query and return DataFrame.

        Raises:
            RecordStoreError: on any database error
        """
        try:
            logger.debug(f"Executing {query_name} for project {self.project_id}")
            with self.engine.connect() as conn:
                df = pd.read_sql(text(query), conn, params=params)
            logger.debug(f"{query_name} returned {len(df)} rows")
            return df
        except READ_ERRORS as e:
            logger.error(f"Error executing {query_name}: {e}")
            raise RecordStoreError(f"Could not load {query_name}") from e


# =============================================================================
# PROJECTS
# =============================================================================

def get_projects(engine=None) -> pd.DataFrame:
    """
    List projects the current database user can see.

    Returns:
        DataFrame with id, name, description, weekly_goal
    """
    engine = engine or get_db_engine()
    query = """
        SELECT id, name, description, weekly_goal
        FROM projects
        ORDER BY name
    """
    try:
        with engine.connect() as conn:
            return pd.read_sql(text(query), conn)
    except READ_ERRORS as e:
        logger.error(f"Error loading projects: {e}")
        raise RecordStoreError("Could not load projects") from e


def find_project(projects_df: pd.DataFrame, project_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Row of projects_df with the given id as a dict, or None."""
    if projects_df.empty or project_id is None:
        return None
    match = projects_df[projects_df['id'].astype(str) == str(project_id)]
    if match.empty:
        return None
    return match.iloc[0].to_dict()


# =============================================================================
# CACHED QUERY FUNCTIONS (Module-level for st.cache_data)
# =============================================================================

_CACHE_TTL = config.get_app_setting("CACHE_TTL_SECONDS", CACHE_TTL_SECONDS)


@st.cache_data(ttl=_CACHE_TTL, show_spinner=False)
def _get_leads_cached(project_id: str) -> pd.DataFrame:
    """Cached version of LeadQueries.get_leads."""
    return LeadQueries(project_id).get_leads()


@st.cache_data(ttl=_CACHE_TTL, show_spinner=False)
def _get_meta_leads_cached(project_id: str) -> pd.DataFrame:
    """Cached version of LeadQueries.get_meta_leads."""
    return LeadQueries(project_id).get_meta_leads()
