"""Tests for the record store (utils.lead_performance.queries) against SQLite."""
from datetime import date

import pytest
from sqlalchemy import text

from utils.config import config
from utils.lead_performance.metrics import LeadMetrics
from utils.lead_performance.queries import (
    LeadQueries,
    RecordStoreError,
    find_project,
    get_projects,
)


def _insert_project(engine, project_id, name, weekly_goal=None):
    with engine.begin() as conn:
        conn.execute(
            text("INSERT INTO projects (id, name, weekly_goal) VALUES (:id, :name, :goal)"),
            {'id': project_id, 'name': name, 'goal': weekly_goal},
        )


def _insert_lead(engine, project_id, entry_date, **fields):
    row = {'project_id': project_id, 'entry_date': entry_date, **fields}
    columns = ', '.join(row)
    values = ', '.join(f':{c}' for c in row)
    with engine.begin() as conn:
        conn.execute(text(f"INSERT INTO leads ({columns}) VALUES ({values})"), row)


def _count_meta_leads(engine):
    with engine.connect() as conn:
        return conn.execute(text("SELECT COUNT(*) FROM meta_leads")).scalar()


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------

class TestGetLeads:

    def test_scoped_to_project(self, patch_engine):
        _insert_lead(patch_engine, 'p1', '2025-03-03')
        _insert_lead(patch_engine, 'p1', '2025-03-10')
        _insert_lead(patch_engine, 'p2', '2025-03-05')

        df = LeadQueries('p1').get_leads()

        assert len(df) == 2
        assert set(df['project_id']) == {'p1'}
        assert list(df['entry_date']) == ['2025-03-10', '2025-03-03']

    def test_stored_flags_feed_metrics(self, patch_engine):
        _insert_lead(
            patch_engine, 'p1', '2025-03-10',
            scheduled_call_date='2025-03-12', attended_meeting=1,
            sale_made=1, sale_amount=2000, cash_collected=2000, closer='Ben',
        )
        _insert_lead(patch_engine, 'p1', '2025-03-11', attended_meeting=0)

        metrics = LeadMetrics(LeadQueries('p1').get_leads(), weekly_goal=50)
        funnel = metrics.funnel(3, 2025)

        assert funnel.attended == 1
        assert funnel.no_show == 1
        assert funnel.sales == 1
        assert metrics.commissions(3, 2025).get_closer('Ben').commission_from_cash == pytest.approx(160.0)

    def test_empty_project_id_rejected(self):
        with pytest.raises(ValueError):
            LeadQueries('')

    def test_database_error_raises_record_store_error(self, patch_engine):
        with patch_engine.begin() as conn:
            conn.execute(text("DROP TABLE leads"))

        with pytest.raises(RecordStoreError):
            LeadQueries('p1').get_leads()


# ---------------------------------------------------------------------------
# Meta leads
# ---------------------------------------------------------------------------

class TestMetaLeads:

    def test_save_stores_monday(self, patch_engine):
        queries = LeadQueries('p1')
        record = queries.save_meta_lead(user_id='u1', week_date=date(2025, 3, 6), leads_count=12)

        df = queries.get_meta_leads()

        assert record['week_start_date'] == '2025-03-03'
        assert len(df) == 1
        assert df.loc[0, 'week_start_date'] == '2025-03-03'
        assert df.loc[0, 'week_number'] == 10
        assert df.loc[0, 'leads_count'] == 12
        assert df.loc[0, 'user_id'] == 'u1'

    def test_save_without_user(self, patch_engine):
        LeadQueries('p1').save_meta_lead(user_id=None, week_date='2025-03-03', leads_count=0)
        assert _count_meta_leads(patch_engine) == 1

    def test_negative_count_not_stored(self, patch_engine):
        with pytest.raises(ValueError):
            LeadQueries('p1').save_meta_lead(user_id=None, week_date='2025-03-03', leads_count=-5)
        assert _count_meta_leads(patch_engine) == 0

    def test_meta_leads_scoped_and_bucketed(self, patch_engine):
        LeadQueries('p1').save_meta_lead(None, '2025-03-04', 10)
        LeadQueries('p2').save_meta_lead(None, '2025-03-04', 99)

        meta_df = LeadQueries('p1').get_meta_leads()
        weeks = LeadMetrics([], meta_df).weeks(3, 2025)

        assert sum(w.meta_leads for w in weeks) == 10

    def test_delete(self, patch_engine):
        queries = LeadQueries('p1')
        queries.save_meta_lead(None, '2025-03-03', 5)
        meta_id = int(queries.get_meta_leads().loc[0, 'id'])

        assert LeadQueries('p2').delete_meta_lead(meta_id) is False
        assert queries.delete_meta_lead(meta_id) is True
        assert queries.get_meta_leads().empty
        assert queries.delete_meta_lead(meta_id) is False

    def test_save_error_raises_record_store_error(self, patch_engine):
        with patch_engine.begin() as conn:
            conn.execute(text("DROP TABLE meta_leads"))

        with pytest.raises(RecordStoreError):
            LeadQueries('p1').save_meta_lead(None, '2025-03-03', 5)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class TestProjects:

    def test_weekly_goal_from_project(self, patch_engine):
        _insert_project(patch_engine, 'p1', 'Academy', weekly_goal=30)
        assert LeadQueries('p1').get_weekly_goal() == 30

    @pytest.mark.parametrize('weekly_goal', [None, 0])
    def test_weekly_goal_default(self, patch_engine, weekly_goal):
        _insert_project(patch_engine, 'p1', 'Academy', weekly_goal=weekly_goal)
        expected = int(config.get_app_setting('DEFAULT_WEEKLY_GOAL', 50))
        assert LeadQueries('p1').get_weekly_goal() == expected

    def test_weekly_goal_unknown_project(self, patch_engine):
        expected = int(config.get_app_setting('DEFAULT_WEEKLY_GOAL', 50))
        assert LeadQueries('missing').get_weekly_goal() == expected

    def test_get_projects_sorted(self, db_engine):
        _insert_project(db_engine, 'p2', 'Zeta', weekly_goal=20)
        _insert_project(db_engine, 'p1', 'Alpha')

        df = get_projects(db_engine)

        assert list(df['name']) == ['Alpha', 'Zeta']
        assert list(df.columns) == ['id', 'name', 'description', 'weekly_goal']

    def test_get_projects_error_raises_record_store_error(self, db_engine):
        with db_engine.begin() as conn:
            conn.execute(text("DROP TABLE projects"))

        with pytest.raises(RecordStoreError):
            get_projects(db_engine)

    def test_weekly_goal_error_raises_record_store_error(self, patch_engine):
        with patch_engine.begin() as conn:
            conn.execute(text("DROP TABLE projects"))

        with pytest.raises(RecordStoreError):
            LeadQueries('p1').get_weekly_goal()

    def test_find_project(self, db_engine):
        _insert_project(db_engine, 'p1', 'Alpha', weekly_goal=40)
        df = get_projects(db_engine)

        assert find_project(df, 'p1')['name'] == 'Alpha'
        assert find_project(df, 'nope') is None
        assert find_project(df, None) is None
