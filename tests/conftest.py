"""Shared test fixtures."""
from datetime import date

import pytest
from unittest.mock import patch
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool


SCHEMA = [
    """
    CREATE TABLE projects (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        weekly_goal INTEGER
    )
    """,
    """
    CREATE TABLE leads (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        project_id TEXT NOT NULL,
        user_id TEXT,
        first_name TEXT,
        last_name TEXT,
        form_type TEXT,
        entry_date TEXT,
        contact_date TEXT,
        scheduled_call_date TEXT,
        attended_meeting INTEGER,
        result TEXT,
        sale_made INTEGER DEFAULT 0,
        observations TEXT,
        sale_amount REAL,
        payment_method TEXT,
        cash_collected REAL,
        closer TEXT,
        setter TEXT,
        installment_count INTEGER,
        initial_payment REAL
    )
    """,
    """
    CREATE TABLE meta_leads (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        project_id TEXT NOT NULL,
        user_id TEXT,
        week_start_date TEXT NOT NULL,
        week_number INTEGER,
        year INTEGER,
        leads_count INTEGER NOT NULL DEFAULT 0
    )
    """,
]


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with the lead tables created."""
    engine = create_engine(
        'sqlite://',
        poolclass=StaticPool,
        connect_args={'check_same_thread': False},
    )
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    yield engine
    engine.dispose()


@pytest.fixture
def patch_engine(db_engine):
    """Route the record store's get_db_engine() to the test engine."""
    with patch('utils.lead_performance.queries.get_db_engine', return_value=db_engine):
        yield db_engine


@pytest.fixture
def make_lead():
    """Factory fixture: lead dict with defaults for every field the engine reads."""
    def _make(entry_date, **overrides):
        lead = dict(
            project_id='p1',
            first_name='Lead',
            last_name='Test',
            form_type='guía',
            entry_date=entry_date,
            scheduled_call_date=None,
            attended_meeting=None,
            result=None,
            sale_made=False,
            sale_amount=None,
            cash_collected=None,
            payment_method=None,
            closer=None,
            setter=None,
        )
        lead.update(overrides)
        return lead
    return _make


@pytest.fixture
def scenario_leads(make_lead):
    """Two March 2025 leads: one plain, one sold by Ben."""
    return [
        make_lead('2025-03-03'),
        make_lead(
            '2025-03-10',
            sale_made=True,
            sale_amount=2000,
            cash_collected=2000,
            closer='Ben',
        ),
    ]


@pytest.fixture
def anchor_date():
    return date(2025, 3, 15)
