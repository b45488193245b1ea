# app.py
"""
Lead Performance Dashboard - Main Entry Point

Landing page: database check and project (tenant) selection.
The selected project is kept in st.session_state['project_id'] and
read by every page.

Version: 1.0.0
"""

import logging

import pandas as pd
import streamlit as st

from utils.config import config
from utils.db import check_db_connection, get_connection_pool_status
from utils.lead_performance import RecordStoreError, get_projects, find_project

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.is_feature_enabled("DEBUG_MODE") else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Lead Performance"
APP_ICON = "📈"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #1f77b4;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== HELPER FUNCTIONS ====================

def show_project_selector(projects_df):
    """Sidebar project selector; stores the choice in session state."""
    if projects_df.empty:
        st.warning("No projects available for this database user.")
        return None

    ids = projects_df['id'].astype(str).tolist()
    names = dict(zip(ids, projects_df['name'].astype(str)))

    current = st.session_state.get('project_id')
    index = ids.index(str(current)) if current is not None and str(current) in ids else 0

    with st.sidebar:
        st.markdown("### 📁 Project")
        selected = st.selectbox(
            "Project",
            options=ids,
            index=index,
            format_func=lambda pid: names.get(pid, pid),
            label_visibility="collapsed"
        )

    if selected != current:
        logger.info(f"Project selected: {selected}")
    st.session_state['project_id'] = selected
    st.session_state['project_name'] = names.get(selected, selected)
    return find_project(projects_df, selected)


def show_main_app(project):
    """Landing content once a project is selected"""
    st.markdown(f'<p class="main-header">{APP_ICON} {project["name"]}</p>', unsafe_allow_html=True)
    if project.get('description'):
        st.markdown(f'<p class="sub-header">{project["description"]}</p>', unsafe_allow_html=True)

    goal = project.get('weekly_goal')
    if goal is None or pd.isna(goal) or not goal:
        goal = config.get_app_setting("DEFAULT_WEEKLY_GOAL", 50)
    st.caption(f"Weekly goal: {int(goal)} leads · Monthly goal: {int(goal) * 4} leads")

    st.markdown("### 📊 Available Dashboards")

    st.markdown("""
    <div class="info-card">
        <strong>📊 Lead Dashboard</strong><br>
        <span style="color: #666;">Monthly funnel, weekly leads vs goal, last 6 months and lead drill-through.</span>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("""
    <div class="info-card">
        <strong>💰 Billing & Commissions</strong><br>
        <span style="color: #666;">Revenue, cash collected, pending payments and setter / closer commissions.</span>
    </div>
    """, unsafe_allow_html=True)

    # System Status (debug only)
    if config.is_feature_enabled("DEBUG_MODE"):
        st.markdown("---")
        with st.expander("🔧 System Status"):
            pool_status = get_connection_pool_status()

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("DB Status", pool_status.get("status", "OK"))
            with col2:
                st.metric("Connections Used", pool_status.get("checked_out", 0))
            with col3:
                st.metric("Available", pool_status.get("checked_in", 0))

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
        st.error(f"⚠️ {db_error}")
        st.info("Please check your database settings (.env or Streamlit secrets).")
        return

    try:
        projects_df = get_projects()
    except RecordStoreError as e:
        st.error(f"❌ {e}")
        return

    project = show_project_selector(projects_df)
    if project is not None:
        show_main_app(project)


if __name__ == "__main__":
    main()
