"""Shared session handling and sidebar for every FinTrack page.

Each page calls :func:`render_shared_sidebar` first.  It gates the page
behind sign-in, renders the date-range selector and returns the objects the
page needs: the signed-in user, the store handles, the merged category set
and the live report for the selected range.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

import streamlit as st

from . import store
from .auth import AuthService, User
from .config import configure_logging, ensure_data_directories
from .errors import FinTrackError
from .filters import RANGE_KINDS, RANGE_LABELS, RangeSpec
from .live import LiveReport, Snapshot
from .models import CategorySet
from .ui import FinTrackUI

logger = logging.getLogger(__name__)

_AUTH_KEY = 'fintrack_auth'
_USER_KEY = 'fintrack_user'
_LIVE_KEY = 'fintrack_live'


def _bootstrap() -> AuthService:
    if _AUTH_KEY not in st.session_state:
        configure_logging()
        ensure_data_directories()
        store.init_db()
        auth = AuthService()
        auth.observe_session(_remember_user)
        st.session_state[_AUTH_KEY] = auth
    return st.session_state[_AUTH_KEY]


def _remember_user(user: Optional[User]) -> None:
    st.session_state[_USER_KEY] = user
    if user is None:
        _close_live_session()


def _close_live_session() -> None:
    live = st.session_state.pop(_LIVE_KEY, None)
    if live:
        for subscription in live['subscriptions']:
            subscription.unsubscribe()


def _open_live_session(user: User) -> Dict[str, Any]:
    live = st.session_state.get(_LIVE_KEY)
    if live and live['uid'] == user.uid:
        return live
    _close_live_session()

    expenses = store.ExpenseStore(user.uid)
    categories = store.CategoryStore(user.uid)
    report = LiveReport()
    live = {
        'uid': user.uid,
        'report': report,
        'category_set': CategorySet.merge(),
        'subscriptions': [],
    }

    def on_categories(snapshot: Snapshot) -> None:
        live['category_set'] = CategorySet.merge(snapshot.records)
        report.update(categories=live['category_set'].names())

    live['subscriptions'] = [
        categories.subscribe(on_categories),
        expenses.subscribe(report),
    ]
    st.session_state[_LIVE_KEY] = live
    logger.debug("Opened live session for %s", user.uid)
    return live


def _render_login(ui: FinTrackUI, auth: AuthService) -> None:
    ui.render_header("Sign in to start tracking your expenses")
    submission = ui.render_auth_forms()
    if not submission:
        return
    try:
        if submission['action'] == 'sign_up':
            auth.sign_up(submission['email'], submission['password'])
        else:
            auth.sign_in(submission['email'], submission['password'])
    except FinTrackError as exc:
        st.error(str(exc))
        return
    st.rerun()


def render_range_selector() -> RangeSpec:
    st.sidebar.subheader("📅 Date Range")
    kind = st.sidebar.selectbox(
        "Period",
        options=list(RANGE_KINDS),
        format_func=lambda value: RANGE_LABELS.get(value, 'Custom Range'),
        key='fintrack_range_kind',
    )
    if kind != 'custom':
        return RangeSpec(kind)

    today = date.today()
    start = st.sidebar.date_input("Start date", value=today - timedelta(days=30), key='fintrack_range_start')
    end = st.sidebar.date_input("End date", value=today, key='fintrack_range_end')
    if start > end:
        st.sidebar.warning("Start date is after end date; no expenses will match.")
    return RangeSpec.custom(start, end)


def render_shared_sidebar(page_title: str = "FinTrack", page_icon: str = "💰") -> Dict[str, Any]:
    """Render the sidebar and return the page context.

    Stops the script run (showing the login forms) when nobody is signed in.

    Returns:
        Dict with keys: 'user', 'expenses', 'categories', 'category_set',
        'report', 'live', 'range'
    """
    ui = FinTrackUI()
    ui.setup_page_config(page_title, page_icon)
    auth = _bootstrap()

    user = st.session_state.get(_USER_KEY)
    if user is None:
        _render_login(ui, auth)
        st.stop()

    st.sidebar.markdown(f"👤 **{user.email}**")
    if st.sidebar.button("🚪 Log Out"):
        auth.sign_out()
        st.rerun()

    try:
        live = _open_live_session(user)
    except FinTrackError as exc:
        st.error(str(exc))
        st.stop()

    range_spec = render_range_selector()
    report = live['report']
    if report.range_spec != range_spec:
        report.update(range_spec=range_spec)
    if report.error is not None:
        st.sidebar.error(f"Could not load expenses: {report.error}")

    return {
        'user': user,
        'expenses': store.ExpenseStore(user.uid),
        'categories': store.CategoryStore(user.uid),
        'category_set': live['category_set'],
        'report': report.report,
        'live': report,
        'range': range_spec,
    }

