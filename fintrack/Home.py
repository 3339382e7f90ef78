"""Main entry point for the FinTrack Streamlit multi-page app.

Pages in the pages/ directory appear in the sidebar automatically.  This
page shows the dashboard overview for the selected date range.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path so the fintrack package imports when run by streamlit
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from fintrack.filters import expenses_for_last_days
from fintrack.formatting import escape_dollar_for_markdown, format_display_date
from fintrack.shared_sidebar import render_shared_sidebar
from fintrack.ui import FinTrackUI


def main():
    """Render the dashboard overview."""
    context = render_shared_sidebar(page_title="FinTrack", page_icon="💰")
    report = context['report']
    ui = FinTrackUI()

    ui.render_header()
    st.caption(f"Showing: {report.range_label}")
    ui.render_summary_metrics(report)

    if not report.count:
        st.info("No expenses in this period. Add some on the 💸 Expenses page.")
        return

    ui.render_charts(report)

    col1, col2 = st.columns(2)
    with col1:
        ui.render_breakdown(report)
    with col2:
        ui.render_insights(report)

    st.subheader("🕒 Recent Expenses")
    recent = expenses_for_last_days(report.records, 7)
    if not recent:
        st.caption("Nothing in the last 7 days.")
    for record in recent[:5]:
        st.markdown(
            f"{format_display_date(record['date'])} · **{record['title']}** · {record['category']} · "
            f"{escape_dollar_for_markdown(record['amount'])}"
        )


if __name__ == "__main__":
    main()
