"""Streamlit UI components for FinTrack.

Rendering only: widgets collect input and show results, while persistence
goes through :mod:`fintrack.store` and calculations through
:mod:`fintrack.reports`.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st
from streamlit.errors import StreamlitAPIException

from .config import APP_NAME
from .formatting import escape_dollar_for_markdown, format_currency, format_display_date
from .models import CategorySet
from .reports import Report
from .validation import clean_amount_input, validate_expense_form
from .visualization import create_category_bar_chart, create_category_pie_chart, create_monthly_line_chart


class FinTrackUI:
    """Reusable page sections shared by the FinTrack pages."""
    _PAGE_CONFIGURED = False

    def setup_page_config(self, page_title: str = APP_NAME, page_icon: str = "💰") -> None:
        if FinTrackUI._PAGE_CONFIGURED:
            return
        try:
            st.set_page_config(
                page_title=page_title,
                page_icon=page_icon,
                layout="wide",
                initial_sidebar_state="expanded",
            )
        except StreamlitAPIException:
            # Already configured earlier in this run.
            pass
        finally:
            FinTrackUI._PAGE_CONFIGURED = True

    def render_header(self, subtitle: str = "Track your spending and see where your money goes") -> None:
        col1, col2 = st.columns([3, 1])
        with col1:
            st.title(f"💰 {APP_NAME}")
            st.markdown(subtitle)
        with col2:
            st.metric(label="Today", value=date.today().strftime("%B %d, %Y"))

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def render_auth_forms(self) -> Optional[Dict[str, str]]:
        """Login and sign-up tabs; returns ``{'action', 'email', 'password'}`` on submit."""
        login_tab, signup_tab = st.tabs(["🔑 Log In", "📝 Sign Up"])

        with login_tab:
            with st.form("login_form"):
                email = st.text_input("Email")
                password = st.text_input("Password", type="password")
                if st.form_submit_button("Log In"):
                    return {'action': 'sign_in', 'email': email, 'password': password}

        with signup_tab:
            with st.form("signup_form"):
                email = st.text_input("Email", key="signup_email")
                password = st.text_input("Password", type="password", key="signup_password")
                confirm = st.text_input("Confirm Password", type="password")
                if st.form_submit_button("Create Account"):
                    if password != confirm:
                        st.error("Passwords do not match")
                        return None
                    return {'action': 'sign_up', 'email': email, 'password': password}
        return None

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def render_expense_form(self, categories: CategorySet, key: str = "add_expense_form",
                            initial: Optional[Dict] = None) -> Optional[Dict]:
        """Expense entry form; returns a record ready for the store, or ``None``."""
        initial = initial or {}
        current_category = initial.get('category')
        names = categories.options_for(current_category)
        index = names.index(current_category) if current_category in names else 0

        with st.form(key):
            col1, col2 = st.columns(2)
            with col1:
                amount_text = st.text_input("Amount", value=str(initial.get('amount', '')))
                title = st.text_input("Title", value=initial.get('title', ''))
            with col2:
                category = st.selectbox(
                    "Category",
                    options=names,
                    index=index,
                    format_func=categories.label,
                )
                expense_date = st.date_input(
                    "Date",
                    value=pd.to_datetime(initial['date']).date() if initial.get('date') else date.today(),
                    max_value=date.today(),
                )
            submitted = st.form_submit_button("Save Expense" if initial else "Add Expense")

        if not submitted:
            return None

        cleaned = clean_amount_input(amount_text)
        result = validate_expense_form(cleaned or None, title, expense_date)
        if not result:
            st.error(result.error)
            return None
        return {
            'title': title.strip(),
            'amount': round(float(cleaned), 2),
            'category': category,
            'date': expense_date.isoformat(),
        }

    def render_expense_table(self, records: List[Dict]) -> None:
        if not records:
            st.info("No expenses yet. Add your first expense above.")
            return
        df = pd.DataFrame(records)
        display = pd.DataFrame({
            'Date': df['date'].map(format_display_date),
            'Title': df['title'],
            'Category': df['category'],
            'Amount': df['amount'].map(format_currency),
        })
        st.dataframe(display, use_container_width=True, hide_index=True)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def render_summary_metrics(self, report: Report) -> None:
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("💸 Total Spent", format_currency(report.total), help=report.range_label)
        with col2:
            st.metric("🧾 Transactions", report.count)
        with col3:
            st.metric("📊 Average", format_currency(report.average))
        with col4:
            top = report.top_category
            st.metric("🏆 Top Category", top.name if top else "None",
                      delta=format_currency(top.amount) if top else None, delta_color="off")

    def render_charts(self, report: Report) -> None:
        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(create_category_pie_chart(report.category_chart), use_container_width=True)
        with col2:
            st.plotly_chart(create_monthly_line_chart(report.monthly_chart), use_container_width=True)
        st.plotly_chart(create_category_bar_chart(report.category_chart), use_container_width=True)

    def render_breakdown(self, report: Report) -> None:
        st.subheader("💳 Spending by Category")
        shares = [share for share in report.breakdown if share.amount > 0]
        if not shares:
            st.info("No spending recorded for this period.")
            return
        for share in shares:
            st.markdown(
                f"**{share.category}**: {escape_dollar_for_markdown(share.amount)} ({share.percentage:.1f}%)"
            )

    def render_insights(self, report: Report) -> None:
        st.subheader("💡 Insights")
        if not report.insights:
            st.caption("Nothing unusual in this period.")
            return
        for message in report.insights:
            st.info(message.replace("$", "\\$"))
