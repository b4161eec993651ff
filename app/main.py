"""
Streamlit Frontend for Expense Tracker

The user interface people use day to day. It talks to the API only
through ExpenseApiClient; it never touches the database.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Visual feedback for all operations
4. Any rejected token sends the user straight back to the login screen

Run with:  streamlit run app/main.py
"""

from datetime import date
from typing import Optional

import pandas as pd
import streamlit as st

from expense_tracker.client import ApiError, ExpenseApiClient, SessionExpiredError
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.models.expense import ALL_CATEGORIES, ExpenseCategory


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


PAGE_SIZE = 10


def get_client() -> ExpenseApiClient:
    """One client per browser session, carrying that session's token."""
    if "client" not in st.session_state:
        st.session_state.client = ExpenseApiClient.from_settings(get_settings().client)
    return st.session_state.client


def end_session(message: str = "Your session has expired. Please log in again.") -> None:
    get_client().logout()
    st.session_state.user = None
    st.session_state.flash = message
    st.rerun()


def call_api(fn, *args, **kwargs):
    """
    Run a client call, turning failures into on-screen errors.

    Returns None when the call failed.
    """
    try:
        return fn(*args, **kwargs)
    except SessionExpiredError:
        end_session()
    except ApiError as e:
        st.error(str(e))
    return None


def main():
    """Main application entry point."""
    client = get_client()
    st.session_state.setdefault("user", None)

    flash = st.session_state.pop("flash", None)
    if flash:
        st.warning(flash)

    if not client.is_authenticated:
        render_auth_page()
        return

    # Sidebar navigation
    st.sidebar.title("💰 Expense Tracker")
    user = st.session_state.user or {}
    st.sidebar.markdown(f"Signed in as **{user.get('username', '')}**")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "📋 Expenses", "➕ Add Expense", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        end_session("You have been logged out.")

    if page == "📊 Dashboard":
        render_dashboard_page()
    elif page == "📋 Expenses":
        render_expenses_page()
    elif page == "➕ Add Expense":
        render_add_page()
    elif page == "⚙️ Settings":
        render_settings_page()


def render_auth_page():
    """Login and registration forms."""
    st.title("💰 Expense Tracker")
    login_tab, register_tab = st.tabs(["Log in", "Register"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            user = call_api(get_client().login, email, password)
            if user:
                st.session_state.user = user
                st.rerun()

    with register_tab:
        with st.form("register"):
            username = st.text_input("Username", help="3 to 30 characters")
            email = st.text_input("Email ")
            password = st.text_input("Password ", type="password", help="At least 6 characters")
            confirm = st.text_input("Confirm password", type="password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            if password != confirm:
                st.error("Passwords do not match")
            else:
                user = call_api(get_client().register, username, email, password)
                if user:
                    st.session_state.user = user
                    st.rerun()


def reset_expense_page() -> None:
    st.session_state.expense_page = 1


def load_categories() -> list[str]:
    """Category names from the API, fetched once per session."""
    if "categories" not in st.session_state:
        categories = call_api(get_client().categories)
        if not categories:
            return ExpenseCategory.values()
        st.session_state.categories = categories
    return st.session_state.categories


def date_range_inputs(key: str, on_change=None) -> tuple[Optional[date], Optional[date]]:
    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", value=None, key=f"{key}_start", on_change=on_change)
    with col2:
        end = st.date_input("To", value=None, key=f"{key}_end", on_change=on_change)
    return start, end


def render_dashboard_page():
    """Summary totals and the per-category breakdown."""
    st.title("📊 Dashboard")

    start, end = date_range_inputs("dashboard")
    summary = call_api(get_client().summary, start, end)
    if summary is None:
        return

    col1, col2 = st.columns(2)
    col1.metric("Total spent", f"{summary['totalAmount']:,.2f}")
    col2.metric("Expenses", summary["totalCount"])

    breakdown = summary["categoryBreakdown"]
    if not breakdown:
        st.info("No expenses in this period yet. Use 'Add Expense' to record one.")
        return

    df = pd.DataFrame(breakdown).set_index("category")
    st.subheader("By category")
    st.bar_chart(df["total"])
    st.dataframe(
        df.rename(columns={
            "total": "Total",
            "count": "Count",
            "percentage": "Share (%)",
        }),
        use_container_width=True,
    )


def render_expenses_page():
    """Filtered, paginated list with edit and delete actions."""
    st.title("📋 Your Expenses")

    col1, col2 = st.columns(2)
    with col1:
        category = st.selectbox(
            "Category",
            options=[ALL_CATEGORIES] + load_categories(),
            on_change=reset_expense_page,
        )
    with col2:
        search = st.text_input("Search title or description", on_change=reset_expense_page)
    start, end = date_range_inputs("expenses", on_change=reset_expense_page)

    st.session_state.setdefault("expense_page", 1)
    result = call_api(
        get_client().list_expenses,
        category=category,
        start_date=start,
        end_date=end,
        search=search,
        page=st.session_state.expense_page,
        limit=PAGE_SIZE,
    )
    if result is None:
        return

    items = result["items"]
    pagination = result["pagination"]

    if not items:
        st.info("No expenses match these filters.")

    for item in items:
        render_expense_row(item)

    st.markdown("---")
    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        if st.button("◀ Previous", disabled=not pagination.get("hasPrev")):
            st.session_state.expense_page -= 1
            st.rerun()
    with col2:
        st.markdown(
            f"Page {pagination.get('currentPage', 1)} of "
            f"{max(pagination.get('totalPages', 0), 1)} "
            f"({pagination.get('totalExpenses', 0)} expenses)"
        )
    with col3:
        if st.button("Next ▶", disabled=not pagination.get("hasNext")):
            st.session_state.expense_page += 1
            st.rerun()


def render_expense_row(item: dict):
    label = f"{item['date']} · {item['title']} · {item['category']} · {item['amount']:,.2f}"
    with st.expander(label):
        if item.get("description"):
            st.markdown(item["description"])

        with st.form(f"edit_{item['id']}"):
            title = st.text_input("Title", value=item["title"])
            amount = st.number_input("Amount", value=float(item["amount"]), min_value=0.0, step=0.01)
            categories = load_categories()
            category = st.selectbox(
                "Category",
                options=categories,
                index=categories.index(item["category"]),
            )
            expense_date = st.date_input(
                "Date",
                value=date.fromisoformat(item["date"]),
                max_value=date.today(),
            )
            description = st.text_area("Description", value=item.get("description", ""))
            save = st.form_submit_button("💾 Save changes")

        if save:
            updated = call_api(get_client().update_expense, item["id"], {
                "title": title,
                "amount": amount,
                "category": category,
                "date": expense_date,
                "description": description,
            })
            if updated:
                st.success("Expense updated")
                st.rerun()

        if st.button("🗑️ Delete", key=f"delete_{item['id']}"):
            if call_api(get_client().delete_expense, item["id"]):
                st.success("Expense deleted")
                st.rerun()


def render_add_page():
    """Form for a new expense."""
    st.title("➕ Add Expense")

    with st.form("add_expense", clear_on_submit=True):
        title = st.text_input("Title *", max_chars=100)
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
            category = st.selectbox("Category *", options=load_categories())
        with col2:
            expense_date = st.date_input("Date *", value=date.today(), max_value=date.today())
        description = st.text_area("Description (optional)", max_chars=500)
        submitted = st.form_submit_button("Save expense", type="primary")

    if submitted:
        if not title.strip():
            st.error("Please enter a title")
            return
        created = call_api(
            get_client().create_expense,
            title=title,
            amount=amount,
            category=category,
            expense_date=expense_date,
            description=description,
        )
        if created:
            st.success(f"Saved '{created['title']}' ({created['amount']:,.2f})")


def render_settings_page():
    """Connection and configuration status."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")
    health = call_api(get_client().health)
    if health:
        st.success(f"✅ API - {health.get('message', 'reachable')}")

    status = validate_all_settings()
    for name in ("database", "auth", "app", "client"):
        if status.get(name, False):
            st.success(f"✅ {name.title()} settings loaded")
        else:
            st.error(f"❌ {name.title()} settings - {status.get(f'{name}_error', 'invalid')}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        f"API: `{get_client().base_url}`. To change it, set `API_BASE_URL` in a "
        "`.env` file. See `.env.example` for all variables."
    )


if __name__ == "__main__":
    main()
