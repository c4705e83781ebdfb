"""
Streamlit Frontend for MoneyMind

The presentation layer: it renders dashboards, tables and the calendar
from the signed-in user's data and re-renders after every ledger call.

DESIGN PRINCIPLES:
1. The ledger decides; the UI only collects input and shows results
2. Destructive actions need an explicit confirmation click
3. Rejected operations are shown as plain messages, nothing changes
4. The session lives in st.session_state, never in module globals
"""

from datetime import date
from decimal import Decimal

import pandas as pd
import streamlit as st

from moneymind.audit import create_correlation_id
from moneymind.auth import AuthError
from moneymind.components import create_app_components
from moneymind.config import get_settings
from moneymind.export import NothingToExportError, build_report, export_csv, export_filename
from moneymind.ledger import LedgerError
from moneymind.models import (
    Category,
    Goal,
    PaymentMethod,
    TransactionInput,
    TransactionType,
)
from moneymind.reports import (
    calendar_events,
    category_budgets,
    dashboard_summary,
    format_currency,
    goal_progress,
    recent_transactions,
    transaction_rows,
)
from moneymind.services.storage import StorageError
from moneymind.session import UserSession
from moneymind.validation import DataValidator


st.set_page_config(
    page_title="MoneyMind",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
    .positive { color: #28a745; }
    .negative { color: #dc3545; }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components(use_file_storage=True)


def current_session() -> UserSession:
    return st.session_state["session"]


def confirm(key: str, prompt: str) -> bool:
    """Two-click confirmation; returns True on the confirming click."""
    pending = st.session_state.get("pending_confirm")
    if pending != key:
        if st.button(prompt, key=f"ask-{key}"):
            st.session_state.pending_confirm = key
            st.rerun()
        return False

    st.warning("This cannot be undone.")
    col1, col2 = st.columns(2)
    if col1.button("Confirm", key=f"yes-{key}", type="primary"):
        st.session_state.pending_confirm = None
        return True
    if col2.button("Cancel", key=f"no-{key}"):
        st.session_state.pending_confirm = None
        st.rerun()
    return False


def main():
    """Main application entry point."""
    try:
        render_app()
    except StorageError as e:
        # Ledger and session changes are already rolled back
        st.error(f"Could not save your changes: {e}")


def render_app():
    auth, _, audit_storage = get_components()

    if "session" not in st.session_state:
        render_login_page(auth)
        return

    session = current_session()
    st.sidebar.title("💰 MoneyMind")
    st.sidebar.markdown(f"**{session.user.name}**  \n{session.user.email}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💸 Transactions", "🏦 Accounts", "🏷️ Categories",
         "🎯 Goals", "📅 Calendar", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("Log out"):
        del st.session_state["session"]
        st.rerun()

    if get_settings().app.debug_mode:
        render_audit_trail(audit_storage)

    if page == "📊 Dashboard":
        render_dashboard_page(session)
    elif page == "💸 Transactions":
        render_transactions_page(session)
    elif page == "🏦 Accounts":
        render_accounts_page(session)
    elif page == "🏷️ Categories":
        render_categories_page(session)
    elif page == "🎯 Goals":
        render_goals_page(session)
    elif page == "📅 Calendar":
        render_calendar_page(session)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_audit_trail(audit_storage):
    with st.sidebar.expander("🔍 Recent activity"):
        for event in audit_storage.get_recent_events(limit=15):
            icon = "⚠️" if event.severity.value != "info" else "•"
            st.caption(f"{icon} {event.timestamp:%H:%M:%S} {event.description}")


def render_login_page(auth):
    st.title("💰 MoneyMind")
    login_tab, register_tab = st.tabs(["Log in", "Register"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            try:
                st.session_state["session"] = auth.login(
                    email, password, correlation_id=create_correlation_id()
                )
                st.rerun()
            except AuthError as e:
                st.error(str(e))

    with register_tab:
        with st.form("register"):
            name = st.text_input("Name")
            email = st.text_input("Email", key="register-email")
            password = st.text_input("Password", type="password", key="register-password")
            is_student = st.checkbox("I'm a student")
            submitted = st.form_submit_button("Register")
        if submitted:
            try:
                auth.register(name, email, password, is_student=is_student)
                st.success("Registration successful! Please log in.")
            except AuthError as e:
                st.error(str(e))
            except ValueError as e:
                st.error(f"Please check your details: {e}")


def render_dashboard_page(session: UserSession):
    st.title("📊 Dashboard")
    data = session.data
    summary = dashboard_summary(data)
    currency = summary.currency

    trend = "positive" if summary.net_savings >= 0 else "negative"
    arrow = "↑" if summary.net_savings >= 0 else "↓"
    st.markdown(
        f'<div class="big-number">{format_currency(summary.total_balance, currency)}</div>'
        f'<div class="{trend}">{arrow} {format_currency(abs(summary.net_savings), currency)} this month</div>',
        unsafe_allow_html=True,
    )

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income this month", format_currency(summary.monthly_income, currency))
    col2.metric("Expenses this month", format_currency(summary.monthly_expenses, currency))
    col3.metric("Savings rate", f"{summary.savings_rate}%")
    col4.metric(
        "Online / Cash",
        format_currency(summary.monthly_online_expenses, currency),
        format_currency(summary.monthly_cash_expenses, currency),
        delta_color="off",
    )

    st.subheader("Recent transactions")
    rows = recent_transactions(data)
    if not rows:
        st.info("No transactions yet.")
    else:
        st.dataframe(
            pd.DataFrame([{
                "Date": r.date,
                "Description": r.description,
                "Category": r.category_name,
                "Account": r.account_name,
                "Method": r.method,
                "Amount": r.signed_amount,
            } for r in rows]),
            hide_index=True,
            use_container_width=True,
        )


def render_transactions_page(session: UserSession):
    st.title("💸 Transactions")
    data = session.data

    if not data.accounts:
        st.warning("Add an account first.")
        return

    editing_id = st.selectbox(
        "Edit an existing transaction",
        [""] + list(data.transactions),
        format_func=lambda tid: "➕ New transaction" if not tid else (
            f"{data.transactions[tid].date} · {data.transactions[tid].description}"
        ),
    )
    existing = data.transactions.get(editing_id) if editing_id else None

    account_ids = list(data.accounts)
    expense_categories = [c for c in data.categories.values() if not c.is_income]
    default_account = existing.account_id if existing else data.settings.default_account

    with st.form("transaction"):
        kind = st.selectbox(
            "Type",
            [TransactionType.EXPENSE, TransactionType.INCOME],
            index=1 if existing and existing.type == TransactionType.INCOME else 0,
            format_func=lambda t: t.value.capitalize(),
        )
        description = st.text_input("Description", value=existing.description if existing else "")
        amount = st.number_input(
            "Amount",
            min_value=0.01,
            step=0.01,
            value=float(existing.amount) if existing else 0.01,
        )
        when = st.date_input("Date", value=existing.date if existing else date.today())
        category_id = None
        if expense_categories:
            category_ids = [c.id for c in expense_categories]
            category_id = st.selectbox(
                "Category (expenses only)",
                category_ids,
                index=category_ids.index(existing.category_id)
                if existing and existing.category_id in category_ids else 0,
                format_func=lambda cid: data.categories[cid].name,
            )
        account_id = st.selectbox(
            "Account",
            account_ids,
            index=account_ids.index(default_account) if default_account in account_ids else 0,
            format_func=lambda aid: data.accounts[aid].name,
        )
        method = st.radio(
            "Payment method",
            [PaymentMethod.ONLINE, PaymentMethod.CASH],
            index=1 if existing and existing.method == PaymentMethod.CASH else 0,
            format_func=lambda m: m.value.capitalize(),
            horizontal=True,
        )
        submitted = st.form_submit_button("Save Transaction", type="primary")

    if submitted:
        try:
            candidate = TransactionInput(
                id=editing_id or None,
                account_id=account_id,
                category_id=category_id,
                type=kind,
                amount=Decimal(str(amount)).quantize(Decimal("0.01")),
                date=when,
                description=description,
                method=method,
            )
            session.ledger.upsert_transaction(candidate, correlation_id=create_correlation_id())
            st.success("Transaction saved.")
            st.rerun()
        except (LedgerError, StorageError) as e:
            st.error(str(e))
        except ValueError as e:
            st.error(f"Please check the form: {e}")

    if existing and confirm(f"delete-transaction-{existing.id}", "🗑️ Delete Transaction"):
        session.ledger.delete_transaction(existing.id, correlation_id=create_correlation_id())
        st.success("Transaction deleted.")
        st.rerun()

    st.markdown("---")
    rows = transaction_rows(data)
    if rows:
        st.dataframe(
            pd.DataFrame([r.model_dump(exclude={"transaction_id", "amount"}) for r in rows]),
            hide_index=True,
            use_container_width=True,
        )


def render_accounts_page(session: UserSession):
    st.title("🏦 Accounts")
    data = session.data
    currency = data.settings.currency

    for account in list(data.accounts.values()):
        with st.expander(f"{account.name} ({account.type}): {format_currency(account.balance, currency)}"):
            with st.form(f"account-{account.id}"):
                name = st.text_input("Account Name", value=account.name)
                kind = st.text_input("Account Type", value=account.type)
                st.caption("Balance is updated via transactions.")
                saved = st.form_submit_button("Save Account")
            if saved:
                try:
                    session.ledger.update_account(account.id, name, kind)
                    st.rerun()
                except (LedgerError, StorageError, ValueError) as e:
                    st.error(str(e))
            if confirm(f"delete-account-{account.id}", "🗑️ Delete Account"):
                try:
                    session.ledger.delete_account(account.id, correlation_id=create_correlation_id())
                    st.success("Account deleted.")
                    st.rerun()
                except (LedgerError, StorageError) as e:
                    st.error(str(e))

    st.subheader("Add Account")
    with st.form("new-account"):
        name = st.text_input("Account Name")
        kind = st.text_input("Account Type (e.g., Savings, Checking)")
        opening = st.number_input("Starting Balance", value=0.0, step=0.01)
        created = st.form_submit_button("Save Account", type="primary")
    if created:
        try:
            session.ledger.create_account(
                name,
                kind or "General",
                Decimal(str(opening)).quantize(Decimal("0.01")),
            )
            st.rerun()
        except StorageError as e:
            st.error(f"Could not save: {e}")
        except ValueError as e:
            st.error(f"Please check the form: {e}")


def render_categories_page(session: UserSession):
    st.title("🏷️ Categories")
    data = session.data
    currency = data.settings.currency

    query = st.text_input("Search categories").lower()
    for status in category_budgets(data):
        if query and query not in status.name.lower():
            continue
        st.markdown(f"**{status.name}**")
        st.progress(float(status.display_progress) / 100)
        st.caption(
            f"{format_currency(status.spent, currency)} spent · "
            f"{format_currency(status.budget, currency)} budget"
        )
        if confirm(f"delete-category-{status.category_id}", f"🗑️ Delete {status.name}"):
            session.ledger.delete_category(status.category_id)
            st.rerun()

    st.subheader("Add or edit a category")
    category_ids = [""] + list(data.categories)
    editing_id = st.selectbox(
        "Category",
        category_ids,
        format_func=lambda cid: "➕ New category" if not cid else data.categories[cid].name,
    )
    existing = data.categories.get(editing_id) if editing_id else None
    with st.form("category"):
        name = st.text_input("Name", value=existing.name if existing else "")
        budget = st.number_input(
            "Budget (for expenses)",
            min_value=0.0,
            value=float(existing.budget) if existing else 0.0,
        )
        color = st.color_picker("Color", value=existing.color if existing else "#3498db")
        submitted = st.form_submit_button("Save", type="primary")
    if submitted:
        try:
            category = Category(
                name=name,
                budget=Decimal(str(budget)),
                color=color,
                icon=existing.icon if existing else "fas fa-tag",
            )
            if existing:
                category = category.model_copy(update={"id": existing.id})
            session.ledger.upsert_category(category)
            st.rerun()
        except StorageError as e:
            st.error(f"Could not save: {e}")
        except ValueError as e:
            st.error(f"Please check the form: {e}")


def render_goals_page(session: UserSession):
    st.title("🎯 Goals")
    data = session.data
    currency = data.settings.currency

    for goal in goal_progress(data):
        st.markdown(f"**{goal.name}**")
        st.progress(float(goal.display_progress) / 100)
        st.caption(
            f"{format_currency(goal.current_amount, currency)} saved · "
            f"{format_currency(goal.target_amount, currency)} goal"
        )
        if confirm(f"delete-goal-{goal.goal_id}", f"🗑️ Delete {goal.name}"):
            session.ledger.delete_goal(goal.goal_id)
            st.rerun()

    st.subheader("Add or edit a goal")
    goal_ids = [""] + list(data.goals)
    editing_id = st.selectbox(
        "Goal",
        goal_ids,
        format_func=lambda gid: "➕ New goal" if not gid else data.goals[gid].name,
    )
    existing = data.goals.get(editing_id) if editing_id else None
    with st.form("goal"):
        name = st.text_input("Name", value=existing.name if existing else "")
        target = st.number_input(
            "Target Amount",
            min_value=0.0,
            value=float(existing.target_amount) if existing else 1000.0,
        )
        current = st.number_input(
            "Current Amount",
            min_value=0.0,
            value=float(existing.current_amount) if existing else 0.0,
        )
        color = st.color_picker("Color", value=existing.color if existing else "#00b894")
        submitted = st.form_submit_button("Save", type="primary")
    if submitted:
        try:
            goal = Goal(
                name=name,
                target_amount=Decimal(str(target)),
                current_amount=Decimal(str(current)),
                color=color,
            )
            if existing:
                goal = goal.model_copy(update={"id": existing.id})
            session.ledger.upsert_goal(goal)
            st.rerun()
        except StorageError as e:
            st.error(f"Could not save: {e}")
        except ValueError as e:
            st.error(f"Please check the form: {e}")


def render_calendar_page(session: UserSession):
    st.title("📅 Calendar")
    month = st.date_input("Month", value=date.today()).replace(day=1)

    events = [
        e for e in calendar_events(session.data)
        if e.start.year == month.year and e.start.month == month.month
    ]
    if not events:
        st.info("No transactions this month.")
        return

    for day in sorted({e.start for e in events}):
        st.markdown(f"**{day.strftime('%a %d %b')}**")
        for event in (e for e in events if e.start == day):
            st.markdown(
                f'<span style="color: {event.color};">●</span> {event.title}',
                unsafe_allow_html=True,
            )


def render_settings_page(session: UserSession):
    st.title("⚙️ Settings")
    data = session.data
    app_settings = get_settings().app

    currencies = app_settings.supported_currencies_list
    if data.settings.currency not in currencies:
        currencies.append(data.settings.currency)
    currency = st.selectbox("Currency", currencies, index=currencies.index(data.settings.currency))
    if currency != data.settings.currency:
        session.set_currency(currency)
        st.rerun()

    account_ids = list(data.accounts)
    if account_ids:
        current_default = data.settings.default_account
        default = st.selectbox(
            "Default account",
            account_ids,
            index=account_ids.index(current_default) if current_default in account_ids else 0,
            format_func=lambda aid: data.accounts[aid].name,
        )
        if default != current_default:
            session.set_default_account(default)
            st.rerun()

    st.markdown("---")
    st.subheader("Export")
    try:
        st.download_button(
            "Download CSV",
            export_csv(data),
            file_name=export_filename("csv"),
            mime="text/csv",
        )
        st.download_button(
            "Download report",
            build_report(session.user),
            file_name=export_filename("txt"),
            mime="text/plain",
        )
    except NothingToExportError as e:
        st.info(str(e))

    st.markdown("---")
    st.subheader("Data check")
    validator = DataValidator()
    st.text(validator.get_user_friendly_summary(validator.validate(data)))

    st.markdown("---")
    st.subheader("Danger zone")
    if confirm("reset-data", "Reset all data"):
        session.reset_data(correlation_id=create_correlation_id())
        st.success("All data reset.")
        st.rerun()


if __name__ == "__main__":
    main()
