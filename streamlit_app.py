import logging
from datetime import date

import streamlit as st

from auth import AuthClient, get_client
from calculator import ALL_KINDS, FilterState, TripKind, month_label
from export import EXPORT_MIME, export_filename, export_trips_json
from rpc import DEFAULT_TIMEOUT, RpcError
from trip_manager import TripForm, TripManager, form_from_trip

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Settings (set in .streamlit/secrets.toml)
API_BASE_URL = st.secrets.get("API_BASE_URL", "http://localhost:3000")
API_TIMEOUT = float(st.secrets.get("API_TIMEOUT", DEFAULT_TIMEOUT))
SHOW_DEV_DETAILS = bool(st.secrets.get("SHOW_DEV_DETAILS", False))

MANAGER_KEY = "trip_manager"


def format_date(d: date) -> str:
    return d.strftime("%a %d/%m/%Y")


def _flash(ok: bool, message: str) -> None:
    """Queue a toast for the next rerun."""
    st.session_state["flash"] = (ok, message)


def _show_flash() -> None:
    if "flash" in st.session_state:
        ok, msg = st.session_state.pop("flash")
        st.toast(msg, icon="✅" if ok else "⚠️")


def _dev_details(e: Exception) -> None:
    if SHOW_DEV_DETAILS:
        with st.expander("Details (developer)"):
            st.exception(e)


# -------------------------
# PAGE CONFIG
# -------------------------
st.set_page_config(page_title="Trip Log", page_icon="🚗", layout="wide")

st.markdown(
    """
    <style>
    div[data-testid="InputInstructions"] {
        display: none !important;
    }

    div[data-testid="stButton"] > button {
        border-radius: 999px !important;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

# -------------------------
# BACKEND CONNECTION
# -------------------------
client = get_client(API_BASE_URL, timeout=API_TIMEOUT)
auth = AuthClient(client)


# -------------------------
# AUTH GATE
# -------------------------
user = auth.current_user()

st.title("🚗 Trip Log")
st.caption("Work deliveries, personal drives, odometer readings and earnings.")

_show_flash()

if not user:
    st.info("Please sign in to view and save your trips.")

    left, mid, right = st.columns([1, 1.3, 1])

    with mid:
        auth_mode = st.radio(" ", ["Sign in", "Sign up"], horizontal=True, key="auth_mode")

        if auth_mode == "Sign in":
            with st.form("sign_in_form"):
                email = st.text_input("Email", placeholder="you@example.com")
                password = st.text_input("Password", type="password")
                submitted = st.form_submit_button("Sign in", use_container_width=True)

                if submitted:
                    try:
                        auth.login(email=email.strip(), password=password)
                        st.rerun()
                    except RpcError as e:
                        st.error(e.message)
                        _dev_details(e)

        else:
            with st.form("sign_up_form"):
                name = st.text_input("Name (optional)", key="su_name")
                email = st.text_input("Email", placeholder="you@example.com", key="su_email")
                password = st.text_input("Password", type="password", key="su_pw")
                submitted = st.form_submit_button("Create account", use_container_width=True)

                if submitted:
                    try:
                        auth.register(email=email.strip(), password=password, name=name.strip() or None)
                        _flash(True, "Account created.")
                        st.rerun()
                    except RpcError as e:
                        st.error(e.message)
                        _dev_details(e)

    st.stop()


# -------------------------
# SIDEBAR (LOGGED IN)
# -------------------------
with st.sidebar:
    st.markdown("### Account")
    st.write(f"Signed in as: **{user.name or user.email or '(no email)'}**")
    if st.button("Sign out"):
        auth.logout()
        st.session_state.pop(MANAGER_KEY, None)
        st.rerun()


# -------------------------
# LOAD TRIPS
# -------------------------
if MANAGER_KEY not in st.session_state:
    st.session_state[MANAGER_KEY] = TripManager(client)

manager: TripManager = st.session_state[MANAGER_KEY]

if not manager.loaded:
    try:
        with st.spinner("Loading trips…"):
            manager.refresh()
    except RpcError as e:
        st.error(e.message)
        _dev_details(e)
        st.stop()


def _report(result) -> None:
    _flash(result.ok, result.message)
    st.rerun()


# -------------------------
# 1. NEW TRIP
# -------------------------
st.header("1. New trip")

work_tab, personal_tab = st.tabs(["Work trip", "Personal trip"])

with work_tab:
    with st.form("work_trip_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        trip_date = col1.date_input("Date", value=date.today(), format="DD/MM/YYYY")
        packages = col2.text_input("Packages", placeholder="0")
        km_start = col1.text_input("Start odometer (km)")
        km_end = col2.text_input("End odometer (km)")
        earnings = st.text_input("Earnings ($)", placeholder="0")
        notes = st.text_area("Notes", height=80)
        submitted = st.form_submit_button("Save work trip", disabled=manager.busy)

    if submitted:
        form = TripForm(
            date=trip_date,
            odometer_start=km_start,
            odometer_end=km_end,
            package_count=packages,
            earnings=earnings,
            notes=notes,
        )
        _report(manager.create_trip(TripKind.WORK, form))

with personal_tab:
    with st.form("personal_trip_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        trip_date = col1.date_input("Date", value=date.today(), format="DD/MM/YYYY")
        destination = col2.text_input("Destination")
        km_start = col1.text_input("Start odometer (km)")
        km_end = col2.text_input("End odometer (km)")
        notes = st.text_area("Notes", height=80)
        submitted = st.form_submit_button("Save personal trip", disabled=manager.busy)

    if submitted:
        form = TripForm(
            date=trip_date,
            odometer_start=km_start,
            odometer_end=km_end,
            destination=destination,
            notes=notes,
        )
        _report(manager.create_trip(TripKind.PERSONAL, form))


# -------------------------
# 2. FILTERS
# -------------------------
if "filters" not in st.session_state:
    st.session_state.filters = FilterState()


def _on_kind_change():
    st.session_state.filters = st.session_state.filters.with_kind(st.session_state.filter_kind)


def _on_year_change():
    st.session_state.filters = st.session_state.filters.with_year(st.session_state.filter_year)
    st.session_state.filter_month = ""
    st.session_state.filter_day = ""


def _on_month_change():
    st.session_state.filters = st.session_state.filters.with_month(st.session_state.filter_month)
    st.session_state.filter_day = ""


def _on_day_change():
    st.session_state.filters = st.session_state.filters.with_day(st.session_state.filter_day)


KIND_LABELS = {ALL_KINDS: "All", TripKind.WORK.value: "Work", TripKind.PERSONAL.value: "Personal"}

st.header("2. Your trips")

if st.checkbox("Show filters", key="show_filters"):
    st.radio(
        "Trip type",
        list(KIND_LABELS),
        format_func=KIND_LABELS.get,
        horizontal=True,
        key="filter_kind",
        on_change=_on_kind_change,
    )

    filters = st.session_state.filters
    years = manager.years()
    if filters.year and filters.year not in years:
        st.session_state.filters = filters = filters.with_year("")
        st.session_state.filter_year = ""
    if filters.month and filters.month not in manager.months(filters.year):
        st.session_state.filters = filters = filters.with_month("")
        st.session_state.filter_month = ""
    if filters.day and filters.day not in manager.days(filters.year, filters.month):
        st.session_state.filters = filters = filters.with_day("")
        st.session_state.filter_day = ""

    col_y, col_m, col_d = st.columns(3)
    col_y.selectbox(
        "Year",
        [""] + years,
        format_func=lambda v: v or "All years",
        key="filter_year",
        on_change=_on_year_change,
    )
    if filters.year:
        col_m.selectbox(
            "Month",
            [""] + manager.months(filters.year),
            format_func=lambda v: month_label(v) if v else "All months",
            key="filter_month",
            on_change=_on_month_change,
        )
    if filters.year and filters.month:
        col_d.selectbox(
            "Day",
            [""] + manager.days(filters.year, filters.month),
            format_func=lambda v: str(int(v)) if v else "All days",
            key="filter_day",
            on_change=_on_day_change,
        )

    filters = st.session_state.filters
else:
    st.session_state.filters = filters = FilterState()

visible = manager.filtered(filters)
stats = manager.stats(filters)

m1, m2, m3, m4 = st.columns(4)
m1.metric("Trips", stats.count)
m2.metric("Distance", f"{stats.distance:,} km")
m3.metric("Earnings", f"${stats.earnings:,.0f}")
m4.metric("Packages", stats.packages)

if visible:
    st.download_button(
        "Export JSON",
        data=export_trips_json(visible),
        file_name=export_filename(),
        mime=EXPORT_MIME,
    )


# -------------------------
# 3. TRIP LIST
# -------------------------
def _edit_form(trip) -> None:
    initial = form_from_trip(trip)
    with st.form(f"edit_form_{trip.id}"):
        st.markdown(f"**Edit {trip.kind.value} trip**")
        col1, col2 = st.columns(2)
        trip_date = col1.date_input("Date", value=initial.date, format="DD/MM/YYYY")
        if trip.kind is TripKind.WORK:
            packages = col2.text_input("Packages", value=initial.package_count)
            destination = ""
        else:
            destination = col2.text_input("Destination", value=initial.destination)
            packages = ""
        km_start = col1.text_input("Start odometer (km)", value=initial.odometer_start)
        km_end = col2.text_input("End odometer (km)", value=initial.odometer_end)
        earnings = ""
        if trip.kind is TripKind.WORK:
            earnings = st.text_input("Earnings ($)", value=initial.earnings)
        notes = st.text_area("Notes", value=initial.notes, height=80)

        save_col, cancel_col = st.columns(2)
        saved = save_col.form_submit_button("Save changes", disabled=manager.busy)
        cancelled = cancel_col.form_submit_button("Cancel", disabled=manager.busy)

    if cancelled:
        st.session_state.pop("editing_id", None)
        st.rerun()
    if saved:
        form = TripForm(
            date=trip_date,
            odometer_start=km_start,
            odometer_end=km_end,
            package_count=packages,
            earnings=earnings,
            destination=destination,
            notes=notes,
        )
        result = manager.update_trip(trip, form)
        if result.ok:
            st.session_state.pop("editing_id", None)
        _report(result)


if not visible:
    st.info("No trips match." if manager.trips else "No saved trips yet.")

for trip in visible:
    col_trip, col_edit, col_del = st.columns([6, 1, 1])

    with col_trip:
        label = "Work" if trip.kind is TripKind.WORK else "Personal"
        st.markdown(
            f"**{format_date(trip.date)}** · {label} · {trip.display_detail()}"
        )
        line = f"{trip.odometer_start:,} → {trip.odometer_end:,} km (**{trip.distance:,} km**)"
        if trip.kind is TripKind.WORK and trip.earnings:
            line += f" · ${trip.earnings:,.0f}"
        st.write(line)
        if trip.notes:
            st.caption(trip.notes)

    if col_edit.button("Edit", key=f"edit_{trip.id}", disabled=manager.busy):
        st.session_state["editing_id"] = trip.id
        st.session_state.pop("deleting_id", None)
        st.rerun()

    if col_del.button("Delete", key=f"del_{trip.id}", disabled=manager.busy):
        st.session_state["deleting_id"] = trip.id
        st.rerun()

    if st.session_state.get("deleting_id") == trip.id:
        st.warning("Are you sure you want to delete this trip?")
        yes_col, no_col = st.columns(2)
        if yes_col.button("Yes, delete", key=f"confirm_del_{trip.id}", disabled=manager.busy):
            st.session_state.pop("deleting_id", None)
            _report(manager.delete_trip(trip.id, confirmed=True))
        if no_col.button("Cancel", key=f"cancel_del_{trip.id}"):
            st.session_state.pop("deleting_id", None)
            st.rerun()

    if st.session_state.get("editing_id") == trip.id:
        _edit_form(trip)

    st.divider()
