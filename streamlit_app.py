from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import streamlit as st

from babytracker.client import STATE_KEY, ApiClient, ApiError, AppState, LiveDataPoller
from babytracker.config import settings

st.set_page_config(page_title="BabyTracker Pro", page_icon="👶", layout="wide")

API_BASE = settings.API_BASE


# Client objects (one per browser session)

def get_client() -> ApiClient:
    if "client" not in st.session_state:
        st.session_state["client"] = ApiClient(API_BASE)
    return st.session_state["client"]


def get_state() -> AppState:
    # the store file is shared by every visitor: each browser keeps its own
    # key, carried in the URL so that a page reload finds it again
    if "app_state" not in st.session_state:
        sid = st.query_params.get("sid")
        if not sid:
            sid = uuid.uuid4().hex
            st.query_params["sid"] = sid
        st.session_state["app_state"] = AppState(key=f"{STATE_KEY}:{sid}")
    return st.session_state["app_state"]


def get_poller(baby_id: str, email: str) -> LiveDataPoller:
    poller = st.session_state.get("poller")
    if poller is None or poller.baby_id != baby_id or poller.email != email:
        poller = LiveDataPoller(get_client(), baby_id, email)
        st.session_state["poller"] = poller
    return poller


def to_iso(d: date, t) -> str:
    return datetime.combine(d, t).astimezone(timezone.utc).isoformat()


def fmt_time(value: str | None) -> str:
    if not value:
        return "-"
    return datetime.fromisoformat(value).strftime("%H:%M")


client = get_client()
state = get_state()


# Sidebar: user and baby selection

with st.sidebar:
    st.header("Account")

    email = st.text_input("Email", value=state["userEmail"] or "", key="login_email").strip().lower()

    if st.button("Continue", key="login_btn") and email:
        try:
            res = client.lookup_user(email, old_user_id=state["userId"])
            if res.get("user"):
                state.update(userEmail=email, userId=res["user"]["id"])
                st.success("Welcome back.")
            else:
                st.session_state["new_user_email"] = email
        except (ApiError, OSError) as e:
            st.error(f"API unreachable or error: {e}")

    if st.session_state.get("new_user_email"):
        st.info("New account: tell us your name.")
        c1, c2 = st.columns(2)
        first = c1.text_input("First name", key="new_first")
        last = c2.text_input("Last name", key="new_last")
        if st.button("Create account", key="new_user_btn"):
            if not first.strip() or not last.strip():
                st.error("First and last name are required.")
            else:
                new_email = st.session_state.pop("new_user_email")
                user = client.save_user(
                    {"id": str(uuid.uuid4()), "email": new_email, "firstName": first.strip(), "lastName": last.strip()}
                )
                state.update(userEmail=new_email, userId=user["id"])
                st.rerun()

    if state["userEmail"]:
        st.write(f"Signed in as **{state['userEmail']}**")
        if st.button("Sign out", key="logout_btn"):
            poller = st.session_state.pop("poller", None)
            if poller:
                poller.stop()
            state.reset()
            st.rerun()

    st.divider()
    st.caption(f"API: {API_BASE}")


@st.cache_data(ttl=10)
def load_profile(user_email: str) -> dict:
    return client.profile(user_email)


st.title("BabyTracker Pro")

if not state["userEmail"]:
    st.info("Enter your email in the sidebar to start.")
    st.stop()

try:
    profile = load_profile(state["userEmail"])
except ApiError as e:
    st.error(f"Profile not available: {e.message}")
    st.stop()

babies = profile.get("babies") or []

with st.expander("Add a baby", expanded=not babies):
    c1, c2, c3 = st.columns(3)
    baby_name = c1.text_input("Name", key="baby_name")
    birth = c2.date_input("Birth date", value=date.today(), key="baby_birth")
    gender = c3.selectbox("Gender", options=["girl", "boy"], key="baby_gender")
    if st.button("Save baby", key="baby_submit"):
        if not baby_name.strip():
            st.error("The name is required.")
        else:
            baby = client.save_baby(
                {
                    "id": str(uuid.uuid4()),
                    "name": baby_name.strip(),
                    "birthDate": birth.isoformat(),
                    "userId": profile["id"],
                    "gender": gender,
                }
            )
            state.update(currentBabyId=baby["id"])
            load_profile.clear()
            st.rerun()

if not babies:
    st.stop()

ids = [b["id"] for b in babies]
current_id = state["currentBabyId"] if state["currentBabyId"] in ids else ids[0]
baby = st.selectbox(
    "Baby",
    options=babies,
    index=ids.index(current_id),
    format_func=lambda b: f"{b['avatar']} {b['name']}",
    key="baby_select",
)
if baby["id"] != state["currentBabyId"]:
    state.update(currentBabyId=baby["id"])

poller = get_poller(baby["id"], state["userEmail"])

tab1, tab2, tab3, tab4 = st.tabs(["Today", "Log", "History", "Health"])


# TAB 1 - Today (auto refresh)

with tab1:

    @st.fragment(run_every=settings.LIVE_DATA_POLL_SECONDS)
    def live_panel() -> None:
        data = poller.refresh()
        if poller.error:
            st.warning(f"Live data not refreshed: {poller.error}")
        if not data:
            st.info("No data yet.")
            return

        stats = data["liveData"]["stats"]
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Milk today", f"{stats['totalMilk']:g} ml")
        c2.metric("Sleep today", f"{stats['totalSleepMinutes'] // 60}h{stats['totalSleepMinutes'] % 60:02d}")
        c3.metric("Diapers", stats["diaperCount"])
        since = stats["timeSinceLastFeeding"]
        c4.metric("Since last feeding", f"{since} min" if since is not None else "-")

        st.caption(f"Updated {data['timestamp']}")

        for f in data["liveData"]["feedings"]:
            st.write(f"- 🍼 {fmt_time(f['startTime'])} | {f['kind']} | {f['amount'] or '-'} | {f['mood'] or ''}")
        for s in data["liveData"]["sleeps"]:
            st.write(f"- 😴 {fmt_time(s['startTime'])} - {fmt_time(s['endTime'])} | {s['quality'] or ''}")
        for d in data["liveData"]["diapers"]:
            st.write(f"- 🧷 {fmt_time(d['timestamp'])} | {d['type'] or '-'}")

    live_panel()


# TAB 2 - Log an entry

with tab2:
    kind = st.radio("Entry", options=["feeding", "sleep", "diaper"], horizontal=True, key="log_kind")
    day = st.date_input("Day", value=date.today(), key="log_day")
    start = st.time_input("Time", value=datetime.now().time().replace(second=0, microsecond=0), key="log_time")
    notes = st.text_area("Notes (optional)", height=80, key="log_notes")

    entry: dict = {"userId": profile["id"], "notes": notes or None}
    if kind == "feeding":
        entry["type"] = "feeding"
        entry["feedingType"] = st.selectbox("Type", options=["biberon", "tétée", "solide"], key="log_feeding_type")
        entry["amount"] = st.number_input("Amount (ml / g)", min_value=0, value=120, step=10, key="log_amount")
        entry["mood"] = st.selectbox("Mood", options=["happy", "content", "difficult"], key="log_mood")
        entry["startTime"] = to_iso(day, start)
    elif kind == "sleep":
        end = st.time_input("End", value=None, key="log_end")
        entry["type"] = "sleep"
        entry["sleepType"] = st.selectbox("Sleep", options=["nap", "night"], key="log_sleep_type")
        entry["quality"] = st.selectbox("Quality", options=["excellent", "good", "restless", "difficult"], key="log_quality")
        entry["startTime"] = to_iso(day, start)
        entry["endTime"] = to_iso(day, end) if end else None
    else:
        entry["type"] = "diaper"
        entry["diaperType"] = st.selectbox("Diaper", options=["wet", "soiled", "mixed"], key="log_diaper_type")
        entry["time"] = to_iso(day, start)

    if st.button("Save", key="log_submit"):
        try:
            client.add_entry(baby["id"], entry)
            poller.refresh()
            load_profile.clear()
            st.success("Saved.")
        except ApiError as e:
            st.error(e.message)


# TAB 3 - History

with tab3:
    entry_type = st.selectbox("Type", options=["all", "feeding", "sleep", "diaper", "growth"], key="hist_type")
    page = st.number_input("Page", min_value=1, value=1, key="hist_page")
    try:
        res = client.entries(
            baby["id"],
            state["userEmail"],
            type=None if entry_type == "all" else entry_type,
            limit=20,
            page=page,
        )
        if not res["entries"]:
            st.info("No entries.")
        for e in res["entries"]:
            when = e.get("startTime") or e.get("time") or e.get("date")
            c1, c2 = st.columns([5, 1])
            c1.write(f"- **{e['type']}** | {when} | {e.get('kind') or ''} | {e.get('notes') or ''}")
            if c2.button("Delete", key=f"del_{e['id']}"):
                client.delete_entry(baby["id"], e["id"], e["type"], state["userEmail"])
                poller.refresh()
                st.rerun()
    except ApiError as e:
        st.error(e.message)


# TAB 4 - Health (alerts, vaccines)

with tab4:
    try:
        summary = client.health_summary(baby["id"])
        c1, c2, c3 = st.columns(3)
        c1.metric("Overdue vaccines", summary["overdueVaccines"])
        c2.metric("Upcoming appointments", summary["upcomingAppointments"])
        c3.metric("Symptoms this week", summary["recentSymptoms"])
        notice = {"urgent": st.error, "warning": st.warning, "info": st.info}
        for alert in summary["alerts"]:
            notice.get(alert["severity"], st.info)(f"**{alert['title']}**: {alert['message']}")
    except ApiError as e:
        st.error(e.message)

    st.subheader("Vaccines")
    try:
        vaccines = client.vaccines(baby["id"])
    except ApiError as e:
        st.error(e.message)
        vaccines = []

    if not vaccines:
        st.info("No vaccines recorded.")
        if st.button("Create the standard schedule", key="vac_schedule"):
            res = client.create_vaccine_schedule(baby["id"])
            st.success(f"{res['created']} vaccine(s) scheduled.")
            st.rerun()
    else:
        icons = {"completed": "✅", "due": "🟠", "overdue": "🔴", "upcoming": "⚪"}
        for v in vaccines:
            when = (v.get("scheduledDate") or "")[:10]
            st.write(f"- {icons.get(v['status'], '')} {when} | {v.get('ageGroup') or '-'} | {v['name']}")
