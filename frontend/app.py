# Streamlit UI on top of the procurement client library
import threading

import streamlit as st

from procurement import ApiClient, AwardError, ProcurementError, SessionExpiredError, SessionHolder
from procurement import award, dashboard
from procurement.formatting import format_date, format_datetime, format_inr
from procurement.logging_config import setup_logging
from procurement.services import auth, documents, projects, quotes, requirements, rfqs, users, vendors

st.set_page_config(page_title="Procurement", layout="wide")

# statuses a vendor may set on their own quote; accepted/rejected come from the award
VENDOR_QUOTE_STATUSES = ["draft", "submitted", "revised"]


@st.cache_resource
def _init_logging():
    setup_logging()
    return True


_init_logging()


def get_client() -> ApiClient:
    if "client" not in st.session_state:
        session = SessionHolder.from_settings()
        # set from whichever thread saw the 401; read back on the next run
        expired = threading.Event()
        session.add_expiry_listener(expired.set)
        session.restore()
        st.session_state.expired = expired
        st.session_state.client = ApiClient(session)
    return st.session_state.client


def flash(message: str, kind: str = "success"):
    st.session_state.flash = (kind, message)


def show_flash():
    expired = st.session_state.get("expired")
    if expired is not None and expired.is_set():
        expired.clear()
        st.warning(str(SessionExpiredError()))
    kind, message = st.session_state.pop("flash", (None, None))
    if message:
        getattr(st, kind)(message)


def run(action, success: str = None):
    """Run one user action, render its error inline. Returns the result or None."""
    try:
        result = action()
    except SessionExpiredError:
        # the expiry listener has fired; the rerun lands on the login form
        st.rerun()
    except ProcurementError as e:
        st.error(str(e))
        return None
    if success:
        flash(success)
        st.rerun()
    return result


def confirm_delete(label: str, key: str, action, success: str):
    """Two-step delete: the first click arms, the second one sends."""
    armed = f"armed:{key}"
    if not st.session_state.get(armed):
        if st.button(label, key=f"ask:{key}"):
            st.session_state[armed] = True
            st.rerun()
        return
    st.warning(f"{label}? This cannot be undone.")
    if st.button("Yes, delete", key=f"ok:{key}"):
        st.session_state.pop(armed, None)
        run(action, success=success)
    if st.button("Cancel", key=f"cancel:{key}"):
        st.session_state.pop(armed, None)
        st.rerun()


def show_errors(errors):
    for name, message in errors.items():
        st.caption(f"Could not load {name}: {message}")


def documents_panel(kind: str, entity_id: int, items=None, can_edit: bool = True):
    ref = (kind, entity_id)
    if items is None:
        items = run(lambda: documents.get_documents_by_entity(client, ref)) or []
    st.markdown("**Documents**")
    if not items:
        st.caption("No documents.")
    for d in items:
        st.write(f"{d.original_name} ({d.file_size} bytes, {format_date(d.created_at)})")
        blob_key = f"blob:{d.id}"
        if blob_key in st.session_state:
            st.download_button("Save file", st.session_state[blob_key], file_name=d.original_name,
                               mime=d.mime_type, key=f"save:{d.id}")
        elif st.button("Download", key=f"dl:{d.id}"):
            data = run(lambda: documents.download_document(client, d.id))
            if data is not None:
                st.session_state[blob_key] = data
                st.rerun()
        if can_edit:
            confirm_delete("Delete document", f"doc:{d.id}",
                           lambda: documents.delete_document(client, d.id), "Document deleted")
    if can_edit:
        upload = st.file_uploader("Upload document", key=f"upload:{kind}:{entity_id}")
        if upload is not None and st.button("Upload", key=f"upload-btn:{kind}:{entity_id}"):
            run(lambda: documents.upload_document(client, ref, upload.name, upload.getvalue(), upload.type),
                success="Document uploaded")


client = get_client()
user = client.session.get_current_user()

st.title("Procurement")
show_flash()

# Signed out
if user is None:
    tabs = st.tabs(["Login", "Register", "Forgot password", "Reset password"])
    with tabs[0]:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Login"):
                run(lambda: auth.login(client, email, password), success="Signed in")
    with tabs[1]:
        with st.form("register"):
            role = st.selectbox("Role", ["project_owner", "vendor"])
            name = st.text_input("Full name")
            email = st.text_input("Email ")
            password = st.text_input("Password ", type="password")
            company = st.text_input("Company name")
            contact = st.text_input("Contact person")
            gst = st.text_input("GST number")
            phone = st.text_input("Phone (optional)")
            address = st.text_area("Address (optional)")
            if st.form_submit_button("Register"):
                run(lambda: auth.register(client, name, email, password, company, contact, gst,
                                          role=role, phone=phone, address=address),
                    success="Account created")
    with tabs[2]:
        with st.form("forgot"):
            email = st.text_input("Account email")
            if st.form_submit_button("Send reset link"):
                if run(lambda: auth.forgot_password(client, email)) is not None:
                    st.success("If the account exists, a reset link has been sent.")
    with tabs[3]:
        with st.form("reset"):
            token = st.text_input("Reset token", value=st.query_params.get("token", ""))
            new = st.text_input("New password", type="password")
            again = st.text_input("Confirm password", type="password")
            if st.form_submit_button("Reset password"):
                if run(lambda: auth.reset_password(client, token, new, again)) is not None:
                    st.success("Password reset successfully. You can now login with your new password.")
    st.stop()

# Signed in
with st.sidebar:
    st.write(f"**{user.name}** ({user.role.replace('_', ' ')})")
    if user.company_name:
        st.caption(user.company_name)
    if st.button("Logout"):
        auth.logout(client)
        st.session_state.clear()
        st.rerun()


def profile_panel():
    with st.form("profile"):
        name = st.text_input("Full name", value=user.name)
        email = st.text_input("Email", value=user.email)
        company = st.text_input("Company name", value=user.company_name or "")
        contact = st.text_input("Contact person", value=user.contact_person or "")
        phone = st.text_input("Phone", value=user.phone or "")
        address = st.text_area("Address", value=user.address or "")
        gst = st.text_input("GST number", value=user.gst_number or "")
        if st.form_submit_button("Save profile"):
            run(lambda: users.update_user(client, user.id, name=name, email=email, company_name=company,
                                          contact_person=contact, phone=phone, address=address,
                                          gst_number=gst),
                success="Profile updated successfully!")


def quote_panel(q, editable: bool):
    details = q.rfq_details or {}
    st.write(f"Quote {q.custom_id or q.id} for RFQ {q.rfq_custom_id or details.get('title') or q.rfq_id}: "
             f"{format_inr(q.total_amount)} · {q.status} · updated {format_datetime(q.updated_at or q.created_at)}")
    if editable and q.status in VENDOR_QUOTE_STATUSES:
        with st.form(f"quote-edit:{q.id}"):
            amount = st.number_input("Total amount (₹)", min_value=0.0, value=float(q.total_amount),
                                     key=f"revise-amt:{q.id}")
            status = st.selectbox("Status", VENDOR_QUOTE_STATUSES,
                                  index=VENDOR_QUOTE_STATUSES.index(q.status), key=f"revise-status:{q.id}")
            if st.form_submit_button("Update quote"):
                run(lambda: quotes.update_quote(client, q.id, total_amount=amount, status=status),
                    success="Quote updated")
        confirm_delete("Delete quote", f"quote:{q.id}", lambda: quotes.delete_quote(client, q.id),
                       "Quote deleted")
    documents_panel("quote", q.id, can_edit=editable)


def rfq_panel(rfq_id: int):
    view = run(lambda: dashboard.rfq_view(client, rfq_id))
    if view is None:
        return
    rfq = view.rfq
    st.subheader(f"RFQ: {rfq.title}")
    st.write(f"Status: **{rfq.status}** · Deadline: {format_date(rfq.deadline)}")
    if rfq.description:
        st.write(rfq.description)
    show_errors(view.errors)

    if not view.quotes:
        st.info("No quotes yet.")
    for q in view.quotes:
        vendor = (q.vendor_details or {}).get("company_name") or f"Vendor {q.vendor_id}"
        st.write(f"- {vendor}: {format_inr(q.total_amount)} · {q.status} · {format_datetime(q.created_at)}")

    progress_key = f"award:{rfq_id}"
    if rfq.status != "awarded" and view.quotes:
        options = {f"{(q.vendor_details or {}).get('company_name', q.vendor_id)} ({format_inr(q.total_amount)})": q.id
                   for q in view.quotes}
        choice = st.selectbox("Winning quote", list(options.keys()), key=f"winner:{rfq_id}")
        confirmed = st.checkbox("I confirm this award. It cannot be undone.", key=f"confirm:{rfq_id}")
        if st.button("Award quote", disabled=not confirmed, key=f"award-btn:{rfq_id}"):
            try:
                award.award_quote(client, rfq_id, options[choice], view.quotes, confirmed=confirmed,
                                  progress=st.session_state.get(progress_key))
            except AwardError as e:
                # kept so the next attempt resumes after the steps that went through
                st.session_state[progress_key] = e.progress
                if isinstance(e.cause, SessionExpiredError):
                    st.rerun()
                st.error(str(e))
            else:
                st.session_state.pop(progress_key, None)
                flash("Quote awarded successfully!")
                st.rerun()
    elif view.awarded_quote is not None:
        details = view.awarded_quote.vendor_details or {}
        st.success(f"Awarded to {details.get('company_name', view.awarded_quote.vendor_id)} "
                   f"for {format_inr(view.awarded_quote.total_amount)}")

    documents_panel("rfq", rfq_id, view.documents)
    confirm_delete("Delete RFQ", f"rfq:{rfq_id}", lambda: rfqs.delete_rfq(client, rfq_id), "RFQ deleted")


def requirement_panel(r):
    with st.form(f"req-edit:{r.id}"):
        item = st.text_input("Item name", value=r.item_name, key=f"req-item:{r.id}")
        qty = st.number_input("Quantity", min_value=0.0, value=float(r.quantity), key=f"req-qty:{r.id}")
        unit = st.text_input("Unit", value=r.unit, key=f"req-unit:{r.id}")
        rate = st.number_input("Rate (₹)", min_value=0.0, value=float(r.rate or 0), key=f"req-rate:{r.id}")
        category = st.text_input("Category", value=r.category or "", key=f"req-cat:{r.id}")
        if st.form_submit_button("Save requirement"):
            run(lambda: requirements.update_requirement(client, r.id, item_name=item, quantity=qty, unit=unit,
                                                        rate=rate or None, category=category or None),
                success="Requirement updated")
    confirm_delete("Delete requirement", f"req:{r.id}",
                   lambda: requirements.delete_requirement(client, r.id), "Requirement deleted")
    documents_panel("requirement", r.id)


def project_panel(project_id: int):
    view = run(lambda: dashboard.project_view(client, project_id))
    if view is None:
        return
    p = view.project
    st.subheader(p.name)
    st.write(f"{p.location or ''} · Deadline: {format_date(p.deadline)}")
    if p.description:
        st.write(p.description)
    show_errors(view.errors)

    with st.expander("Edit project"):
        with st.form(f"proj-edit:{project_id}"):
            name = st.text_input("Name", value=p.name)
            description = st.text_area("Description", value=p.description or "")
            location = st.text_input("Location", value=p.location or "")
            deadline = st.text_input("Deadline (YYYY-MM-DD)", value=(p.deadline or "")[:10])
            if st.form_submit_button("Save project"):
                run(lambda: projects.update_project(client, project_id, name=name,
                                                    description=description or None,
                                                    location=location or None, deadline=deadline or None),
                    success="Project updated")

    st.markdown("#### Requirements")
    for r in view.requirements:
        rate = f" @ {format_inr(r.rate)} = {format_inr(r.total)}" if r.rate is not None else ""
        with st.expander(f"{r.item_name}: {r.quantity:g} {r.unit}{rate}"):
            requirement_panel(r)
    st.write(f"Estimated total: **{format_inr(view.requirements_total)}**")
    with st.form(f"req:{project_id}"):
        item = st.text_input("Item name")
        qty = st.number_input("Quantity", min_value=0.0, step=1.0)
        unit = st.text_input("Unit")
        rate = st.number_input("Rate (₹)", min_value=0.0, step=1.0)
        category = st.text_input("Category")
        if st.form_submit_button("Add requirement"):
            run(lambda: requirements.add_requirement(client, project_id, item, qty, unit,
                                                     rate=rate or None, category=category or None),
                success="Requirement added")

    st.markdown("#### RFQs")
    for r in view.open_rfqs + view.closed_rfqs:
        with st.expander(f"{r.title} · {r.status} · {len(view.quotes_for(r.id))} quote(s)"):
            rfq_panel(r.id)
    with st.form(f"rfq:{project_id}"):
        title = st.text_input("RFQ title")
        deadline = st.date_input("RFQ deadline")
        description = st.text_area("RFQ description")
        if st.form_submit_button("Create RFQ"):
            run(lambda: rfqs.create_rfq(client, project_id, title, deadline.isoformat(),
                                        description=description or None),
                success="RFQ created")

    st.markdown("#### Project files")
    documents_panel("project", project_id, view.documents)

    confirm_delete("Delete project", f"proj:{project_id}",
                   lambda: projects.delete_project(client, project_id), "Project deleted")


def vendor_registration():
    st.info("Complete your vendor profile before quoting.")
    with st.form("vendor-register"):
        company = st.text_input("Company name", value=user.company_name or "")
        contact = st.text_input("Contact person", value=user.contact_person or "")
        phone = st.text_input("Phone", value=user.phone or "")
        email = st.text_input("Business email", value=user.email)
        address = st.text_area("Address", value=user.address or "")
        gst = st.text_input("GST number", value=user.gst_number or "")
        if st.form_submit_button("Register as vendor"):
            run(lambda: vendors.create_vendor(client, user.id, company, contact_person=contact or None,
                                              phone=phone or None, email=email or None,
                                              address=address or None, gst_number=gst or None),
                success="Vendor profile created")


if user.role == "project_owner":
    board = run(lambda: dashboard.owner_dashboard(client))
    tabs = st.tabs(["Projects", "New project", "Profile"])
    with tabs[0]:
        if board is not None:
            show_errors(board.errors)
            labels = {f"{p.id} - {p.name}": p.id for p in board.projects}
            sel = st.selectbox("Project", options=list(labels.keys()) if labels else [])
            if sel:
                project_panel(labels[sel])
            else:
                st.info("No projects yet.")
    with tabs[1]:
        with st.form("new-project"):
            name = st.text_input("Name")
            description = st.text_area("Description")
            location = st.text_input("Location")
            deadline = st.date_input("Deadline")
            if st.form_submit_button("Create project"):
                run(lambda: projects.create_project(client, name, description or None, location or None,
                                                    deadline.isoformat()),
                    success="Project created")
    with tabs[2]:
        profile_panel()
else:
    board = run(lambda: dashboard.vendor_dashboard(client, user))
    if board is not None:
        show_errors({k: v for k, v in board.errors.items() if k != "vendor"})
        tabs = st.tabs(["Open RFQs", "My quotes", "Closed RFQs", "Profile"])
        with tabs[0]:
            if board.vendor is None:
                vendor_registration()
            for row in board.rows:
                with st.expander(f"{row.rfq.title} · due {format_date(row.rfq.deadline)} · {row.label}"):
                    if row.rfq.description:
                        st.write(row.rfq.description)
                    if row.quoted:
                        st.write(f"Your quote: {format_inr(row.quote.total_amount)} ({row.quote.status}). "
                                 "Revise it under My quotes.")
                    elif board.vendor is not None:
                        amount = st.number_input("Total amount (₹)", min_value=0.0, key=f"amt:{row.rfq.id}")
                        if st.button("Submit quote", key=f"quote:{row.rfq.id}"):
                            run(lambda: quotes.create_quote(client, row.rfq.id, board.vendor.id, amount),
                                success="Quote submitted")
                    documents_panel("rfq", row.rfq.id, can_edit=False)
        with tabs[1]:
            st.markdown("#### Pending")
            for q in board.pending_quotes:
                quote_panel(q, editable=True)
                st.divider()
            st.markdown("#### Won")
            for q in board.won_quotes:
                quote_panel(q, editable=False)
        with tabs[2]:
            for row in board.closed_rows:
                outcome = row.quote.status if row.quoted else "not quoted"
                st.write(f"- {row.rfq.title} ({row.rfq.status}): {outcome}")
        with tabs[3]:
            profile_panel()
            if board.vendor is not None:
                v = board.vendor
                st.markdown("#### Vendor details")
                with st.form("vendor-edit"):
                    company = st.text_input("Company name", value=v.company_name)
                    contact = st.text_input("Contact person", value=v.contact_person or "")
                    phone = st.text_input("Phone", value=v.phone or "")
                    email = st.text_input("Business email", value=v.email or "")
                    address = st.text_area("Address", value=v.address or "")
                    gst = st.text_input("GST number", value=v.gst_number or "")
                    if st.form_submit_button("Save vendor details"):
                        run(lambda: vendors.update_vendor(client, v.id, company_name=company,
                                                          contact_person=contact or None, phone=phone or None,
                                                          email=email or None, address=address or None,
                                                          gst_number=gst or None),
                            success="Vendor details updated")
