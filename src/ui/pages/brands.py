import pandas as pd
import streamlit as st

from models.schemas import Brand, BrandStatus
from services.brands_view import BrandsViewController
from services.notifications import NotificationKind
from ui.state import get_controller, run
from ui.utils.status_formatting import owner_initial, status_label

CONFIRM_DELETE_KEY = "confirm_delete_id"
STATUS_OPTIONS = [s.value for s in BrandStatus]


async def _sync_filter(controller: BrandsViewController, raw: str) -> None:
    if controller.filter.settled_value is None:
        controller.mount(raw)
    elif raw != controller.filter.raw_value:
        controller.on_filter_change(raw)
    await controller.wait_idle()


def show():
    controller = get_controller()

    st.title("🏷️ Brand Catalog")
    st.write("Manage and explore your brand portfolio")

    col1, col2 = st.columns([3, 1])
    with col1:
        owner_filter = st.text_input(
            "Filter by owner",
            key="owner_filter",
            placeholder="Owner name",
        )
    with col2:
        st.write("")
        if owner_filter and st.button("✖ Clear filter"):
            st.session_state["owner_filter"] = ""
            st.rerun()

    run(_sync_filter(controller, owner_filter))
    _show_notifications(controller)

    if controller.query.is_loading:
        st.info("Loading brands...")
        return

    if controller.query.error is not None and not controller.rows:
        st.error(f"❌ Error loading brands: {controller.query.error.display_message()}")
        return
    if controller.query.error is not None:
        st.warning(f"⚠️ Could not refresh the list: {controller.query.error.display_message()}")

    _show_stats(controller)

    if not controller.rows:
        st.info("ℹ️ No brands yet. Start by creating your first brand.")
        return

    st.markdown("### Brands")
    st.dataframe(_rows_frame(controller.rows), use_container_width=True, hide_index=True)

    st.markdown("### Actions")
    for brand in controller.rows:
        with st.container(border=True):
            if controller.edit_session.is_editing(brand.id):
                _show_edit_row(controller, brand)
            else:
                _show_row(controller, brand)


def _show_stats(controller: BrandsViewController):
    stats = controller.stats
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total Brands", stats.total)
    with col2:
        st.metric("Approved", stats.by_status.get(BrandStatus.APROBADA, 0))
    with col3:
        st.metric("Pending", stats.by_status.get(BrandStatus.PENDIENTE, 0))
    with col4:
        st.metric("Unique Owners", stats.unique_owners)


def _rows_frame(rows: list[Brand]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "": owner_initial(b.name),
                "Brand": b.name,
                "Status": status_label(b.status),
                "Owner": b.owner.name if b.owner else "",
            }
            for b in rows
        ]
    )
    return df


def _show_row(controller: BrandsViewController, brand: Brand):
    col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
    with col1:
        st.markdown(f"**{brand.name}**")
        st.caption(brand.owner.name if brand.owner else "")
    with col2:
        st.write(status_label(brand.status))
    with col3:
        if st.button("Edit", key=f"edit_{brand.id}"):
            controller.start_edit(brand)
            st.rerun()
    with col4:
        if st.session_state.get(CONFIRM_DELETE_KEY) == brand.id:
            if st.button("Confirm", key=f"confirm_delete_{brand.id}", type="primary"):
                st.session_state.pop(CONFIRM_DELETE_KEY, None)
                with st.spinner("Deleting brand..."):
                    run(controller.delete_brand(brand.id))
                st.rerun()
            if st.button("Keep", key=f"keep_{brand.id}"):
                st.session_state.pop(CONFIRM_DELETE_KEY, None)
                st.rerun()
        elif st.button("🗑️ Delete", key=f"delete_{brand.id}"):
            st.session_state[CONFIRM_DELETE_KEY] = brand.id
            st.rerun()


def _show_edit_row(controller: BrandsViewController, brand: Brand):
    draft = controller.edit_session.draft
    col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
    with col1:
        name = st.text_input("Name", value=draft.name, key=f"draft_name_{brand.id}")
    with col2:
        status = st.selectbox(
            "Status",
            STATUS_OPTIONS,
            index=STATUS_OPTIONS.index(draft.status.value),
            key=f"draft_status_{brand.id}",
        )
    controller.change_draft(name=name, status=BrandStatus(status))
    with col3:
        if st.button("💾 Save", key=f"save_{brand.id}", type="primary"):
            with st.spinner("Saving..."):
                run(controller.save_edit())
            st.rerun()
    with col4:
        if st.button("Cancel", key=f"cancel_{brand.id}"):
            controller.cancel_edit()
            st.rerun()


def _show_notifications(controller: BrandsViewController):
    for notification in controller.notifications.drain():
        icon = "✅" if notification.kind == NotificationKind.SUCCESS else "❌"
        if notification.kind == NotificationKind.INFO:
            icon = "ℹ️"
        st.toast(notification.message, icon=icon)
