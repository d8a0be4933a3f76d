import streamlit as st
from parentchild.walkthrough import run_enforcement_walkthrough

from pages.ui_elements import init_session, render_sidebar, render_steps, render_tables

# Initialise the session if required
init_session(st.session_state)
render_sidebar()

st.markdown('# Foreign key enforcement')
st.markdown(
    'SQLite only checks foreign keys when `PRAGMA foreign_keys=ON` has been issued on the '
    'connection doing the write. The setting is not stored in the database file.'
)

if st.button('Run walkthrough'):
    st.session_state.enforcement_steps = run_enforcement_walkthrough(st.session_state.settings.db_path)

if not st.session_state.enforcement_steps is None:
    render_steps(st.session_state.enforcement_steps)
    render_tables(st.session_state)
