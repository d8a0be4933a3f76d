import streamlit as st
from parentchild.walkthrough import run_cascade_walkthrough

from pages.ui_elements import init_session, render_sidebar, render_steps, render_tables

# Initialise the session if required
init_session(st.session_state)
render_sidebar()

st.markdown('# Cascading deletes')
st.markdown(
    'The child table declares `ON DELETE CASCADE` against `parent.uid`. Removing a parent '
    'removes its children, but only when the connection enforces foreign keys.'
)

enforce_integrity = st.toggle('Enforce foreign keys', value=True)

if st.button('Run walkthrough'):
    st.session_state.cascade_steps = run_cascade_walkthrough(
        st.session_state.settings.db_path,
        enforce_integrity=enforce_integrity,
    )

if not st.session_state.cascade_steps is None:
    render_steps(st.session_state.cascade_steps)
    render_tables(st.session_state)
