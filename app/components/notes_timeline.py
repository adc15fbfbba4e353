"""Chronological list of the notes on an incident."""

from __future__ import annotations

import streamlit as st

from core.models import Note


def render_notes(notes: list[Note]) -> None:
    if not notes:
        st.caption("No notes on this incident.")
        return

    for note in notes:
        author = note.user.summary if note.user else "unknown"
        when = f"{note.created_at:%m-%d-%Y %H:%M} UTC" if note.created_at else ""
        st.write(f"**{when}** {author}: {note.content}")
