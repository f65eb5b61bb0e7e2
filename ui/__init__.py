"""Streamlit rendering for move statistics."""
