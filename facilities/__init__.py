"""Facility Hub application.

Organizations, points of interest, floor plans, alerts and analytics for
venue dashboards, plus the WebSocket form sessions behind their modal
forms.
"""
