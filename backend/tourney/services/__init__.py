"""
Services Layer

Business logic that:
- Accepts domain inputs (bracket snapshots, sessions, principals)
- Returns domain outputs (brackets, models, outcomes)
- Does NOT depend on HTTP request/response objects

bracket, bracket_planner and bracket_advancer are pure and never touch
the database.
"""
