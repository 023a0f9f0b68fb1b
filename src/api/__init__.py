"""
Quality Audit API Module

FastAPI backend providing REST endpoints for:
- Participation-filtered Intercom conversations per admin and day
- Intercom passthrough (single conversation, admins, teams)
- Conversation pull history
"""
