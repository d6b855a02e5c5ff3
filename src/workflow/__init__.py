"""
WorkFlow backend package.

Timesheet, kanban board and notepad kept in a local store and backed up to a
single JSON file in Google Drive. The FastAPI app lives in src.workflow.main.
"""
