"""
Character Sheet Editor -- PySide6 Desktop Application.

Package layout:
    widgets/    Row fields, collection tables, control dispatch, the sheet
    services/   Application services (event bus, submission bridge)
    theme/      Dark theme and sheet stylesheet overrides
"""
