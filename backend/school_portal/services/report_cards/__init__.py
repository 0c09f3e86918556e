"""Report-card template assignment and resolution."""

from school_portal.services.report_cards.assignment import (
    TemplateAssignmentService,
    TemplateNotFoundError,
)

__all__ = ["TemplateAssignmentService", "TemplateNotFoundError"]
