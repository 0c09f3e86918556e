"""Report-card template assignment.

Templates are assigned to classes directly or to whole levels. Resolution
for a class walks three layers: a direct class assignment wins over a level
assignment, which wins over the tenant's default template. Only active
templates of the class's tenant take part.
"""

from collections.abc import Iterable

from school_portal.core.logging import get_logger
from school_portal.schemas.report_card import (
    AssignedClass,
    AssignmentSummary,
    ReportCardTemplate,
    SchoolClass,
)

logger = get_logger(__name__)


class TemplateNotFoundError(LookupError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str):
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


def _merge(existing: list[str], additions: Iterable[str]) -> list[str]:
    merged = list(existing)
    for item in additions:
        if item not in merged:
            merged.append(item)
    return merged


class TemplateAssignmentService:
    """In-memory registry of templates and classes; lookups preserve insertion order."""

    def __init__(
        self,
        templates: Iterable[ReportCardTemplate] = (),
        classes: Iterable[SchoolClass] = (),
    ):
        self.templates: dict[str, ReportCardTemplate] = {t.id: t for t in templates}
        self.classes: dict[str, SchoolClass] = {c.id: c for c in classes}

    def add_template(self, template: ReportCardTemplate) -> None:
        self.templates[template.id] = template

    def add_class(self, school_class: SchoolClass) -> None:
        self.classes[school_class.id] = school_class

    def get_template(self, template_id: str) -> ReportCardTemplate:
        template = self.templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def assign_to_classes(self, template_id: str, class_ids: Iterable[str]) -> ReportCardTemplate:
        """Add classes to a template's direct assignments (no duplicates)."""
        template = self.get_template(template_id)
        template.assigned_to_classes = _merge(template.assigned_to_classes, class_ids)
        logger.info(
            "Template assigned to classes",
            extra={"template_id": template_id, "class_ids": template.assigned_to_classes},
        )
        return template

    def assign_to_levels(self, template_id: str, levels: Iterable[str]) -> ReportCardTemplate:
        """Add levels to a template's level assignments (no duplicates)."""
        template = self.get_template(template_id)
        template.assigned_to_levels = _merge(template.assigned_to_levels, levels)
        logger.info(
            "Template assigned to levels",
            extra={"template_id": template_id, "levels": template.assigned_to_levels},
        )
        return template

    def assign_to_all_classes(self, template_id: str, tenant_id: str) -> ReportCardTemplate:
        """Assign a template to every level that has a class in the tenant."""
        levels = _merge([], (c.level for c in self._tenant_classes(tenant_id) if c.level))
        return self.assign_to_levels(template_id, levels)

    def unassign_from_classes(self, template_id: str, class_ids: Iterable[str]) -> ReportCardTemplate:
        template = self.get_template(template_id)
        removed = set(class_ids)
        template.assigned_to_classes = [c for c in template.assigned_to_classes if c not in removed]
        return template

    def unassign_from_levels(self, template_id: str, levels: Iterable[str]) -> ReportCardTemplate:
        template = self.get_template(template_id)
        removed = set(levels)
        template.assigned_to_levels = [lv for lv in template.assigned_to_levels if lv not in removed]
        return template

    def clear_assignments(self, template_id: str) -> ReportCardTemplate:
        template = self.get_template(template_id)
        template.assigned_to_classes = []
        template.assigned_to_levels = []
        return template

    def reassign_class_template(
        self, class_id: str, new_template_id: str, tenant_id: str
    ) -> ReportCardTemplate:
        """Move a class's direct assignment to another template."""
        # Fail before touching other templates
        self.get_template(new_template_id)
        for template in self._tenant_templates(tenant_id):
            if template.id != new_template_id and class_id in template.assigned_to_classes:
                self.unassign_from_classes(template.id, [class_id])
        return self.assign_to_classes(new_template_id, [class_id])

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_template_for_class(self, class_id: str, tenant_id: str) -> ReportCardTemplate | None:
        """
        Find the template that applies to a class.

        Args:
            class_id: Class to resolve for
            tenant_id: Tenant owning the class

        Returns:
            Directly assigned template, else level template, else the default
            template; None when nothing applies or the class is unknown.
        """
        active = [t for t in self._tenant_templates(tenant_id) if t.is_active]

        direct = next((t for t in active if class_id in t.assigned_to_classes), None)
        if direct is not None:
            return direct

        school_class = self.classes.get(class_id)
        if school_class is None:
            return None

        if school_class.level:
            by_level = next(
                (t for t in active if school_class.level in t.assigned_to_levels), None
            )
            if by_level is not None:
                return by_level

        return next((t for t in active if t.is_default), None)

    def classes_for_template(self, template_id: str, tenant_id: str) -> list[AssignedClass]:
        """Classes of a tenant covered by a template, directly or through their level."""
        template = self.templates.get(template_id)
        if template is None:
            return []

        return [
            AssignedClass(id=c.id, name=c.name, level=c.level)
            for c in self._tenant_classes(tenant_id)
            if c.id in template.assigned_to_classes or c.level in template.assigned_to_levels
        ]

    def assignment_summary(self, template_id: str, tenant_id: str) -> AssignmentSummary:
        template = self.templates.get(template_id)
        if template is None:
            return AssignmentSummary()

        direct_names = [
            self.classes[class_id].name
            for class_id in template.assigned_to_classes
            if class_id in self.classes
        ]
        return AssignmentSummary(
            total_direct_classes=len(template.assigned_to_classes),
            total_levels=len(template.assigned_to_levels),
            total_affected_classes=len(self.classes_for_template(template_id, tenant_id)),
            direct_class_names=direct_names,
            level_names=list(template.assigned_to_levels),
        )

    def _tenant_templates(self, tenant_id: str) -> list[ReportCardTemplate]:
        return [t for t in self.templates.values() if t.tenant_id == tenant_id]

    def _tenant_classes(self, tenant_id: str) -> list[SchoolClass]:
        return [c for c in self.classes.values() if c.tenant_id == tenant_id]
