"""Template registry — maps template names to template classes.

Each template knows how to render a subject and body from the variables
the moderation workflow supplies.
"""

from reviews.notification.templates.review_approved import ReviewApprovedTemplate
from reviews.notification.templates.review_rejected import ReviewRejectedTemplate
from reviews.notification.templates.review_reported import ReviewReportedTemplate
from reviews.notification.templates.review_submitted import ReviewSubmittedTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    template.name: template
    for template in (
        ReviewSubmittedTemplate,
        ReviewApprovedTemplate,
        ReviewRejectedTemplate,
        ReviewReportedTemplate,
    )
}


def get_template(template_name: str):
    """Look up a template class by name."""
    template_cls = TEMPLATE_REGISTRY.get(template_name)
    if template_cls is None:
        raise ValueError(f"No template registered with name: {template_name}")
    return template_cls
