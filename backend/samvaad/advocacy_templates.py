"""Static advocacy template catalog plus fill and suggestion helpers."""

from __future__ import annotations

from typing import Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

AdvocacyCategory = Literal[
    "financial",
    "career",
    "services",
    "customer_service",
    "healthcare",
    "education",
    "legal",
    "social",
]


class TemplateNotFoundError(LookupError):
    """Raised when a template id is not part of the catalog."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class AdvocacyTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    category: AdvocacyCategory
    description: str
    body: str
    variables: Tuple[str, ...]
    cultural_context: str
    formality_level: Literal["casual", "professional", "formal", "diplomatic"]
    tips: Tuple[str, ...]
    keywords: Tuple[str, ...] = ()


_CATALOG: Tuple[AdvocacyTemplate, ...] = (
    AdvocacyTemplate(
        id="fee_extension",
        title="Fee Extension Request",
        category="financial",
        description="Request for deadline extension on payments",
        body=(
            "Dear {{recipient}},\n\n"
            "I hope this message finds you well. I am writing to respectfully request an extension for "
            "{{payment_type}} that is currently due on {{due_date}}.\n\n"
            "{{reason}}\n\n"
            "I have maintained a consistent track record with {{organization}} and am committed to fulfilling my "
            "obligations. I would be grateful if you could consider extending the deadline to {{requested_date}}.\n\n"
            "Thank you for your understanding and consideration.\n\n"
            "Best regards,\n"
            "{{sender_name}}"
        ),
        variables=("recipient", "payment_type", "due_date", "reason", "organization", "requested_date", "sender_name"),
        cultural_context="formal_western",
        formality_level="formal",
        tips=(
            "Mention your positive history with the organization",
            "Be specific about the new date you are requesting",
            "Briefly explain the reason without over-sharing",
            "Express gratitude and commitment to resolve",
        ),
        keywords=("fee", "payment", "extension", "deadline", "due", "late", "delay"),
    ),
    AdvocacyTemplate(
        id="salary_negotiation",
        title="Salary Negotiation",
        category="career",
        description="Professional salary negotiation message",
        body=(
            "Dear {{manager_name}},\n\n"
            "Thank you for the opportunity to discuss my compensation. Based on my contributions over the past "
            "{{time_period}}, including {{achievements}}, I would like to discuss a salary adjustment.\n\n"
            "After researching market rates for {{position}} in {{location}}, I believe a salary of "
            "{{requested_salary}} would be appropriate given my experience and the value I bring to the team.\n\n"
            "I am open to discussing this further at your convenience.\n\n"
            "Best regards,\n"
            "{{sender_name}}"
        ),
        variables=(
            "manager_name",
            "time_period",
            "achievements",
            "position",
            "location",
            "requested_salary",
            "sender_name",
        ),
        cultural_context="professional_western",
        formality_level="professional",
        tips=(
            "Lead with your value and contributions",
            "Research market rates before the conversation",
            "Be specific about achievements with metrics if possible",
            "Show flexibility and willingness to discuss",
        ),
        keywords=("salary", "raise", "pay", "compensation", "negotiate", "promotion"),
    ),
    AdvocacyTemplate(
        id="medical_appointment",
        title="Medical Appointment Request",
        category="healthcare",
        description="Request for medical appointment with specific needs",
        body=(
            "Hello,\n\n"
            "I would like to schedule an appointment with {{doctor_specialty}} regarding {{health_concern}}.\n\n"
            "{{urgency_statement}}\n\n"
            "My availability is {{availability}}. I have the following considerations that may be helpful to know:\n"
            "{{special_considerations}}\n\n"
            "Please let me know the earliest available appointment.\n\n"
            "Thank you,\n"
            "{{sender_name}}\n"
            "Contact: {{contact_info}}"
        ),
        variables=(
            "doctor_specialty",
            "health_concern",
            "urgency_statement",
            "availability",
            "special_considerations",
            "sender_name",
            "contact_info",
        ),
        cultural_context="neutral",
        formality_level="professional",
        tips=(
            "Be clear about urgency level",
            "Mention any accessibility needs",
            "Provide flexible availability options",
            "Include relevant medical history if appropriate",
        ),
        keywords=("doctor", "medical", "appointment", "health", "clinic", "hospital"),
    ),
    AdvocacyTemplate(
        id="complaint_resolution",
        title="Complaint Resolution",
        category="customer_service",
        description="Professional complaint with resolution request",
        body=(
            "Dear Customer Service Team,\n\n"
            "I am writing regarding {{issue_description}} that occurred on {{date}}.\n\n"
            "{{details}}\n\n"
            "I have been a loyal customer for {{duration}} and this experience has been disappointing. "
            "I would appreciate {{resolution_request}}.\n\n"
            "Please respond at your earliest convenience.\n\n"
            "Regards,\n"
            "{{sender_name}}\n"
            "Account/Order: {{reference_number}}"
        ),
        variables=(
            "issue_description",
            "date",
            "details",
            "duration",
            "resolution_request",
            "sender_name",
            "reference_number",
        ),
        cultural_context="assertive_professional",
        formality_level="professional",
        tips=(
            "State facts clearly without emotional language",
            "Be specific about what resolution you want",
            "Mention your customer history",
            "Keep a record of all communications",
        ),
        keywords=("complaint", "issue", "problem", "refund", "return", "disappointed"),
    ),
    AdvocacyTemplate(
        id="accommodation_request",
        title="Accessibility Accommodation Request",
        category="services",
        description="Request for disability or accessibility accommodations",
        body=(
            "Dear {{recipient}},\n\n"
            "I am writing to request accommodations for {{event_or_service}} scheduled for {{date}}.\n\n"
            "I require the following accommodations due to {{general_reason}}:\n"
            "{{accommodation_list}}\n\n"
            "I am happy to discuss these needs further and provide any documentation if required.\n\n"
            "Thank you for your commitment to accessibility.\n\n"
            "Best regards,\n"
            "{{sender_name}}\n"
            "{{contact_info}}"
        ),
        variables=(
            "recipient",
            "event_or_service",
            "date",
            "general_reason",
            "accommodation_list",
            "sender_name",
            "contact_info",
        ),
        cultural_context="neutral",
        formality_level="professional",
        tips=(
            "You are not required to disclose specific medical conditions",
            "Be clear about what accommodations you need",
            "Reference relevant accessibility laws if needed",
            "Follow up if you do not receive a response",
        ),
        keywords=("accommodation", "disability", "accessibility", "wheelchair", "hearing", "visual"),
    ),
    AdvocacyTemplate(
        id="landlord_issue",
        title="Landlord/Property Issue",
        category="legal",
        description="Communicate with landlord about property issues",
        body=(
            "Dear {{landlord_name}},\n\n"
            "I am writing to formally notify you of {{issue_description}} at {{property_address}}.\n\n"
            "This issue was first noticed on {{date_noticed}} and has {{impact_description}}.\n\n"
            "Under our lease agreement and applicable housing regulations, I kindly request that this be addressed "
            "by {{requested_deadline}}.\n\n"
            "Please confirm receipt of this notice and provide an expected timeline for resolution.\n\n"
            "Thank you,\n"
            "{{sender_name}}\n"
            "Unit: {{unit_number}}"
        ),
        variables=(
            "landlord_name",
            "issue_description",
            "property_address",
            "date_noticed",
            "impact_description",
            "requested_deadline",
            "sender_name",
            "unit_number",
        ),
        cultural_context="formal_legal",
        formality_level="formal",
        tips=(
            "Document everything with photos and dates",
            "Keep copies of all communications",
            "Reference lease terms when applicable",
            "Set reasonable but firm deadlines",
        ),
        keywords=("landlord", "rent", "apartment", "repair", "maintenance", "lease"),
    ),
    AdvocacyTemplate(
        id="school_communication",
        title="School/Teacher Communication",
        category="education",
        description="Communicate with teachers or school administration",
        body=(
            "Dear {{teacher_name}},\n\n"
            "I am {{sender_name}}, {{relationship}} of {{student_name}} in your {{class_name}} class.\n\n"
            "I am reaching out regarding {{topic}}.\n\n"
            "{{details}}\n\n"
            "I would appreciate the opportunity to {{requested_action}}.\n\n"
            "Thank you for your dedication to our children's education.\n\n"
            "Best regards,\n"
            "{{sender_name}}\n"
            "{{contact_info}}"
        ),
        variables=(
            "teacher_name",
            "sender_name",
            "relationship",
            "student_name",
            "class_name",
            "topic",
            "details",
            "requested_action",
            "contact_info",
        ),
        cultural_context="respectful_collaborative",
        formality_level="professional",
        tips=(
            "Approach as a partner in the child's education",
            "Be specific about concerns or requests",
            "Acknowledge the teacher's efforts",
            "Suggest a meeting if the issue is complex",
        ),
        keywords=("teacher", "school", "student", "class", "grade", "homework"),
    ),
    AdvocacyTemplate(
        id="social_boundary",
        title="Setting Social Boundaries",
        category="social",
        description="Politely decline or set boundaries in social situations",
        body=(
            "Hi {{recipient_name}},\n\n"
            "Thank you for {{invitation_or_request}}.\n\n"
            "{{acknowledgment}}\n\n"
            "However, {{reason_or_boundary}}.\n\n"
            "{{alternative_if_any}}\n\n"
            "I hope you understand, and I appreciate your consideration.\n\n"
            "{{closing}},\n"
            "{{sender_name}}"
        ),
        variables=(
            "recipient_name",
            "invitation_or_request",
            "acknowledgment",
            "reason_or_boundary",
            "alternative_if_any",
            "closing",
            "sender_name",
        ),
        cultural_context="warm_assertive",
        formality_level="casual",
        tips=(
            "You do not owe anyone a detailed explanation",
            "Be kind but firm",
            "Offer alternatives only if you genuinely want to",
            "It's okay to say no",
        ),
        keywords=("decline", "no", "boundary", "invitation", "uncomfortable", "cancel"),
    ),
)

ADVOCACY_TEMPLATES: Dict[str, AdvocacyTemplate] = {template.id: template for template in _CATALOG}


def list_templates() -> List[AdvocacyTemplate]:
    return list(_CATALOG)


def get_template(template_id: str) -> AdvocacyTemplate:
    try:
        return ADVOCACY_TEMPLATES[template_id]
    except KeyError:
        raise TemplateNotFoundError(template_id) from None


def templates_by_category(category: str) -> List[AdvocacyTemplate]:
    return [template for template in _CATALOG if template.category == category]


def fill_template(template: AdvocacyTemplate, values: Optional[Mapping[str, str]]) -> str:
    """Substitute every declared ``{{variable}}``; missing values become ``[variable]``."""
    supplied = values or {}
    result = template.body
    for variable in template.variables:
        value = supplied.get(variable)
        replacement = str(value) if value else f"[{variable}]"
        result = result.replace(f"{{{{{variable}}}}}", replacement)
    return result


def fill_template_by_id(template_id: str, values: Optional[Mapping[str, str]]) -> str:
    return fill_template(get_template(template_id), values)


def suggest_templates(user_text: str) -> List[AdvocacyTemplate]:
    """Every template with at least one keyword in ``user_text``, in catalog order."""
    text = user_text.lower()
    return [
        template
        for template in _CATALOG
        if any(keyword in text for keyword in template.keywords)
    ]


__all__ = [
    "ADVOCACY_TEMPLATES",
    "AdvocacyCategory",
    "AdvocacyTemplate",
    "TemplateNotFoundError",
    "fill_template",
    "fill_template_by_id",
    "get_template",
    "list_templates",
    "suggest_templates",
    "templates_by_category",
]
