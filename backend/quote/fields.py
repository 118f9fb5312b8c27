"""Quote form field table and plain-text formatting helpers."""

from typing import Mapping

NOT_PROVIDED = "Not provided"

SUMMARY_TITLE = "New AgriBuild quote request"

# (section title, ((field name, label), ...)) in display order
QUOTE_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Project Details",
        (
            ("supply_option", "Package required"),
            ("division", "Division"),
            ("proposed_use", "Proposed use"),
            ("building_type", "Building type"),
            ("units", "Units"),
            ("length", "Length"),
            ("width", "Width"),
            ("height", "Height"),
            ("project_notes", "Project notes"),
        ),
    ),
    (
        "Specification",
        (
            ("steelwork_finish", "Steelwork finish"),
            ("roof_material", "Roof material"),
            ("wall_material", "Wall material"),
            ("heated", "Heated"),
            ("cladding", "Cladding preference"),
            ("door_types", "Door types"),
            ("door_details", "Door details"),
            ("internal_fittings", "Internal fittings"),
        ),
    ),
    (
        "Site & Delivery",
        (
            ("site_postcode", "Site postcode"),
            ("site_address", "Site address"),
            ("site_setting", "Site setting"),
            ("planning_status", "Planning status"),
            ("timescales", "Timescales"),
            ("groundworks", "Groundworks"),
            ("other_info", "Other info"),
        ),
    ),
    (
        "Contact Details",
        (
            ("first_name", "First name"),
            ("last_name", "Surname"),
            ("email", "Email"),
            ("telephone", "Telephone"),
            ("return_date", "Return date"),
            ("client_message", "Additional requirements"),
            ("hear_about", "Heard about us"),
            ("marketing", "Marketing consent"),
        ),
    ),
)

FIELD_LABELS: dict[str, str] = {
    name: label for _, fields in QUOTE_SECTIONS for name, label in fields
}


def field_text(value) -> str:
    """Return a form value as trimmed text; repeated keys are joined with ', '."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(t for t in (field_text(v) for v in value) if t)
    return str(value).strip()


def format_line(label: str, value) -> str:
    """``"Label: value"``, or ``"Label:"`` when the value is empty."""
    text = field_text(value)
    if not text:
        return f"{label}:"
    return f"{label}: {text}"


def defaulted_value(value) -> str:
    """Trimmed value, or ``"Not provided"`` when empty or absent."""
    return field_text(value) or NOT_PROVIDED


def build_summary(fields: Mapping) -> str:
    """Build the plain-text summary used for the email body and the stored record.

    Every known field is listed exactly once, in section order; unknown keys
    are ignored.
    """
    lines = [SUMMARY_TITLE, "-" * 32]
    for _, section_fields in QUOTE_SECTIONS:
        lines.append("")
        for name, label in section_fields:
            lines.append(format_line(label, fields.get(name)))
    return "\n".join(lines)


def build_subject(fields: Mapping) -> str:
    """Mail subject naming the requester. Whitespace runs in names, line breaks
    included, collapse to single spaces so the subject stays one header line."""
    name_parts = [
        text
        for text in (
            " ".join(field_text(fields.get("first_name")).split()),
            " ".join(field_text(fields.get("last_name")).split()),
        )
        if text
    ]
    if name_parts:
        return f"New quote request: {' '.join(name_parts)}"
    return "New quote request"
