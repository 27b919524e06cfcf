"""Seed script to create sample form templates for development/demo."""

import sys
import os
import json

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from formintake.database import SessionLocal, init_db
from formintake.models.template import FormTemplate
from formintake.schemas.structure import parse_schema

# Sample templates, one per benefits category
TEMPLATES = [
    {
        "name": "401(k) Enrollment Form",
        "description": "Employee 401(k) plan enrollment and contribution setup",
        "category": "401k",
        "structure": {
            "formName": "401k Enrollment",
            "description": "Employee 401k enrollment form",
            "pages": [
                {
                    "pageNumber": 1,
                    "title": "Personal Information",
                    "fields": [
                        {"id": "firstName", "type": "text", "label": "First Name", "required": True},
                        {"id": "lastName", "type": "text", "label": "Last Name", "required": True},
                        {"id": "employeeId", "type": "text", "label": "Employee ID", "required": True},
                    ],
                },
                {
                    "pageNumber": 2,
                    "title": "Contributions",
                    "fields": [
                        {"id": "contributionPercent", "type": "number", "label": "Contribution (%)", "required": True},
                        {
                            "id": "contributionType",
                            "type": "radio",
                            "label": "Contribution Type",
                            "required": True,
                            "validation": {"options": ["Pre-tax", "Roth", "Split"]},
                        },
                    ],
                },
            ],
        },
    },
    {
        "name": "COBRA Continuation Coverage",
        "description": "COBRA health insurance continuation coverage election",
        "category": "COBRA",
        "structure": {
            "formName": "COBRA Coverage",
            "description": "COBRA continuation coverage form",
            "pages": [
                {
                    "pageNumber": 1,
                    "title": "Coverage Selection",
                    "fields": [
                        {
                            "id": "coverage",
                            "type": "radio",
                            "label": "Select Coverage",
                            "required": True,
                            "validation": {"options": ["Medical Only", "Dental Only", "Vision Only", "All Coverage"]},
                        },
                        {
                            "id": "dependents",
                            "type": "checkbox",
                            "label": "Covered Dependents",
                            "validation": {"options": ["Spouse", "Children", "Domestic Partner"]},
                        },
                    ],
                },
            ],
        },
    },
    {
        "name": "Employee Onboarding Form",
        "description": "New employee information and benefits enrollment",
        "category": "Onboarding",
        "structure": {
            "formName": "Employee Onboarding",
            "description": "New employee onboarding form",
            "pages": [
                {
                    "pageNumber": 1,
                    "title": "Personal Details",
                    "fields": [
                        {"id": "fullName", "type": "text", "label": "Full Name", "required": True},
                        {"id": "email", "type": "email", "label": "Email Address", "required": True},
                        {"id": "phone", "type": "phone", "label": "Phone Number", "required": True},
                    ],
                },
            ],
        },
    },
]


def seed_database():
    """Create or refresh the sample templates."""
    db = SessionLocal()

    try:
        print("Creating templates...")

        for template_config in TEMPLATES:
            structure_json = json.dumps(template_config["structure"])
            total_pages = parse_schema(structure_json).total_pages

            template = db.query(FormTemplate).filter(FormTemplate.name == template_config["name"]).first()
            if not template:
                template = FormTemplate(
                    name=template_config["name"],
                    description=template_config["description"],
                    category=template_config["category"],
                    structure_json=structure_json,
                    total_pages=total_pages,
                    is_active=True,
                    created_by="System",
                )
                db.add(template)
                print(f"  Created template: {template_config['name']}")
            else:
                # Update existing template with latest structure
                template.structure_json = structure_json
                template.total_pages = total_pages
                template.description = template_config["description"]
                print(f"  Updated template: {template_config['name']}")

        db.commit()

        print("\nSeed data created successfully!")
        print(f"\nCreated {len(TEMPLATES)} templates:")
        for t in TEMPLATES:
            print(f"  - {t['name']}")
        print("\nSend X-User-Id / X-User-Role headers to act as a user, e.g.")
        print("  X-User-Id: admin      X-User-Role: administrator")
        print("  X-User-Id: client1    X-User-Role: client")

    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    # Create tables
    print("Creating database tables...")
    init_db()

    # Seed data
    seed_database()
