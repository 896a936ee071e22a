from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

NOT_PROVIDED = '[Not provided]'

REPORT_TEMPLATE = """Report Template:
📅 Generated on: [Current Date]
🏡 Property Address: [Address]
🏛 Postcode: [Postcode]
👤 Name: [Name]
✉️ Email: [Email]
📞 Phone: [Phone]

Project Summary
Property Type: [Type]
Project Type: [Type]
Designated Areas: [Areas]
Project Specification:
[Summarise the key dimensions/specification]

Planning Assessment
Item Tested | Proposal | Standard | Result
[Assessment items in table format with ✅, ❗, or ❌]

Interpretation & Actions
[Interpretation of results and recommended actions]

Must-Do Checklist
• [List of must-do items with bullet points]

Official Rules Explained
[Relevant planning rules and regulations]

Disclaimer
This report is based solely on the information you provided. It is informal advice based on national planning rules and does not constitute a formal legal decision. You should confirm details with your Local Planning Authority before beginning work."""


def _field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or value == '':
        return NOT_PROVIDED
    return str(value)


def designated_areas_text(value: Any) -> str:
    if not value:
        return NOT_PROVIDED
    if isinstance(value, Mapping):
        return ', '.join(str(key) for key, flag in value.items() if flag)
    if isinstance(value, (list, tuple)):
        return ', '.join(str(item) for item in value if item)
    return str(value)


def specification_text(value: Any) -> str:
    if not value:
        return NOT_PROVIDED
    return json.dumps(value, ensure_ascii=False, indent=2)


def build_report_prompt(data: Mapping[str, Any]) -> str:
    return f"""Generate a UK planning permission report based on the following data. Use the structure below. If any field is missing, note it in the report.

Property Details
- Address: {_field(data, 'address')}
- Postcode: {_field(data, 'postcode')}
- Name: {_field(data, 'name')}
- Email: {_field(data, 'email')}
- Phone: {_field(data, 'phone')}

Project Details
- Property Type: {_field(data, 'homeType')}
- Project Type: {_field(data, 'projectType')}
- Designated Areas: {designated_areas_text(data.get('designatedAreas'))}
- Project Specification: {specification_text(data.get('sketch'))}

---

{REPORT_TEMPLATE}"""
