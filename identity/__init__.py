"""
Identity Module
===============
MyKad (Malaysian IC) template, validation and parsing.
"""

from .mykad import (
    SMART_ID_FIELDS,
    MALAYSIAN_STATES,
    ICInfo,
    ValidationResult,
    validate_ic_number,
    parse_ic_number,
    age_from_ic,
    validate_smart_id,
    generate_smart_id_identifier,
    credential_specs,
)

__all__ = [
    "SMART_ID_FIELDS",
    "MALAYSIAN_STATES",
    "ICInfo",
    "ValidationResult",
    "validate_ic_number",
    "parse_ic_number",
    "age_from_ic",
    "validate_smart_id",
    "generate_smart_id_identifier",
    "credential_specs",
]
