"""
MyKad (Malaysian IC) Helpers
============================

Smart ID template, IC number validation/parsing and the mapping from a
filled-in template to credential specs for the ledger.

IC format: YYMMDD-PB-###G
- YYMMDD: date of birth. YY > 25 means 19YY, otherwise 20YY
- PB:     place of birth code
- G:      last digit, odd = Male, even = Female
"""

import datetime
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ledger.credentials import CredentialSpec

IC_NUMBER_RE = re.compile(r"^\d{6}-\d{2}-\d{4}$")

MALAYSIAN_STATES: Tuple[str, ...] = (
    "Johor",
    "Kedah",
    "Kelantan",
    "Melaka",
    "Negeri Sembilan",
    "Pahang",
    "Penang",
    "Perak",
    "Perlis",
    "Sabah",
    "Sarawak",
    "Selangor",
    "Terengganu",
    "W.P. Kuala Lumpur",
    "W.P. Labuan",
    "W.P. Putrajaya",
)

# Simplified birth place codes
BIRTH_PLACE_CODES: Dict[str, str] = {
    "01": "Johor",
    "02": "Kedah",
    "03": "Kelantan",
    "04": "Melaka",
    "05": "Negeri Sembilan",
    "06": "Pahang",
    "07": "Penang",
    "08": "Perak",
    "09": "Perlis",
    "10": "Selangor",
    "11": "Terengganu",
    "12": "Sabah",
    "13": "Sarawak",
    "14": "W.P. Kuala Lumpur",
    "15": "W.P. Labuan",
    "16": "W.P. Putrajaya",
}


@dataclass(frozen=True)
class SmartIDField:
    key: str
    label: str
    required: bool
    type: str = "text"  # text | select | date
    options: Tuple[str, ...] = ()
    double_hash: bool = False
    placeholder: str = ""


SMART_ID_FIELDS: Tuple[SmartIDField, ...] = (
    # Personal information
    SmartIDField("fullName", "Full Name (as per IC)", True, placeholder="e.g., AHMAD BIN ABDULLAH"),
    SmartIDField("icNumber", "IC Number", True, double_hash=True, placeholder="e.g., 901231-14-5678"),
    # Birth information
    SmartIDField("dateOfBirth", "Date of Birth", True, type="date", placeholder="DD/MM/YYYY"),
    SmartIDField("placeOfBirth", "Place of Birth", True, placeholder="e.g., Kuala Lumpur"),
    # Identity details
    SmartIDField("gender", "Gender", True, type="select", options=("Male", "Female")),
    SmartIDField(
        "race", "Race", True, type="select",
        options=("Malay", "Chinese", "Indian", "Bumiputera Sabah", "Bumiputera Sarawak", "Others"),
    ),
    SmartIDField(
        "religion", "Religion", True, type="select",
        options=("Islam", "Buddhism", "Christianity", "Hinduism", "Others"),
    ),
    SmartIDField(
        "citizenship", "Citizenship", True, type="select",
        options=("Malaysian Citizen", "Permanent Resident", "Others"),
    ),
    # Address
    SmartIDField("addressLine1", "Address Line 1", True, placeholder="e.g., No. 123, Jalan Merdeka"),
    SmartIDField("addressLine2", "Address Line 2", False, placeholder="e.g., Taman Sejahtera"),
    SmartIDField("postcode", "Postcode", True, placeholder="e.g., 50000"),
    SmartIDField("city", "City", True, placeholder="e.g., Kuala Lumpur"),
    SmartIDField("state", "State", True, type="select", options=MALAYSIAN_STATES),
    # Contact (optional)
    SmartIDField("phoneNumber", "Phone Number (Optional)", False, placeholder="e.g., +60123456789"),
    SmartIDField("email", "Email Address (Optional)", False, placeholder="e.g., ahmad@email.com"),
)


@dataclass(frozen=True)
class ICInfo:
    birth_year: int
    birth_month: int
    birth_day: int
    birth_place: str
    gender: str


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def validate_ic_number(ic_number: str) -> bool:
    return isinstance(ic_number, str) and bool(IC_NUMBER_RE.match(ic_number))


def parse_ic_number(ic_number: str) -> Optional[ICInfo]:
    """Extract birth date, birth place and gender. None if the format is wrong."""
    if not validate_ic_number(ic_number):
        return None

    date_part, place_part, serial_part = ic_number.split("-")
    yy = int(date_part[0:2])
    full_year = 1900 + yy if yy > 25 else 2000 + yy

    last_digit = int(serial_part[3])
    gender = "Male" if last_digit % 2 == 1 else "Female"

    return ICInfo(
        birth_year=full_year,
        birth_month=int(date_part[2:4]),
        birth_day=int(date_part[4:6]),
        birth_place=BIRTH_PLACE_CODES.get(place_part, "Unknown"),
        gender=gender,
    )


def age_from_ic(ic_number: str, today: Optional[datetime.date] = None) -> Optional[int]:
    """Age in completed years on `today`, or None for a malformed IC."""
    info = parse_ic_number(ic_number)
    if info is None:
        return None
    today = today or datetime.date.today()
    age = today.year - info.birth_year
    if (today.month, today.day) < (info.birth_month, info.birth_day):
        age -= 1
    return age


def validate_smart_id(data: Mapping[str, Any]) -> ValidationResult:
    if not isinstance(data, Mapping):
        return ValidationResult(is_valid=False, errors=["Smart ID data must be a JSON object"])

    errors: List[str] = []
    for spec_field in SMART_ID_FIELDS:
        if spec_field.required and not data.get(spec_field.key):
            errors.append(f"{spec_field.label} is required")

    ic_number = data.get("icNumber")
    if ic_number and not validate_ic_number(ic_number):
        errors.append("IC Number format is invalid (should be YYMMDD-PB-####)")

    return ValidationResult(is_valid=not errors, errors=errors)


def generate_smart_id_identifier(ic_number: str) -> str:
    return f"SMARTID-MY-{ic_number.replace('-', '')}"


def credential_specs(data: Mapping[str, Any]) -> List[CredentialSpec]:
    """Filled-in template fields as credential specs, template order, blanks skipped."""
    specs = []
    for spec_field in SMART_ID_FIELDS:
        value = data.get(spec_field.key)
        if not value:
            continue
        specs.append(CredentialSpec(spec_field.key, str(value), spec_field.double_hash))
    return specs
