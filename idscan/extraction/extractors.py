"""Per-document-type extraction tables.

Each :class:`DocumentExtractor` is data: an ordered tuple of
:class:`~idscan.extraction.rules.FieldRule` plus the date rules for the
type. Shared rules (gender, pincode, state, relation names, ...) are
built by the helpers below and reused across tables.
"""

import re
from collections.abc import Collection
from dataclasses import dataclass
from functools import partial

from idscan.models import DocumentType, FieldName
from idscan.utils.config import ExtractionConfig

from .address import ADDRESS_VALUE, address_transform, longer_than
from .dates import DateRule, YearRange
from .identifiers import (
    is_aadhaar,
    is_driving_licence,
    is_epic,
    is_pan,
    is_passport_number,
    normalize_aadhaar,
    normalize_driving_licence,
    normalize_epic,
    normalize_pan,
    normalize_passport,
)
from .names import (
    BASE_DENYLIST,
    COMMON_SURNAMES,
    NAME_VALUE,
    clean_name,
    is_plausible_name,
    mrz_name,
    recover_full_name,
)
from .rules import (
    DEVANAGARI,
    FieldRule,
    TextViews,
    Transform,
    Validator,
    View,
    labelled,
)


@dataclass(frozen=True)
class DocumentExtractor:
    """Extraction table for one document type."""

    document_type: DocumentType
    rules: tuple[FieldRule, ...] = ()
    date_rules: tuple[DateRule, ...] = ()

    @property
    def fields(self) -> list[FieldName]:
        """Fields this extractor can produce, in table order."""
        ordered = [r.field for r in self.rules] + [d.field for d in self.date_rules]
        return list(dict.fromkeys(ordered))


# Denylists of header words that are never part of a holder's name.
PASSPORT_OFFICES = (
    "AHMEDABAD",
    "AMRITSAR",
    "BANGALORE",
    "BENGALURU",
    "BHOPAL",
    "BHUBANESWAR",
    "CHANDIGARH",
    "CHENNAI",
    "COCHIN",
    "DEHRADUN",
    "DELHI",
    "DUBAI",
    "GHAZIABAD",
    "GUWAHATI",
    "HYDERABAD",
    "JAIPUR",
    "JALANDHAR",
    "KOLKATA",
    "KOZHIKODE",
    "LUCKNOW",
    "MADURAI",
    "MUMBAI",
    "NAGPUR",
    "PATNA",
    "PUNE",
    "RAIPUR",
    "RANCHI",
    "SHIMLA",
    "SRINAGAR",
    "SURAT",
    "THANE",
    "TRIVANDRUM",
    "VISAKHAPATNAM",
)

AADHAAR_DENYLIST = BASE_DENYLIST | {
    "AADHAAR",
    "AADHAR",
    "UNIQUE",
    "IDENTIFICATION",
    "AUTHORITY",
    "ENROLMENT",
    "ENROLLMENT",
    "MERA",
    "MERI",
    "PEHCHAAN",
    "PEHCHAN",
    "DOWNLOAD",
    "DATE",
    "ISSUE",
    "HELP",
    "ADDRESS",
}
PASSPORT_DENYLIST = (
    BASE_DENYLIST
    | {
        "PASSPORT",
        "TYPE",
        "COUNTRY",
        "CODE",
        "NATIONALITY",
        "INDIAN",
        "SURNAME",
        "GIVEN",
        "NAME",
        "NAMES",
        "PLACE",
        "ISSUE",
        "EXPIRY",
        "BIRTH",
        "DATE",
        "AUTHORITY",
        "SEX",
        "FILE",
        "OLD",
        "HOLDER",
        "SIGNATURE",
        "NUMBER",
    }
    | set(PASSPORT_OFFICES)
)
PAN_DENYLIST = BASE_DENYLIST | {
    "INCOME",
    "TAX",
    "DEPARTMENT",
    "PERMANENT",
    "ACCOUNT",
    "NUMBER",
    "CARD",
    "SIGNATURE",
    "NAME",
    "DATE",
    "BIRTH",
}
DL_DENYLIST = BASE_DENYLIST | {
    "DRIVING",
    "LICENSE",
    "LICENCE",
    "MOTOR",
    "VEHICLES",
    "VEHICLE",
    "TRANSPORT",
    "UNION",
    "FORM",
    "STATE",
    "AUTHORITY",
    "DEPARTMENT",
    "RTO",
    "TILL",
    "DATE",
    "NAME",
}
VOTER_DENYLIST = BASE_DENYLIST | {
    "ELECTION",
    "COMMISSION",
    "VOTER",
    "EPIC",
    "IDENTITY",
    "CARD",
    "ELECTOR",
    "ELECTORS",
    "PHOTO",
    "NAME",
    "DATE",
}

# Canonical state / union territory name for every recognized spelling.
INDIAN_STATES: dict[str, str] = {
    "ANDHRA PRADESH": "Andhra Pradesh",
    "ARUNACHAL PRADESH": "Arunachal Pradesh",
    "ASSAM": "Assam",
    "BIHAR": "Bihar",
    "CHHATTISGARH": "Chhattisgarh",
    "CHHATISGARH": "Chhattisgarh",
    "GOA": "Goa",
    "GUJARAT": "Gujarat",
    "HARYANA": "Haryana",
    "HIMACHAL PRADESH": "Himachal Pradesh",
    "JHARKHAND": "Jharkhand",
    "KARNATAKA": "Karnataka",
    "KERALA": "Kerala",
    "MADHYA PRADESH": "Madhya Pradesh",
    "MAHARASHTRA": "Maharashtra",
    "MANIPUR": "Manipur",
    "MEGHALAYA": "Meghalaya",
    "MIZORAM": "Mizoram",
    "NAGALAND": "Nagaland",
    "ODISHA": "Odisha",
    "ORISSA": "Odisha",
    "PUNJAB": "Punjab",
    "RAJASTHAN": "Rajasthan",
    "SIKKIM": "Sikkim",
    "TAMIL NADU": "Tamil Nadu",
    "TAMILNADU": "Tamil Nadu",
    "TELANGANA": "Telangana",
    "TRIPURA": "Tripura",
    "UTTAR PRADESH": "Uttar Pradesh",
    "UTTARAKHAND": "Uttarakhand",
    "UTTARANCHAL": "Uttarakhand",
    "WEST BENGAL": "West Bengal",
    "ANDAMAN AND NICOBAR ISLANDS": "Andaman and Nicobar Islands",
    "CHANDIGARH": "Chandigarh",
    "DADRA AND NAGAR HAVELI AND DAMAN AND DIU": (
        "Dadra and Nagar Haveli and Daman and Diu"
    ),
    "DELHI": "Delhi",
    "NEW DELHI": "Delhi",
    "NCT OF DELHI": "Delhi",
    "JAMMU AND KASHMIR": "Jammu and Kashmir",
    "JAMMU & KASHMIR": "Jammu and Kashmir",
    "LADAKH": "Ladakh",
    "LAKSHADWEEP": "Lakshadweep",
    "PUDUCHERRY": "Puducherry",
    "PONDICHERRY": "Puducherry",
}

_GENDERS = {
    "M": "Male",
    "MALE": "Male",
    "पुरुष": "Male",
    "F": "Female",
    "FEMALE": "Female",
    "महिला": "Female",
    "स्त्री": "Female",
    "T": "Transgender",
    "TRANSGENDER": "Transgender",
    "ट्रांसजेंडर": "Transgender",
}

_LABEL_WORDS = frozenset(
    {"DATE", "PLACE", "OF", "ISSUE", "BIRTH", "EXPIRY", "SEX", "NAME", "FILE"}
)

_PLACE_VALUE = r"[A-Za-z][A-Za-z .]{1,40}?(?=\s*[,/]|[^A-Za-z .]|$)"
_SURNAME_LABEL = labelled(r"\bsurname\b", _PLACE_VALUE)


def _name_validator(
    denylist: Collection[str], min_length: int = 3, min_tokens: int = 1
) -> Validator:
    return partial(
        is_plausible_name,
        denylist=denylist,
        min_length=min_length,
        min_tokens=min_tokens,
    )


def _name(value: str, views: TextViews) -> str | None:
    return clean_name(value)


def _recovering(denylist: Collection[str]) -> Transform:
    """Clean a name, then try to complete it from the surname dictionary."""

    def transform(value: str, views: TextViews) -> str | None:
        name = clean_name(value)
        if name is None:
            return None
        return recover_full_name(name, views.raw, denylist)

    return transform


def _given_and_surname(denylist: Collection[str]) -> Transform:
    """Join a labelled given name with the labelled surname, if present."""

    def transform(value: str, views: TextViews) -> str | None:
        given = clean_name(value)
        if given is None:
            return None
        match = _SURNAME_LABEL.search(views.raw)
        surname = clean_name(match.group("value")) if match else None
        if surname and surname not in given.split() and surname not in denylist:
            return f"{given} {surname}"
        return recover_full_name(given, views.raw, denylist)

    return transform


def _upper(value: str, views: TextViews) -> str | None:
    return re.sub(r"\s+", " ", value).strip().upper() or None


def _gender(value: str, views: TextViews) -> str | None:
    return _GENDERS.get(value.strip().upper())


def _state(value: str, views: TextViews) -> str | None:
    return INDIAN_STATES.get(re.sub(r"\s+", " ", value).upper())


def _nationality(value: str, views: TextViews) -> str | None:
    value = value.strip().upper()
    return "INDIAN" if value in ("IND", "INDIA") else value or None


def _digits(value: str, views: TextViews) -> str | None:
    return re.sub(r"\s", "", value) or None


def _is_place(value: str) -> bool:
    tokens = value.split()
    return len(value) >= 3 and not any(t in _LABEL_WORDS for t in tokens)


def _is_pincode(value: str) -> bool:
    return bool(re.fullmatch(r"[1-9]\d{5}", value))


def _is_nationality(value: str) -> bool:
    return value.isalpha() and len(value) >= 4 and value not in _LABEL_WORDS


def _has_letters(value: str) -> bool:
    return len(value) >= 3 and bool(re.search(r"[A-Za-z]", value))


def _non_empty(value: str) -> bool:
    return bool(value)


def _alternation(words: Collection[str]) -> str:
    ordered = sorted(words, key=len, reverse=True)
    return "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in ordered)


# Field label "Name" that is not part of "Father's Name", "Given Name" etc.
_NAME_LABEL = r"(?<![A-Za-z'’][ \t])\bname\b"
_SURNAMES = "|".join(COMMON_SURNAMES)


def name_label_rule(denylist: Collection[str], min_tokens: int = 1) -> FieldRule:
    return FieldRule(
        FieldName.NAME,
        labelled(_NAME_LABEL, NAME_VALUE),
        _name_validator(denylist, min_tokens=min_tokens),
        _recovering(denylist),
    )


def generic_name_rule(denylist: Collection[str]) -> FieldRule:
    """Two or three upper-case words on one line."""
    return FieldRule(
        FieldName.NAME,
        re.compile(r"\b[A-Z]{3,}(?:[ \t]+[A-Z]+){1,2}\b"),
        _name_validator(denylist, min_tokens=2),
        _name,
    )


def gender_rules() -> tuple[FieldRule, ...]:
    return (
        FieldRule(
            FieldName.GENDER,
            labelled(r"\b(?:gender|sex)\b", rf"[A-Za-z]+|[{DEVANAGARI}]+"),
            _non_empty,
            _gender,
        ),
        FieldRule(
            FieldName.GENDER,
            re.compile(r"\b(?:TRANSGENDER|FEMALE|MALE)\b", re.IGNORECASE),
            _non_empty,
            _gender,
        ),
        FieldRule(
            FieldName.GENDER,
            re.compile("ट्रांसजेंडर|पुरुष|महिला|स्त्री"),
            _non_empty,
            _gender,
        ),
    )


def relation_rules(denylist: Collection[str]) -> tuple[FieldRule, ...]:
    validate = _name_validator(denylist)
    return (
        FieldRule(
            FieldName.FATHER_NAME,
            labelled(r"\bfather(?:'?s|’s)?\s*name\b", NAME_VALUE),
            validate,
            _name,
        ),
        FieldRule(
            FieldName.FATHER_NAME,
            labelled(r"\b[SD]\s?/\s?O\b", NAME_VALUE),
            validate,
            _name,
        ),
        FieldRule(
            FieldName.HUSBAND_NAME,
            labelled(r"\bhusband(?:'?s|’s)?\s*name\b", NAME_VALUE),
            validate,
            _name,
        ),
        FieldRule(
            FieldName.HUSBAND_NAME,
            labelled(r"\bW\s?/\s?O\b", NAME_VALUE),
            validate,
            _name,
        ),
    )


def address_rules(min_length: int) -> tuple[FieldRule, ...]:
    validate = longer_than(min_length)
    return (
        FieldRule(
            FieldName.ADDRESS,
            labelled(r"\b(?:address|residence)\b", ADDRESS_VALUE),
            validate,
            address_transform,
        ),
        FieldRule(
            FieldName.ADDRESS,
            labelled("पता", ADDRESS_VALUE),
            validate,
            address_transform,
        ),
    )


def pincode_rules() -> tuple[FieldRule, ...]:
    return (
        FieldRule(
            FieldName.PINCODE,
            labelled(
                r"\b(?:pin\s*code|pincode|pin|postal\s*code)\b",
                r"[1-9]\d{2}\s?\d{3}(?!\d)",
            ),
            _is_pincode,
            _digits,
        ),
        FieldRule(
            FieldName.PINCODE,
            re.compile(r"(?<!\d)[1-9]\d{5}(?!\d)"),
            _is_pincode,
        ),
    )


def state_rule() -> FieldRule:
    return FieldRule(
        FieldName.STATE,
        re.compile(rf"\b(?:{_alternation(INDIAN_STATES)})\b", re.IGNORECASE),
        _non_empty,
        _state,
        View.CLEAN,
    )


def district_rule() -> FieldRule:
    return FieldRule(
        FieldName.DISTRICT,
        labelled(
            r"\b(?:district|dist)\b\.?",
            r"[A-Za-z][A-Za-z .]*?(?=\s*(?:[,\n\-]|\d|$))",
        ),
        _has_letters,
        _upper,
    )


def _aadhaar(config: ExtractionConfig) -> DocumentExtractor:
    return DocumentExtractor(
        DocumentType.AADHAAR,
        rules=(
            FieldRule(
                FieldName.AADHAAR_NUMBER,
                re.compile(
                    r"(?<!\d)(?<!\d[ \t])\d{4}[ \t]?\d{4}[ \t]?\d{4}(?![ \t]?\d)"
                ),
                is_aadhaar,
                normalize_aadhaar,
            ),
            name_label_rule(AADHAAR_DENYLIST),
            # Unlabelled name printed on the line just above the birth date.
            FieldRule(
                FieldName.NAME,
                re.compile(
                    r"^[ \t]*(?P<value>[A-Za-z][A-Za-z .']{2,}?)[ \t]*\n"
                    r"[^\n]*(?:DOB|D\.O\.B|date\s*of\s*birth|year\s*of\s*birth"
                    r"|जन्म)",
                    re.IGNORECASE | re.MULTILINE,
                ),
                _name_validator(AADHAAR_DENYLIST, min_tokens=1),
                _recovering(AADHAAR_DENYLIST),
            ),
            generic_name_rule(AADHAAR_DENYLIST),
            *gender_rules(),
            *relation_rules(AADHAAR_DENYLIST),
            *address_rules(config.min_address_length),
            *pincode_rules(),
            district_rule(),
            state_rule(),
        ),
        date_rules=(
            DateRule(FieldName.DATE_OF_BIRTH, YearRange(*config.birth_years)),
        ),
    )


def _passport(config: ExtractionConfig) -> DocumentExtractor:
    denylist = PASSPORT_DENYLIST
    full_name = _name_validator(denylist, min_length=5, min_tokens=2)
    number = partial(FieldRule, FieldName.PASSPORT_NUMBER)
    return DocumentExtractor(
        DocumentType.PASSPORT,
        rules=(
            number(
                labelled(
                    r"\bpassport\s*(?:no|number|#)?\b\.?",
                    r"[A-Z]?\s?\$?\s?\d{7,9}(?!\d)",
                ),
                is_passport_number,
                normalize_passport,
            ),
            number(
                re.compile(r"[=:]\s*[A-Z]?\s*(\d{7,9})\b"),
                is_passport_number,
                normalize_passport,
                View.CLEAN,
            ),
            number(
                re.compile(r"\$\s*(\d{7,9})\b"),
                is_passport_number,
                normalize_passport,
            ),
            number(
                re.compile(r"\b[A-Z]\s?(\d{7,9})\b"),
                is_passport_number,
                normalize_passport,
            ),
            # Second line of the machine-readable zone.
            number(
                re.compile(r"^([A-Z0-9<]{9})\d[A-Z<]{3}\d{6}", re.MULTILINE),
                is_passport_number,
                normalize_passport,
            ),
            FieldRule(
                FieldName.NAME,
                re.compile(r"P<[A-Z]{3}(?P<value>[A-Z]+<<[A-Z<]*[A-Z])"),
                full_name,
                mrz_name,
            ),
            FieldRule(
                FieldName.NAME,
                labelled(r"\bgiven\s*names?(?:\s*\(s\))?", NAME_VALUE),
                full_name,
                _given_and_surname(denylist),
            ),
            name_label_rule(denylist, min_tokens=2),
            FieldRule(
                FieldName.NAME,
                re.compile(
                    rf"\b(?:[A-Z]{{3,}}[ \t]+(?:{_SURNAMES})"
                    rf"|(?:{_SURNAMES})[ \t]+[A-Z]{{3,}})\b"
                ),
                full_name,
                _name,
            ),
            FieldRule(
                FieldName.NAME,
                re.compile(r"\b[A-Z]{4,}(?:[ \t]+[A-Z]{4,}){1,2}\b"),
                full_name,
                _name,
            ),
            FieldRule(
                FieldName.PLACE_OF_ISSUE,
                labelled(r"\bplace\s*of\s*issue\b", _PLACE_VALUE),
                _is_place,
                _upper,
            ),
            FieldRule(
                FieldName.PLACE_OF_BIRTH,
                labelled(r"\bplace\s*of\s*birth\b", _PLACE_VALUE),
                _is_place,
                _upper,
            ),
            FieldRule(
                FieldName.NATIONALITY,
                labelled(r"\bnationality\b", r"[A-Za-z]{3,}"),
                _is_nationality,
                _nationality,
            ),
            FieldRule(
                FieldName.NATIONALITY,
                re.compile(r"\bINDIAN\b", re.IGNORECASE),
                _is_nationality,
                _nationality,
            ),
            FieldRule(
                FieldName.NATIONALITY,
                re.compile(r"P<(IND)"),
                _is_nationality,
                _nationality,
            ),
            *gender_rules(),
        ),
        date_rules=(
            DateRule(FieldName.DATE_OF_BIRTH, YearRange(*config.birth_years)),
            DateRule(FieldName.ISSUE_DATE, YearRange(*config.issue_years), 2),
            DateRule(FieldName.EXPIRY_DATE, YearRange(*config.expiry_years), 2),
        ),
    )


def _pan(config: ExtractionConfig) -> DocumentExtractor:
    return DocumentExtractor(
        DocumentType.PAN,
        rules=(
            FieldRule(
                FieldName.PAN_NUMBER,
                labelled(
                    r"\b(?:permanent\s*account\s*number(?:\s*card)?"
                    r"|PAN(?:\s*No)?)\b\.?",
                    r"[A-Z0-9]{10}\b",
                ),
                is_pan,
                normalize_pan,
            ),
            FieldRule(
                FieldName.PAN_NUMBER,
                re.compile(r"\b(?=[A-Z0-9]{0,9}[A-Z])[A-Z0-9]{10}\b"),
                is_pan,
                normalize_pan,
            ),
            name_label_rule(PAN_DENYLIST),
            generic_name_rule(PAN_DENYLIST),
            *relation_rules(PAN_DENYLIST)[:2],
        ),
        date_rules=(
            DateRule(FieldName.DATE_OF_BIRTH, YearRange(*config.birth_years)),
        ),
    )


def _driving_license(config: ExtractionConfig) -> DocumentExtractor:
    dl_value = (
        r"[A-Z0-9]{2}[\s\-]?[A-Z0-9]{2}[\s\-]?[A-Z0-9]{4}[\s\-]?[A-Z0-9]{7}"
        r"(?![A-Z0-9])"
    )
    return DocumentExtractor(
        DocumentType.DRIVING_LICENSE,
        rules=(
            FieldRule(
                FieldName.ID_NUMBER,
                labelled(
                    r"\b(?:DL|licen[cs]e)\s*(?:no|number)\b\.?",
                    dl_value,
                ),
                is_driving_licence,
                normalize_driving_licence,
            ),
            FieldRule(
                FieldName.ID_NUMBER,
                re.compile(rf"\b(?=[A-Z0-9]{{0,1}}[A-Z]){dl_value}"),
                is_driving_licence,
                normalize_driving_licence,
            ),
            name_label_rule(DL_DENYLIST),
            generic_name_rule(DL_DENYLIST),
            *relation_rules(DL_DENYLIST)[:2],
            *address_rules(config.min_address_length),
            *pincode_rules(),
            state_rule(),
        ),
        date_rules=(
            DateRule(FieldName.DATE_OF_BIRTH, YearRange(*config.birth_years)),
            DateRule(FieldName.ISSUE_DATE, YearRange(*config.issue_years), 2),
            DateRule(FieldName.EXPIRY_DATE, YearRange(*config.expiry_years), 2),
        ),
    )


def _voter_id(config: ExtractionConfig) -> DocumentExtractor:
    return DocumentExtractor(
        DocumentType.VOTER_ID,
        rules=(
            FieldRule(
                FieldName.ID_NUMBER,
                labelled(
                    r"\b(?:EPIC|identity\s*card|ID\s*card)\s*(?:no|number)\b\.?",
                    r"[A-Z0-9]{3}\s?[A-Z0-9]{7}(?![A-Z0-9])",
                ),
                is_epic,
                normalize_epic,
            ),
            FieldRule(
                FieldName.ID_NUMBER,
                re.compile(r"\b(?=[A-Z0-9]{0,2}[A-Z])[A-Z0-9]{3}\d{7}\b"),
                is_epic,
                normalize_epic,
            ),
            FieldRule(
                FieldName.NAME,
                labelled(r"\belector(?:'?s|’s)?\s*name\b", NAME_VALUE),
                _name_validator(VOTER_DENYLIST),
                _recovering(VOTER_DENYLIST),
            ),
            name_label_rule(VOTER_DENYLIST),
            generic_name_rule(VOTER_DENYLIST),
            *relation_rules(VOTER_DENYLIST),
            *gender_rules(),
            *address_rules(config.min_address_length),
            *pincode_rules(),
            district_rule(),
            state_rule(),
            FieldRule(
                FieldName.CONSTITUENCY,
                labelled(
                    r"\b(?:assembly\s*)?constituency"
                    r"(?:\s*(?:no\.?\s*(?:and|&)\s*)?name)?\b",
                    r"[A-Za-z0-9][A-Za-z0-9 .\-]{2,60}?(?=\s*(?:[,\n]|$))",
                ),
                _has_letters,
                _upper,
            ),
        ),
        date_rules=(
            DateRule(FieldName.DATE_OF_BIRTH, YearRange(*config.birth_years)),
        ),
    )


def build_extractors(
    config: ExtractionConfig | None = None,
) -> dict[DocumentType, DocumentExtractor]:
    """Build the extraction table of every supported document type.

    Args:
        config: Extraction settings (year buckets, address length).

    Returns:
        Mapping of document type to its extractor. ``OTHER`` has an
        empty table.
    """
    config = config or ExtractionConfig()
    return {
        DocumentType.AADHAAR: _aadhaar(config),
        DocumentType.PASSPORT: _passport(config),
        DocumentType.PAN: _pan(config),
        DocumentType.DRIVING_LICENSE: _driving_license(config),
        DocumentType.VOTER_ID: _voter_id(config),
        DocumentType.OTHER: DocumentExtractor(DocumentType.OTHER),
    }
